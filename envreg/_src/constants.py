# Name of envreg managed directories (config, data, cache)
ENVREG_DIR_NAME = "envreg"

# Directory under the cache dir holding one link per registered environment
REGISTRY_DIR_NAME = "registered_environments"

# Every environment keeps its descriptor in <env>/.envreg/env.yaml
DOT_ENV_DIR_NAME = ".envreg"
ENV_FILE_NAME = "env.yaml"
ENV_FILE_VERSION = 1

CONFIG_FILE_NAME = "config.yaml"

ENV_VAR_PREFIX = "ENVREG_"
CONFIG_DIR_ENV_VAR = "ENVREG_CONFIG_DIR"

# JSON list of the environments activated in the current shell lineage,
# oldest first. Maintained by whatever activates environments.
ACTIVE_ENVIRONMENTS_VAR = "ENVREG_ACTIVE_ENVIRONMENTS"

REMOTE_PATH_PLACEHOLDER = "(remote)"
