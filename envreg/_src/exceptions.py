class EnvregError(Exception):
    """Base class for every error raised by envreg"""


class NotFound(EnvregError):
    def __init__(self, path):
        self.path = path
        self.msg = f"Path `{path}` does not exist"
        super().__init__(self.msg)


class RegistryIOError(EnvregError):
    def __init__(self, path, err):
        self.path = path
        self.msg = (
            f"Failed to access the environment registry!"
            f"\nRegistry: `{path}`"
            f"\nError message: {err}"
        )
        super().__init__(self.msg)


class RegistrationError(EnvregError):
    def __init__(self, path, err):
        self.path = path
        self.msg = (
            f"Failed to register environment!"
            f"\nEnvironment: `{path}`"
            f"\nError message: {err}"
        )
        super().__init__(self.msg)


class DecodeError(EnvregError):
    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        self.msg = f"Could not decode `{path}`: {reason}"
        super().__init__(self.msg)


class EnvironmentExists(EnvregError):
    def __init__(self, path):
        self.path = path
        self.msg = f"An environment already exists at `{path}`"
        super().__init__(self.msg)


class ConfigError(EnvregError):
    def __init__(self, path, err):
        self.path = path
        self.msg = (
            f"Failed to load configuration!"
            f"\nConfig file: `{path}`"
            f"\nError message: {err}"
        )
        super().__init__(self.msg)
