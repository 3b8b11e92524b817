"""A directory of symlinks that remembers which paths have been seen.

Every entry is a single symbolic link named after a hash of the
canonical path it points to. Creating and removing a link are atomic
filesystem operations, so several processes can register and
unregister paths at the same time without a lock over the registry.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from envreg._src.canonical import CanonicalPath
from envreg._src.exceptions import (
    DecodeError,
    NotFound,
    RegistrationError,
    RegistryIOError,
)
from envreg._src.utils import ensure_dir, hash_string, short_uuid


logger = logging.getLogger(__name__)

RegistryKey = str

_TEMP_PREFIX = ".tmp-"

# keys are sha256 hex digests, nothing else can name an entry
_KEY_PATTERN = re.compile("[0-9a-f]{64}")


@dataclass(frozen=True)
class RegistryEntry:
    key: RegistryKey
    path: CanonicalPath


class LinkRegistry:
    @classmethod
    def open(cls, root: str | os.PathLike) -> "LinkRegistry":
        """Open the registry at `root`, creating the directory if needed.

        Raises
        ------
        RegistryIOError
            If the directory cannot be created or is not a directory
        """
        root = Path(root)
        try:
            ensure_dir(root)
        except OSError as err:
            raise RegistryIOError(root, err) from err
        if not root.is_dir():
            raise RegistryIOError(root, "not a directory")
        return cls(root)

    def __init__(self, root: Path):
        self.root = root

    @staticmethod
    def key_for(path: CanonicalPath | str | os.PathLike) -> RegistryKey:
        """Derive the key of the entry for `path`. Pure, touches nothing on disk."""
        return hash_string(os.fspath(path))

    @staticmethod
    def is_valid_key(key: str) -> bool:
        return _KEY_PATTERN.fullmatch(key) is not None

    def _entry_path(self, key: RegistryKey) -> Path:
        return self.root / key

    def register(self, path: CanonicalPath) -> RegistryKey:
        """Register a canonical path, returning its key.

        Registering a path that is already present returns the existing
        key and leaves the entry untouched.
        """
        key = self.key_for(path)
        entry_path = self._entry_path(key)
        if os.path.lexists(entry_path):
            logger.debug("%s is already registered as %s", path, key)
            return key

        # the link is placed with a rename so a reader never sees
        # a half written entry
        temp_path = self.root / f"{_TEMP_PREFIX}{key}-{short_uuid()}"
        try:
            os.symlink(os.fspath(path), temp_path)
            os.replace(temp_path, entry_path)
        except OSError as err:
            try:
                os.unlink(temp_path)
            except FileNotFoundError:
                pass
            except OSError:
                logger.warning("could not remove temporary link %s", temp_path)
            raise RegistrationError(path, err) from err

        logger.debug("registered %s as %s", path, key)
        return key

    def unregister(self, key: RegistryKey) -> None:
        """Remove the entry for `key`.

        Removing a key that is not registered is not an error, another
        process may have removed it first.
        """
        if not self.is_valid_key(key):
            logger.debug("%r is not a registry key", key)
            return
        entry_path = self._entry_path(key)
        try:
            os.unlink(entry_path)
        except FileNotFoundError:
            logger.debug("%s was not registered", key)
            return
        except OSError as err:
            raise RegistryIOError(entry_path, err) from err
        logger.debug("unregistered %s", key)

    def try_iter(self, prune_stale: bool = False) -> Iterator[RegistryEntry]:
        """Iterate over the registered entries.

        Reading the registry directory happens right away so that a broken
        registry raises here. Individual entries are read lazily; malformed
        entries and entries whose target no longer exists are skipped.

        Parameters
        ----------
        prune_stale: bool
            Remove entries whose target no longer exists while iterating

        Raises
        ------
        RegistryIOError
            If the registry directory cannot be read
        """
        try:
            names = sorted(os.listdir(self.root))
        except OSError as err:
            raise RegistryIOError(self.root, err) from err

        return self._iter_entries(names, prune_stale)

    def _iter_entries(self, names: list[str], prune_stale: bool) -> Iterator[RegistryEntry]:
        listed = set(names)
        seen: set[CanonicalPath] = set()
        for name in names:
            if name.startswith(_TEMP_PREFIX):
                continue
            try:
                entry = self._read_entry(name)
            except DecodeError as err:
                logger.debug("skipping registry entry: %s", err.msg)
                continue
            except NotFound as err:
                logger.debug("skipping registry entry %s: %s", name, err.msg)
                if prune_stale:
                    self._prune(name)
                continue

            expected_key = self.key_for(entry.path)
            if entry.path in seen or (expected_key != name and expected_key in listed):
                # the target now resolves to a path that has its own entry
                logger.debug("skipping registry entry %s: duplicate of %s", name, entry.path)
                if prune_stale and expected_key != name:
                    self._prune(name)
                continue

            seen.add(entry.path)
            yield entry

    def _read_entry(self, key: RegistryKey) -> RegistryEntry:
        entry_path = self._entry_path(key)
        if not self.is_valid_key(key):
            raise DecodeError(entry_path, "not a registry key")
        try:
            target = os.readlink(entry_path)
        except FileNotFoundError as err:
            # removed by someone else after the directory was listed
            raise DecodeError(entry_path, "entry vanished") from err
        except OSError as err:
            raise DecodeError(entry_path, f"not a registry link ({err.strerror})") from err

        try:
            path = CanonicalPath.new(target)
        except OSError as err:
            raise DecodeError(entry_path, f"cannot resolve {target} ({err.strerror})") from err
        return RegistryEntry(key=key, path=path)

    def _prune(self, key: RegistryKey) -> None:
        try:
            self.unregister(key)
        except RegistryIOError as err:
            logger.warning("could not prune stale entry %s: %s", key, err.msg)
        else:
            logger.debug("pruned stale entry %s", key)
