import errno
import os
from functools import total_ordering
from pathlib import Path

from envreg._src.exceptions import NotFound


@total_ordering
class CanonicalPath:
    """An absolute, symlink free path to an existing file or directory.

    Two environment locations are the same environment iff their
    canonical paths are equal. The path is resolved against the
    filesystem every time one is constructed, nothing is cached.
    """

    @classmethod
    def new(cls, path: str | os.PathLike) -> "CanonicalPath":
        try:
            resolved = Path(path).expanduser().resolve(strict=True)
        except (FileNotFoundError, NotADirectoryError, RuntimeError) as err:
            # RuntimeError is a symlink loop before python 3.13
            raise NotFound(path) from err
        except OSError as err:
            if err.errno == errno.ELOOP:
                raise NotFound(path) from err
            raise
        return cls(resolved)

    def __init__(self, path: Path):
        # use CanonicalPath.new, this does not resolve anything
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def __fspath__(self) -> str:
        return str(self._path)

    def __str__(self):
        return str(self._path)

    def __repr__(self):
        return f"CanonicalPath({str(self._path)!r})"

    def __eq__(self, other):
        if isinstance(other, CanonicalPath):
            return self._path == other._path
        return False

    def __lt__(self, other):
        if not isinstance(other, CanonicalPath):
            return NotImplemented
        return str(self._path) < str(other._path)

    def __hash__(self):
        return hash(self._path)
