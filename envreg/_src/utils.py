import hashlib
import uuid
from pathlib import Path


def hash_string(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def get_name_from_path(path: str | Path) -> str:
    """This function assumes an environment name is the last component of its directory"""
    return Path(path).name


def ensure_dir(s: str | Path) -> None:
    """Recursively create a directory if it does not exist"""
    path = Path(s)
    path.mkdir(parents=True, exist_ok=True)


def short_uuid() -> str:
    return uuid.uuid4().hex[:8]
