"""Path utilities for resolution-path handling and synthetic module naming.

Example:
    >>> from envguard.utils.path_utils import resolve_directory, module_name_for
    >>> resolve_directory("~/app/config")
    PosixPath('/home/me/app/config')
    >>> module_name_for(Path("/srv/app/db.config.py"))
    'envguard_config_modules.db_config_3f2a9c1e'
"""

import hashlib
import os
import re
from pathlib import Path
from typing import Union

MODULE_NAMESPACE = "envguard_config_modules"


def resolve_directory(path: Union[str, "os.PathLike[str]"]) -> Path:
    """Expand ``~`` and make ``path`` absolute without requiring it to exist.

    Args:
        path: Directory identifier as registered by the caller

    Returns:
        Absolute path
    """
    return Path(path).expanduser().resolve()


def generate_slug(text: str, max_length: int = 50) -> str:
    """Turn arbitrary text into an identifier-safe slug.

    Args:
        text: Input text, usually a filename
        max_length: Maximum slug length

    Returns:
        Lowercase slug made of ``[a-z0-9_]``, never starting with a digit
    """
    slug = re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_")
    if not slug or slug[0].isdigit():
        slug = f"m_{slug}"
    return slug[:max_length].rstrip("_")


def module_name_for(file_path: Path) -> str:
    """Build a unique, importable module name for a configuration file.

    The filename alone is not unique across resolution paths, so a short hash
    of the absolute path is appended.
    """
    stem = file_path.name[: -len(file_path.suffix)] if file_path.suffix else file_path.name
    digest = hashlib.sha1(os.fspath(file_path).encode("utf-8")).hexdigest()[:8]
    return f"{MODULE_NAMESPACE}.{generate_slug(stem)}_{digest}"


__all__ = ['resolve_directory', 'generate_slug', 'module_name_for', 'MODULE_NAMESPACE']
