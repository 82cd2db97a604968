"""Error taxonomy for environment validation.

Every failure raised out of ``EnvValidation.validate`` derives from
``EnvValidationError`` so callers can catch the whole family in one place
and decide policy (usually: abort process start-up).
"""

from pathlib import Path
from typing import Any, Optional

from .schemas import describe_schema


class EnvValidationError(Exception):
    """Base class for all envguard failures."""


class FilesystemError(EnvValidationError, OSError):
    """A resolution path could not be listed."""

    def __init__(self, path: Path, message: str):
        super().__init__(f"Cannot scan resolution path {path}: {message}")
        self.path = path


class ModuleLoadError(EnvValidationError):
    """A configuration module raised while it was being loaded."""

    def __init__(self, path: Path, message: str):
        super().__init__(f"Failed to load configuration module {path}: {message}")
        self.path = path


class ValidationError(EnvValidationError):
    """A schema rejected the environment bag."""

    def __init__(self, message: str, schema: Any = None, source: Optional[Path] = None):
        detail = message
        if schema is not None:
            origin = describe_schema(schema)
            if source is not None:
                origin = f"{origin} ({source.name})"
            detail = f"{origin}: {message}"
        super().__init__(f"Config validation error: {detail}")
        self.message = message
        self.schema = schema
        self.source = source


class ReentrantValidationError(EnvValidationError):
    """``validate`` was called again from inside one of its own hooks."""


__all__ = [
    'EnvValidationError', 'FilesystemError', 'ModuleLoadError',
    'ValidationError', 'ReentrantValidationError',
]
