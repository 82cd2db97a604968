"""Engine settings

Loaded from defaults, an optional YAML file and environment variables, in
that order of precedence (environment wins).
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import NonNegativeInt, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .schema_resolver import DEFAULT_SCHEMA_EXPORT

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE_FILTER = r"\.config\.py$"


def _env_setting(name: str, annotation: Any, default: Any) -> Any:
    """Read ``name`` from the environment with pydantic's lax parsing.

    An unparsable value is logged and ``default`` is kept, so the bundled
    runtime schema can report it during validation.
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return TypeAdapter(annotation).validate_python(raw)
    except PydanticValidationError:
        logger.warning("Ignoring invalid %s=%r, keeping %r", name, raw, default)
        return default


@dataclass
class Config:
    """Settings used to build an ``EnvValidation`` instance."""

    # Discovery
    resolution_paths: List[str] = field(default_factory=list)
    config_file_filters: List[str] = field(default_factory=list)
    use_default_paths: bool = True
    use_default_filters: bool = True
    schema_export: str = DEFAULT_SCHEMA_EXPORT

    # Hooks
    isolate_hook_errors: bool = False
    hook_history: int = 0

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    def load_from_env(self) -> "Config":
        """Overlay ``ENVGUARD_*`` and ``LOG_LEVEL`` environment variables."""
        env_paths = os.getenv("ENVGUARD_PATHS", "")
        if env_paths:
            self.resolution_paths.extend(p for p in env_paths.split(os.pathsep) if p)

        env_filters = os.getenv("ENVGUARD_FILTERS", "")
        if env_filters:
            self.config_file_filters.extend(f.strip() for f in env_filters.split(",") if f.strip())

        self.schema_export = os.getenv("ENVGUARD_SCHEMA_EXPORT", self.schema_export)
        self.isolate_hook_errors = _env_setting("ENVGUARD_ISOLATE_HOOK_ERRORS", bool, self.isolate_hook_errors)
        self.hook_history = _env_setting("ENVGUARD_HOOK_HISTORY", NonNegativeInt, self.hook_history)
        self.log_level = os.getenv("LOG_LEVEL", self.log_level).upper()
        return self

    def update(self, values: Dict[str, Any]) -> "Config":
        """Apply a mapping of settings, ignoring unknown keys with a warning."""
        for key, value in values.items():
            if not hasattr(self, key):
                logger.warning("Ignoring unknown envguard setting: %s", key)
                continue
            setattr(self, key, value)
        return self


def load_config(config_file: Optional[str] = None) -> Config:
    """Load settings from an optional YAML file and the environment.

    Args:
        config_file: Optional path to a YAML file whose top-level keys match
            ``Config`` fields (e.g. ``resolution_paths``, ``config_file_filters``).
            Relative resolution paths in the file are anchored at the file's
            directory.

    Returns:
        Config instance

    Raises:
        FileNotFoundError: If ``config_file`` is given but does not exist
        yaml.YAMLError: If the file is not valid YAML
    """
    config = Config()
    if config_file:
        config_path = Path(config_file)
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{config_path} must contain a mapping of settings")
        paths = data.pop("resolution_paths", None) or []
        config.resolution_paths = [
            p if Path(p).expanduser().is_absolute() else str(config_path.parent / p)
            for p in paths
        ]
        config.update(data)
    return config.load_from_env()


__all__ = ['Config', 'load_config', 'DEFAULT_CONFIG_FILE_FILTER']
