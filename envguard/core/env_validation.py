"""Environment validation orchestrator.

``EnvValidation`` discovers validation schemas exported by configuration
modules (files matching the config-file filters inside the resolution
paths) and checks an environment bag against every one of them, failing on
the first violation.

Lifecycle hooks, in firing order::

    validate_before                 {config}
    configuration_resolved_files    {files, path}      once per resolution path
    configuration_loaded_schemas    {schemas, path}    once per resolution path
    validate_schema                 {schema, config, error}   once per schema checked
    validate_after                  {config}           only when every schema passed

Example:
    >>> validation = EnvValidation().clear_resolution_paths().add_resolution_path("./config")
    >>> validation.on("validate_schema", lambda p: print(p.schema, p.error))
    >>> validation.validate(dict(os.environ))
"""

import logging
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Pattern

from .config import DEFAULT_CONFIG_FILE_FILTER, Config
from .contracts import (
    EnvValidationHook, HookName, hook_name,
    ValidateAfterPayload, ValidateBeforePayload, ValidateSchemaPayload,
)
from .errors import ReentrantValidationError, ValidationError
from .hooks import HookCallback, HookRegistry
from .registry import ConfigFileFilters, FilterLike, PathLike, ResolutionPaths
from .schema_resolver import DiscoveredSchema, FilesystemSchemaProvider, SchemaProvider, SchemaResolver

logger = logging.getLogger(__name__)

_MODULE_DIR = Path(__file__).resolve().parent


class ValidationState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    VALIDATING = "validating"
    COMPLETED = "completed"
    FAILED = "failed"


class EnvValidation:
    """Validates environment variables against every discovered schema.

    Instances are caller-owned; the path and filter sets are the only state
    kept between calls. A fresh instance scans this package's ``core``
    directory and its parent for files matching ``\\.config\\.py$``.
    """

    def __init__(self, hooks: Optional[HookRegistry] = None, provider: Optional[SchemaProvider] = None,
                 use_default_paths: bool = True, use_default_filters: bool = True):
        self.hooks = hooks if hooks is not None else HookRegistry()
        self._resolution_paths = ResolutionPaths()
        self._config_file_filters = ConfigFileFilters()
        self._resolver = SchemaResolver(
            self._resolution_paths, self._config_file_filters, self.hooks, provider,
        )
        self._state = ValidationState.IDLE
        self._active = False

        if use_default_filters:
            self.add_config_file_filters([DEFAULT_CONFIG_FILE_FILTER])
        if use_default_paths:
            self.add_resolution_paths([str(_MODULE_DIR), str(_MODULE_DIR.parent)])

    @classmethod
    def from_config(cls, config: Config, hooks: Optional[HookRegistry] = None,
                    provider: Optional[SchemaProvider] = None) -> "EnvValidation":
        """Build an instance from loaded settings."""
        if hooks is None:
            hooks = HookRegistry(isolate_errors=config.isolate_hook_errors, max_history=config.hook_history)
        if provider is None:
            provider = FilesystemSchemaProvider(schema_export=config.schema_export)
        return (
            cls(hooks=hooks, provider=provider,
                use_default_paths=config.use_default_paths,
                use_default_filters=config.use_default_filters)
            .add_resolution_paths(config.resolution_paths)
            .add_config_file_filters(config.config_file_filters)
        )

    @property
    def state(self) -> ValidationState:
        return self._state

    @property
    def resolution_paths(self) -> List[PathLike]:
        return self._resolution_paths.to_list()

    @property
    def config_file_filters(self) -> List[Pattern[str]]:
        return self._config_file_filters.to_list()

    # ------------------------------------------------------------------
    # Resolution paths
    # ------------------------------------------------------------------

    def add_resolution_path(self, path: PathLike) -> "EnvValidation":
        """Add a directory to scan for configuration modules.

        Args:
            path: Directory; existence is only checked when scanning

        Returns:
            This instance, for chaining
        """
        self._resolution_paths.add(path)
        return self

    def add_resolution_paths(self, paths: Iterable[PathLike]) -> "EnvValidation":
        self._resolution_paths.extend(paths)
        return self

    def remove_resolution_path(self, path: PathLike) -> "EnvValidation":
        """Remove every occurrence of ``path`` (exact match)."""
        self._resolution_paths.remove(path)
        return self

    def clear_resolution_paths(self) -> "EnvValidation":
        self._resolution_paths.clear()
        return self

    # ------------------------------------------------------------------
    # Config file filters
    # ------------------------------------------------------------------

    def add_config_file_filter(self, pattern: FilterLike) -> "EnvValidation":
        """Add a filename pattern (string or compiled regex)."""
        self._config_file_filters.add(pattern)
        return self

    def add_config_file_filters(self, patterns: Iterable[FilterLike]) -> "EnvValidation":
        self._config_file_filters.extend(patterns)
        return self

    def remove_config_file_filter(self, pattern: FilterLike) -> "EnvValidation":
        """Remove filters whose source text equals ``pattern``'s."""
        self._config_file_filters.remove(pattern)
        return self

    def clear_config_file_filters(self) -> "EnvValidation":
        self._config_file_filters.clear()
        return self

    def passes_config_file_filters(self, filename: str) -> bool:
        return self._config_file_filters.matches(filename)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def on(self, event: HookName, callback: HookCallback) -> "EnvValidation":
        self.hooks.subscribe(hook_name(event), callback)
        return self

    def off(self, event: HookName, callback: HookCallback) -> "EnvValidation":
        self.hooks.unsubscribe(hook_name(event), callback)
        return self

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @contextmanager
    def _exclusive(self):
        if self._active:
            raise ReentrantValidationError(
                "EnvValidation cannot be re-entered from one of its own hooks"
            )
        self._active = True
        try:
            yield
        finally:
            self._active = False

    def resolve_schemas(self) -> List[DiscoveredSchema]:
        """Run discovery only and return the schemas with their source files.

        Raises:
            FilesystemError: A resolution path cannot be listed
            ModuleLoadError: A configuration module failed to load
        """
        with self._exclusive():
            return self._resolver.resolve()

    def _check_schema(self, discovered: DiscoveredSchema, config: Mapping[str, Any]) -> None:
        schema = discovered.schema
        result = schema.validate(config, allow_unknown=True)
        if isinstance(result, Mapping):
            error = result.get("error")
        else:
            error = getattr(result, "error", None)

        self.hooks.trigger(
            EnvValidationHook.VALIDATE_SCHEMA,
            ValidateSchemaPayload(schema=schema, config=config, error=error),
        )

        if error:
            message = getattr(error, "message", None) or str(error)
            raise ValidationError(
                message,
                schema=schema,
                source=discovered.source,
            )

    def validate(self, config: Mapping[str, Any]) -> Mapping[str, Any]:
        """Validate ``config`` against every discovered schema.

        Args:
            config: Environment bag; it is neither copied nor modified

        Returns:
            The same ``config`` object

        Raises:
            FilesystemError: A resolution path cannot be listed
            ModuleLoadError: A configuration module failed to load
            ValidationError: The first schema that rejected ``config``
            ReentrantValidationError: Called from inside one of this instance's hooks
        """
        if not isinstance(config, Mapping):
            raise TypeError(f"config must be a mapping, got {type(config).__name__}")

        with self._exclusive():
            self._state = ValidationState.IDLE
            try:
                self.hooks.trigger(EnvValidationHook.VALIDATE_BEFORE, ValidateBeforePayload(config=config))

                self._state = ValidationState.RESOLVING
                schemas = self._resolver.resolve()

                self._state = ValidationState.VALIDATING
                for discovered in schemas:
                    self._check_schema(discovered, config)

                self.hooks.trigger(EnvValidationHook.VALIDATE_AFTER, ValidateAfterPayload(config=config))
            except Exception as e:
                self._state = ValidationState.FAILED
                logger.error(f"Environment validation failed: {e}")
                raise

            self._state = ValidationState.COMPLETED
            logger.info(f"Environment validated against {len(schemas)} schema(s)")
            return config


# Global instance, kept for callers that expect a process-wide accessor
_validation_instance: Optional[EnvValidation] = None


def get_env_validation() -> EnvValidation:
    """Get the lazily created process-wide ``EnvValidation``.

    Prefer constructing and passing your own instance; this accessor exists
    for start-up code that has nowhere to keep one.
    """
    global _validation_instance
    if _validation_instance is None:
        _validation_instance = EnvValidation.from_config(Config().load_from_env())
    return _validation_instance


def reset_env_validation() -> None:
    """Drop the process-wide instance (mainly for tests)."""
    global _validation_instance
    _validation_instance = None


__all__ = ['EnvValidation', 'ValidationState', 'get_env_validation', 'reset_env_validation']
