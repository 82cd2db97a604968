"""envguard

Module overview
- Purpose: Validates process environment variables against pydantic schemas exported by configuration modules discovered on disk.
- Lifecycle: Imported at application start-up; ``EnvValidation.validate(os.environ)`` is typically the first call after logging is configured.
- Collaborators: envguard.core.env_validation, envguard.core.schema_resolver, envguard.core.hooks
- Key inputs: Resolution paths, filename filters, the environment mapping
- Key outputs: The unchanged environment mapping, or an EnvValidationError

Public API Catalog
| Symbol | Kind | Defined in | Purpose | Raises |
|-------:|:-----|:-----------|:--------|:-------|
| EnvValidation | class | envguard.core.env_validation | Discover schemas and validate an environment bag | FilesystemError, ModuleLoadError, ValidationError |
| get_env_validation | function | envguard.core.env_validation | Process-wide default instance | None |
| HookRegistry | class | envguard.core.hooks | Ordered synchronous observers | Callback errors (unless isolated) |
| EnvValidationHook | enum | envguard.core.contracts | Hook vocabulary | None |
| ModelSchema | class | envguard.core.schemas | Pydantic model adapter for the schema contract | TypeError |
| load_config | function | envguard.core.config | Settings from YAML file and environment | FileNotFoundError, yaml.YAMLError |

Design notes
- Error surface: discovery and validation failures propagate; nothing is retried.
- Concurrency: synchronous, one logical caller per instance.
"""

from envguard.core import (
    EnvValidation, ValidationState, get_env_validation, reset_env_validation,
    HookRegistry, EnvValidationHook,
    ValidateBeforePayload, ResolvedFilesPayload, LoadedSchemasPayload,
    ValidateSchemaPayload, ValidateAfterPayload,
    EnvValidationError, FilesystemError, ModuleLoadError,
    ValidationError, ReentrantValidationError,
    ModelSchema, SchemaError, SchemaResult,
    DiscoveredSchema, FilesystemSchemaProvider,
    Config, load_config,
)

__version__ = "1.0.0"

__all__ = [
    "EnvValidation", "ValidationState", "get_env_validation", "reset_env_validation",
    "HookRegistry", "EnvValidationHook",
    "ValidateBeforePayload", "ResolvedFilesPayload", "LoadedSchemasPayload",
    "ValidateSchemaPayload", "ValidateAfterPayload",
    "EnvValidationError", "FilesystemError", "ModuleLoadError",
    "ValidationError", "ReentrantValidationError",
    "ModelSchema", "SchemaError", "SchemaResult",
    "DiscoveredSchema", "FilesystemSchemaProvider",
    "Config", "load_config",
]
