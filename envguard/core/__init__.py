"""Core Infrastructure

Discovery, hooks and validation for environment configuration.
"""

from .contracts import (
    EnvValidationHook, HookEvent,
    ValidateBeforePayload, ResolvedFilesPayload, LoadedSchemasPayload,
    ValidateSchemaPayload, ValidateAfterPayload,
)
from .errors import (
    EnvValidationError, FilesystemError, ModuleLoadError,
    ValidationError, ReentrantValidationError,
)
from .hooks import HookRegistry
from .registry import ConfigFileFilters, ResolutionPaths
from .schemas import ModelSchema, Schema, SchemaError, SchemaResult, as_schema
from .schema_resolver import DiscoveredSchema, FilesystemSchemaProvider, SchemaProvider, SchemaResolver
from .config import Config, load_config
from .env_validation import EnvValidation, ValidationState, get_env_validation, reset_env_validation

__all__ = [
    'EnvValidation', 'ValidationState', 'get_env_validation', 'reset_env_validation',
    'HookRegistry', 'EnvValidationHook', 'HookEvent',
    'ValidateBeforePayload', 'ResolvedFilesPayload', 'LoadedSchemasPayload',
    'ValidateSchemaPayload', 'ValidateAfterPayload',
    'EnvValidationError', 'FilesystemError', 'ModuleLoadError',
    'ValidationError', 'ReentrantValidationError',
    'ConfigFileFilters', 'ResolutionPaths',
    'ModelSchema', 'Schema', 'SchemaError', 'SchemaResult', 'as_schema',
    'DiscoveredSchema', 'FilesystemSchemaProvider', 'SchemaProvider', 'SchemaResolver',
    'Config', 'load_config',
]
