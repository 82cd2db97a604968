"""Hook vocabulary and payload records.

Module overview
- Purpose: Names the lifecycle events raised by ``EnvValidation`` and the payload shape carried by each.
- Lifecycle: Payloads are built per trigger and handed to subscribers; nothing here keeps state.
- Collaborators: envguard.core.hooks.HookRegistry, envguard.core.env_validation.EnvValidation, envguard.core.schema_resolver.SchemaResolver

Public API Catalog
| Symbol | Kind | Purpose | Fields |
|-------:|:-----|:--------|:-------|
| EnvValidationHook | enum | Fixed event vocabulary | validate_before, configuration_resolved_files, configuration_loaded_schemas, validate_schema, validate_after |
| ValidateBeforePayload | class | Start of a validation pass | config |
| ResolvedFilesPayload | class | Files kept by the filters for one path | files, path |
| LoadedSchemasPayload | class | Schemas extracted for one path | schemas, path |
| ValidateSchemaPayload | class | One schema evaluated | schema, config, error |
| ValidateAfterPayload | class | Every schema passed | config |
| HookEvent | class | History record kept by the registry | event_type, payload, timestamp |
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union


class EnvValidationHook(str, Enum):
    """Lifecycle events, listed in the order they fire during ``validate``."""
    VALIDATE_BEFORE = "validate_before"
    CONFIGURATION_RESOLVED_FILES = "configuration_resolved_files"
    CONFIGURATION_LOADED_SCHEMAS = "configuration_loaded_schemas"
    VALIDATE_SCHEMA = "validate_schema"
    VALIDATE_AFTER = "validate_after"


HookName = Union[EnvValidationHook, str]


def hook_name(event: HookName) -> str:
    """Normalise an event given as enum member or plain string."""
    if isinstance(event, EnvValidationHook):
        return event.value
    return EnvValidationHook(event).value


@dataclass(frozen=True)
class ValidateBeforePayload:
    config: Mapping[str, Any]


@dataclass(frozen=True)
class ResolvedFilesPayload:
    files: List[str]
    path: Optional[Path] = None


@dataclass(frozen=True)
class LoadedSchemasPayload:
    schemas: List[Any]
    path: Optional[Path] = None


@dataclass(frozen=True)
class ValidateSchemaPayload:
    schema: Any
    config: Mapping[str, Any]
    error: Optional[Any] = None


@dataclass(frozen=True)
class ValidateAfterPayload:
    config: Mapping[str, Any]


@dataclass
class HookEvent:
    """Record of one trigger, kept in the registry history."""
    event_type: str
    payload: Any
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type,
            "payload": self.payload,
            "timestamp": self.timestamp,
        }


__all__ = [
    'EnvValidationHook', 'HookName', 'hook_name',
    'ValidateBeforePayload', 'ResolvedFilesPayload', 'LoadedSchemasPayload',
    'ValidateSchemaPayload', 'ValidateAfterPayload', 'HookEvent',
]
