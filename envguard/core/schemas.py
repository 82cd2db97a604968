"""Schema contract and the pydantic adapter used by configuration modules.

A schema is any object exposing ``validate(value, allow_unknown=True)`` that
returns a ``SchemaResult``. Configuration modules normally declare a pydantic
model and export it, either wrapped::

    class DatabaseEnv(BaseModel):
        DB_PORT: int = Field(ge=1024, le=65535)

    validation_schema = ModelSchema(DatabaseEnv)

or bare (``validation_schema = DatabaseEnv``), in which case discovery wraps
it in ``ModelSchema`` itself.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Set, Type, runtime_checkable

from pydantic import AliasChoices, AliasPath, BaseModel
from pydantic import ValidationError as PydanticValidationError


@dataclass(frozen=True)
class SchemaError:
    """Description of a schema violation."""
    message: str
    details: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class SchemaResult:
    error: Optional[SchemaError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@runtime_checkable
class Schema(Protocol):
    def validate(self, value: Mapping[str, Any], allow_unknown: bool = True) -> SchemaResult:
        ...


def format_pydantic_errors(errors: List[Dict[str, Any]]) -> str:
    """Flatten pydantic error dicts into ``"KEY: message; KEY2: message"``."""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


def _alias_keys(alias: Any) -> Set[str]:
    """Top-level environment keys an alias can read from."""
    if isinstance(alias, str):
        return {alias}
    if isinstance(alias, AliasPath):
        head = alias.path[0] if alias.path else None
        return {head} if isinstance(head, str) else set()
    if isinstance(alias, AliasChoices):
        keys: Set[str] = set()
        for choice in alias.choices:
            keys |= _alias_keys(choice)
        return keys
    return set()


class ModelSchema:
    """Adapts a pydantic model to the schema contract."""

    def __init__(self, model: Type[BaseModel], name: Optional[str] = None):
        if not (isinstance(model, type) and issubclass(model, BaseModel)):
            raise TypeError(f"ModelSchema expects a pydantic BaseModel subclass, got {model!r}")
        self.model = model
        self.name = name or model.__name__

    @property
    def known_keys(self) -> Set[str]:
        keys = set()
        for field_name, info in self.model.model_fields.items():
            keys.add(field_name)
            keys |= _alias_keys(info.alias)
            keys |= _alias_keys(info.validation_alias)
        return keys

    def validate(self, value: Mapping[str, Any], allow_unknown: bool = True) -> SchemaResult:
        if not allow_unknown:
            known = self.known_keys
            unknown = sorted(k for k in value if k not in known)
            if unknown:
                return SchemaResult(error=SchemaError(
                    message="; ".join(f"{k}: Extra inputs are not permitted" for k in unknown),
                ))

        try:
            self.model.model_validate(dict(value))
        except PydanticValidationError as e:
            errors = e.errors(include_url=False)
            if allow_unknown:
                # extra="forbid" models still ignore keys they do not declare
                errors = [err for err in errors if err.get("type") != "extra_forbidden"]
            if errors:
                return SchemaResult(error=SchemaError(
                    message=format_pydantic_errors(errors),
                    details=errors,
                ))
        return SchemaResult()

    def __repr__(self) -> str:
        return f"ModelSchema({self.name})"


def as_schema(exported: Any) -> Optional[Any]:
    """Normalise a module export into a schema, or ``None`` when absent.

    Raises:
        TypeError: If the export is present but has no ``validate`` method.
    """
    if not exported:
        return None
    if isinstance(exported, type) and issubclass(exported, BaseModel):
        return ModelSchema(exported)
    if not callable(getattr(exported, "validate", None)):
        raise TypeError(f"Exported schema {exported!r} has no validate() method")
    return exported


def describe_schema(schema: Any) -> str:
    return getattr(schema, "name", None) or type(schema).__name__


__all__ = [
    'Schema', 'SchemaError', 'SchemaResult', 'ModelSchema',
    'as_schema', 'describe_schema', 'format_pydantic_errors',
]
