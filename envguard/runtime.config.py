"""Validation schema for the variables envguard itself reads."""

from typing import Optional

from pydantic import BaseModel, NonNegativeInt, field_validator

from envguard.core.schemas import ModelSchema

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class RuntimeEnv(BaseModel):
    LOG_LEVEL: Optional[str] = None
    ENVGUARD_HOOK_HISTORY: Optional[NonNegativeInt] = None
    ENVGUARD_ISOLATE_HOOK_ERRORS: Optional[bool] = None

    @field_validator("LOG_LEVEL")
    @classmethod
    def _known_level(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value.upper() not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return value


validation_schema = ModelSchema(RuntimeEnv, name="envguard.runtime")
