"""Source text of configuration modules written to disk by the tests."""

DB_CONFIG = """
from pydantic import BaseModel, Field
from envguard import ModelSchema

class DatabaseEnv(BaseModel):
    DB_PORT: int = Field(ge=1024, le=65535)

validation_schema = ModelSchema(DatabaseEnv)
"""

AUTH_CONFIG = """
from pydantic import BaseModel, Field

class AuthEnv(BaseModel):
    JWT_SECRET: str = Field(min_length=1)

validation_schema = AuthEnv
"""
