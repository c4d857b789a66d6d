"""
Settings Models for the Neo4j memory server

Configuration is read from the environment (and a .env file loaded at
startup) through pydantic-settings, once, when the manager is built.
"""

from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from neo4j_memory.logger import LogLevel

# Connections older than this are closed and replaced by the driver
DEFAULT_MAX_CONNECTION_LIFETIME = 3 * 60 * 60


class Neo4jSettings(BaseSettings):
    """Neo4j database connection settings."""
    uri: Annotated[str, Field(default="bolt://localhost:7687", description="Neo4j connection URI")]
    user: Annotated[str, Field(default="neo4j", description="Neo4j username")]
    password: Annotated[str, Field(default="password", description="Neo4j password")]
    database: Annotated[str, Field(default="neo4j", description="Neo4j logical database name")]
    max_connection_lifetime: Annotated[int, Field(
        default=DEFAULT_MAX_CONNECTION_LIFETIME,
        gt=0,
        description="Maximum lifetime of a pooled connection in seconds"
    )]

    model_config = SettingsConfigDict(env_prefix="NEO4J_", extra="ignore")


class ServerSettings(BaseSettings):
    """MCP server process settings."""
    log_level: Annotated[LogLevel, Field(
        default=LogLevel.ERROR,
        validation_alias="LOG_LEVEL",
        description="Minimum level written by the console logger"
    )]
    transport: Annotated[Literal["stdio", "sse"], Field(
        default="stdio",
        validation_alias="MCP_TRANSPORT",
        description="MCP transport to serve on"
    )]

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept level names in any case, and 'warn' for warning."""
        if isinstance(v, str):
            v = v.strip().lower()
            if v == "warn":
                return LogLevel.WARN
        return v
