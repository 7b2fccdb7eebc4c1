"""
Configuration Management for dbschemas
Uses Pydantic for validation and type safety
"""
from __future__ import annotations

import os
from enum import Enum
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator

from .utils.logging import setup_logging


class DatabaseType(str, Enum):
    """Supported database types"""
    MYSQL = "mysql"
    POSTGRESQL = "postgresql"
    SQLITE = "sqlite"


class LogLevel(str, Enum):
    """Log levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class DatabaseConfig(BaseModel):
    """Database connection configuration"""
    db_type: DatabaseType
    host: str = "localhost"
    # Defaults to the database type's standard port
    port: Optional[int] = None
    database: str = ""
    username: Optional[str] = None
    password: Optional[SecretStr] = None
    connection_timeout: int = Field(default=30, ge=1, le=300)
    ssl_enabled: bool = False
    ssl_ca_path: Optional[str] = None
    
    # Connection-group identifier, used to key archived schemas
    group: str = "default"
    
    # SQLite specific
    sqlite_path: Optional[str] = None
    
    # PostgreSQL specific
    schema_name: str = "public"
    
    def get_default_port(self) -> int:
        """Get default port for database type"""
        ports = {
            DatabaseType.MYSQL: 3306,
            DatabaseType.POSTGRESQL: 5432,
            DatabaseType.SQLITE: 0,
        }
        return ports.get(DatabaseType(self.db_type), 3306)
    
    @model_validator(mode="after")
    def fill_default_port(self) -> "DatabaseConfig":
        if self.port is None:
            self.port = self.get_default_port()
        return self
    
    model_config = {"use_enum_values": True}


class AutomationConfig(BaseModel):
    """Fallbacks used by Schemas.get() when no schema is loaded"""
    read: bool = False
    draft: bool = True
    archive: bool = True


class SchemasConfig(BaseModel):
    """Main configuration"""
    automate: AutomationConfig = Field(default_factory=AutomationConfig)
    
    # Raise when get() has nothing to return, unless silent
    silent: bool = False
    
    # Default handlers, by registered name
    draft_handlers: List[str] = Field(default_factory=lambda: ["database"])
    archive_handlers: List[str] = Field(default_factory=lambda: ["cache"])
    read_handler: str = "cache"
    
    # Tables the database handler never drafts
    ignored_tables: List[str] = Field(default_factory=lambda: ["migrations"])
    
    # Directory and model sources
    schemas_directory: str = "schemas"
    models: List[str] = Field(default_factory=list)
    
    # Archive destinations
    archive_path: str = "schema.json"
    cache_ttl: int = Field(default=3600, ge=0)
    
    database: Optional[DatabaseConfig] = None
    log_level: LogLevel = LogLevel.INFO
    
    @field_validator('draft_handlers', 'archive_handlers')
    @classmethod
    def validate_handler_names(cls, v: List[str]) -> List[str]:
        """Normalize handler identifiers"""
        return [name.strip().lower() for name in v if name.strip()]
    
    @property
    def group(self) -> str:
        """Connection-group identifier used in archive keys"""
        return self.database.group if self.database else "default"
    
    def configure_logging(self, json_format: bool = False, log_file: Optional[str] = None) -> None:
        """Set up logging at the configured level"""
        setup_logging(LogLevel(self.log_level).value, json_format=json_format, log_file=log_file)
    
    @classmethod
    def from_env(cls) -> "SchemasConfig":
        """Create configuration from environment variables (and a .env file)"""
        load_dotenv()
        
        database = None
        if os.getenv("DB_TYPE"):
            database = DatabaseConfig(
                db_type=DatabaseType(os.getenv("DB_TYPE")),
                host=os.getenv("DB_HOST", "localhost"),
                port=int(os.getenv("DB_PORT")) if os.getenv("DB_PORT") else None,
                database=os.getenv("DB_NAME", ""),
                username=os.getenv("DB_USER"),
                password=SecretStr(os.getenv("DB_PASSWORD", "")) if os.getenv("DB_PASSWORD") else None,
                sqlite_path=os.getenv("SQLITE_PATH"),
                group=os.getenv("DB_GROUP", "default"),
            )
        
        automate = AutomationConfig(
            read=_env_flag("SCHEMAS_AUTO_READ", False),
            draft=_env_flag("SCHEMAS_AUTO_DRAFT", True),
            archive=_env_flag("SCHEMAS_AUTO_ARCHIVE", True),
        )
        
        return cls(
            automate=automate,
            silent=_env_flag("SCHEMAS_SILENT", False),
            draft_handlers=_env_list("SCHEMAS_DRAFT_HANDLERS", ["database"]),
            archive_handlers=_env_list("SCHEMAS_ARCHIVE_HANDLERS", ["cache"]),
            read_handler=os.getenv("SCHEMAS_READ_HANDLER", "cache"),
            ignored_tables=_env_list("SCHEMAS_IGNORED_TABLES", ["migrations"]),
            schemas_directory=os.getenv("SCHEMAS_DIRECTORY", "schemas"),
            models=_env_list("SCHEMAS_MODELS", []),
            archive_path=os.getenv("SCHEMAS_ARCHIVE_PATH", "schema.json"),
            cache_ttl=int(os.getenv("SCHEMAS_CACHE_TTL", "3600")),
            database=database,
            log_level=LogLevel(os.getenv("LOG_LEVEL", "INFO")),
        )


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.getenv(name)
    if value is None:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


# Global configuration instance
_config: Optional[SchemasConfig] = None


def get_config() -> SchemasConfig:
    """Get the global configuration instance"""
    global _config
    if _config is None:
        _config = SchemasConfig.from_env()
    return _config


def set_config(config: SchemasConfig) -> None:
    """Set the global configuration instance"""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance"""
    global _config
    _config = None
