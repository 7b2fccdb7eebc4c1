"""
Error Handling Module for dbschemas
Defines custom exceptions and error handling utilities
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorSeverity(str, Enum):
    """Error severity levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """Error categories for classification"""
    DATABASE = "database"
    CATALOG = "catalog"
    SCHEMA = "schema"
    HANDLER = "handler"
    SERIALIZATION = "serialization"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


class SchemasError(Exception):
    """Base exception for dbschemas"""
    
    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        recoverable: bool = True,
        suggestions: Optional[List[str]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.recoverable = recoverable
        self.suggestions = suggestions or []
        self.original_error = original_error
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "original_error": str(self.original_error) if self.original_error else None,
        }
    
    def __str__(self) -> str:
        return f"[{self.category.value}] {self.message}"


class DatabaseConnectionError(SchemasError):
    """Database connection failure"""
    
    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.DATABASE,
            severity=ErrorSeverity.HIGH,
            recoverable=True,
            suggestions=[
                "Check database host and port configuration",
                "Verify database credentials",
                "Ensure database server is running",
            ],
            original_error=original_error
        )


class CatalogQueryError(SchemasError):
    """A catalog query (tables, columns, indexes, foreign keys) failed"""
    
    def __init__(
        self,
        message: str,
        table_name: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        suggestions = ["Verify the connection user can read the catalog"]
        if table_name:
            suggestions.append(f"Check if table '{table_name}' still exists")
        
        super().__init__(
            message=message,
            category=ErrorCategory.CATALOG,
            severity=ErrorSeverity.MEDIUM,
            recoverable=True,
            suggestions=suggestions,
            original_error=original_error
        )
        self.table_name = table_name


class SchemaUnavailableError(SchemasError):
    """No schema could be produced by any automation path"""
    
    def __init__(self, message: str = "No schema available from any source"):
        super().__init__(
            message=message,
            category=ErrorCategory.SCHEMA,
            severity=ErrorSeverity.HIGH,
            recoverable=False,
            suggestions=[
                "Enable automate.draft or automate.read",
                "Check the errors reported by the configured handlers",
            ],
        )


class MissingSchemaError(SchemasError):
    """An operation that needs a current schema was called without one"""
    
    def __init__(self, operation: str):
        super().__init__(
            message=f"Cannot {operation} without a current schema",
            category=ErrorCategory.SCHEMA,
            severity=ErrorSeverity.HIGH,
            recoverable=False,
            suggestions=["Call draft(), read() or set_schema() first"],
        )
        self.operation = operation


class HandlerNotFoundError(SchemasError):
    """A handler identifier does not resolve to a registered handler"""
    
    def __init__(self, name: str, available: Optional[List[str]] = None):
        suggestions = ["Register the handler with @register_handler"]
        if available:
            suggestions.append(f"Available handlers: {', '.join(sorted(available))}")
        
        super().__init__(
            message=f"No handler registered as '{name}'",
            category=ErrorCategory.HANDLER,
            severity=ErrorSeverity.HIGH,
            recoverable=False,
            suggestions=suggestions,
        )
        self.name = name


class SchemaSerializationError(SchemasError):
    """A persisted schema representation could not be decoded"""
    
    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        suggestions = ["Re-archive the schema from a fresh draft"]
        if source:
            suggestions.append(f"Inspect '{source}' for malformed content")
        
        super().__init__(
            message=message,
            category=ErrorCategory.SERIALIZATION,
            severity=ErrorSeverity.MEDIUM,
            recoverable=True,
            suggestions=suggestions,
            original_error=original_error
        )
        self.source = source


class TableUnavailableError(SchemasError, KeyError):
    """An archived table listed in an index can no longer be loaded"""
    
    def __init__(
        self,
        table_name: str,
        message: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(
            message=message or f"Archived table '{table_name}' is missing or expired",
            category=ErrorCategory.SERIALIZATION,
            severity=ErrorSeverity.MEDIUM,
            recoverable=True,
            suggestions=["Re-archive the schema from a fresh draft"],
            original_error=original_error
        )
        self.table_name = table_name


class ConfigurationError(SchemasError):
    """Configuration errors"""
    
    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        suggestions = ["Review configuration settings"]
        if config_key:
            suggestions.append(f"Check configuration for key: {config_key}")
        
        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            recoverable=False,
            suggestions=suggestions,
            original_error=original_error
        )
        self.config_key = config_key


def format_error_message(error: Exception) -> str:
    """Render an exception as the one-line message kept in handler error lists"""
    if isinstance(error, SchemasError):
        message = error.message
        if error.original_error:
            message = f"{message}: {error.original_error}"
        return message
    return f"{error.__class__.__name__}: {error}"


def classify_database_error(error: Exception, table_name: Optional[str] = None) -> SchemasError:
    """Classify a raw database error into appropriate SchemasError subclass"""
    if isinstance(error, SchemasError):
        return error
    
    error_str = str(error).lower()
    
    # Connection errors
    if any(term in error_str for term in ['connect', 'connection', 'refused', 'timeout', 'host']):
        return DatabaseConnectionError(
            message="Database connection failed",
            original_error=error
        )
    
    return CatalogQueryError(
        message=f"Catalog query failed for '{table_name}'" if table_name else "Catalog query failed",
        table_name=table_name,
        original_error=error
    )
