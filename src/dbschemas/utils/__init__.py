"""
Utilities Package for dbschemas
"""
from .logging import (
    setup_logging,
    get_logger,
    get_handler_context,
    log_context,
    log_operation,
)

from .errors import (
    ErrorSeverity,
    ErrorCategory,
    SchemasError,
    DatabaseConnectionError,
    CatalogQueryError,
    SchemaUnavailableError,
    MissingSchemaError,
    HandlerNotFoundError,
    SchemaSerializationError,
    TableUnavailableError,
    ConfigurationError,
    format_error_message,
    classify_database_error,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "get_handler_context",
    "log_context",
    "log_operation",
    # Errors
    "ErrorSeverity",
    "ErrorCategory",
    "SchemasError",
    "DatabaseConnectionError",
    "CatalogQueryError",
    "SchemaUnavailableError",
    "MissingSchemaError",
    "HandlerNotFoundError",
    "SchemaSerializationError",
    "TableUnavailableError",
    "ConfigurationError",
    "format_error_message",
    "classify_database_error",
]
