"""
Catalog Adapters Package
Provides a database-agnostic interface for reading table metadata
"""
from .base import (
    BaseCatalogAdapter,
    CatalogAdapterRegistry,
    ColumnInfo,
    ForeignKeyInfo,
    IndexInfo,
    QueryResult,
    register_adapter,
)

# Import adapters to register them
from .mysql_adapter import MySQLAdapter
from .postgresql_adapter import PostgreSQLAdapter
from .sqlite_adapter import SQLiteAdapter

from ..config import DatabaseConfig


def create_adapter(config: DatabaseConfig) -> BaseCatalogAdapter:
    """
    Factory function to create catalog adapter from configuration

    Args:
        config: Database configuration

    Returns:
        Configured catalog adapter instance

    Raises:
        ValueError: If database type is not supported
    """
    return CatalogAdapterRegistry.create_adapter(config)


def get_supported_databases() -> list:
    """Get list of supported database types"""
    return CatalogAdapterRegistry.get_supported_types()


__all__ = [
    # Base classes
    "BaseCatalogAdapter",
    "CatalogAdapterRegistry",
    "ColumnInfo",
    "ForeignKeyInfo",
    "IndexInfo",
    "QueryResult",
    "register_adapter",
    # Concrete adapters
    "MySQLAdapter",
    "PostgreSQLAdapter",
    "SQLiteAdapter",
    # Factory functions
    "create_adapter",
    "get_supported_databases",
]
