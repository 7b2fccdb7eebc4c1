"""
Base Catalog Adapter Module
Defines abstract interface for reading a database catalog using Template Method pattern
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, Union
import threading

from ..config import DatabaseConfig, DatabaseType
from ..utils import CatalogQueryError


@dataclass
class ColumnInfo:
    """Column metadata as reported by the driver"""
    name: str
    data_type: str
    nullable: bool = True
    default_value: Optional[Any] = None
    max_length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    is_primary_key: bool = False
    comment: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "data_type": self.data_type,
            "nullable": self.nullable,
            "default_value": self.default_value,
            "max_length": self.max_length,
            "precision": self.precision,
            "scale": self.scale,
            "is_primary_key": self.is_primary_key,
            "comment": self.comment,
        }


@dataclass
class ForeignKeyInfo:
    """Foreign key constraint as reported by the driver"""
    name: str
    referenced_table: str
    # Empty when the driver does not report column names
    columns: List[str] = field(default_factory=list)
    referenced_columns: List[str] = field(default_factory=list)
    on_delete: Optional[str] = None
    on_update: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "columns": self.columns,
            "referenced_table": self.referenced_table,
            "referenced_columns": self.referenced_columns,
            "on_delete": self.on_delete,
            "on_update": self.on_update,
        }


@dataclass
class IndexInfo:
    """Index as reported by the driver"""
    name: str
    columns: List[str]
    is_unique: bool = False
    is_primary: bool = False
    index_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "columns": self.columns,
            "is_unique": self.is_unique,
            "is_primary": self.is_primary,
            "index_type": self.index_type,
        }


@dataclass
class QueryResult:
    """Result of a catalog query"""
    success: bool
    columns: List[str] = field(default_factory=list)
    rows: List[Tuple[Any, ...]] = field(default_factory=list)
    row_count: int = 0
    execution_time_ms: float = 0.0
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "columns": self.columns,
            "rows": [list(row) for row in self.rows],
            "row_count": self.row_count,
            "execution_time_ms": self.execution_time_ms,
            "error_message": self.error_message,
        }


QueryParams = Union[Dict[str, Any], Sequence[Any], None]


class BaseCatalogAdapter(ABC):
    """
    Abstract base class for catalog adapters

    Subclasses implement the connection lifecycle and the four catalog
    queries; a failed catalog query raises CatalogQueryError instead of
    returning an empty result.
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self._connection = None

    @property
    @abstractmethod
    def database_type(self) -> DatabaseType:
        """Return the database type"""
        pass

    @abstractmethod
    def connect(self) -> None:
        """Establish database connection"""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close database connection"""
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if connection is active"""
        pass

    @abstractmethod
    def execute_query(self, sql: str, params: QueryParams = None) -> QueryResult:
        """Execute a SQL query and return results"""
        pass

    @abstractmethod
    def list_tables(self) -> List[str]:
        """Names of every base table visible to the connection"""
        pass

    @abstractmethod
    def fetch_columns(self, table_name: str) -> List[ColumnInfo]:
        """Columns of a table, in ordinal order"""
        pass

    @abstractmethod
    def fetch_indexes(self, table_name: str) -> List[IndexInfo]:
        """Indexes of a table"""
        pass

    @abstractmethod
    def fetch_foreign_keys(self, table_name: str) -> List[ForeignKeyInfo]:
        """Foreign key constraints declared on a table"""
        pass

    def _catalog_query(
        self,
        sql: str,
        params: QueryParams = None,
        table_name: Optional[str] = None,
    ) -> QueryResult:
        """Run a catalog query, raising CatalogQueryError when it fails"""
        result = self.execute_query(sql, params)
        if not result.success:
            target = f" for table '{table_name}'" if table_name else ""
            raise CatalogQueryError(
                f"Catalog query failed{target}: {result.error_message}",
                table_name=table_name,
            )
        return result

    def test_connection(self) -> Tuple[bool, Optional[str]]:
        """
        Test database connection

        Returns:
            Tuple of (success, error_message)
        """
        try:
            self.connect()
            return True, None
        except Exception as e:
            return False, str(e)
        finally:
            self.disconnect()

    def __enter__(self) -> "BaseCatalogAdapter":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()


# Type alias for adapter classes
AdapterClass = Type[BaseCatalogAdapter]


class CatalogAdapterRegistry:
    """Registry for catalog adapters using Factory pattern"""

    _adapters: Dict[DatabaseType, AdapterClass] = {}
    _lock = threading.Lock()

    @classmethod
    def register(cls, db_type: DatabaseType, adapter_class: AdapterClass) -> None:
        """Register a catalog adapter class"""
        with cls._lock:
            cls._adapters[db_type] = adapter_class

    @classmethod
    def get_adapter_class(cls, db_type: DatabaseType) -> AdapterClass:
        """Get adapter class for database type"""
        with cls._lock:
            if db_type not in cls._adapters:
                raise ValueError(f"No adapter registered for database type: {db_type}")
            return cls._adapters[db_type]

    @classmethod
    def create_adapter(cls, config: DatabaseConfig) -> BaseCatalogAdapter:
        """Create adapter instance from configuration"""
        adapter_class = cls.get_adapter_class(config.db_type)
        return adapter_class(config)

    @classmethod
    def get_supported_types(cls) -> List[DatabaseType]:
        """Get list of supported database types"""
        with cls._lock:
            return list(cls._adapters.keys())

    @classmethod
    def is_supported(cls, db_type: DatabaseType) -> bool:
        """Check if database type is supported"""
        with cls._lock:
            return db_type in cls._adapters


def register_adapter(db_type: DatabaseType):
    """Decorator to register a catalog adapter class"""
    def decorator(cls: AdapterClass) -> AdapterClass:
        CatalogAdapterRegistry.register(db_type, cls)
        return cls
    return decorator
