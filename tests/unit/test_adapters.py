"""
Unit Tests for Catalog Adapters
"""
import pytest
from unittest.mock import MagicMock, patch
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from dbschemas.adapters import (
    CatalogAdapterRegistry,
    QueryResult,
    create_adapter,
    get_supported_databases,
)
from dbschemas.adapters.postgresql_adapter import PostgreSQLAdapter
from dbschemas.adapters.sqlite_adapter import SQLiteAdapter
from dbschemas.config import DatabaseConfig, DatabaseType
from dbschemas.utils import CatalogQueryError


class TestQueryResult:
    """Tests for QueryResult class"""

    def test_failed_result(self):
        result = QueryResult(success=False, error_message="no such table")
        assert result.rows == []
        assert result.to_dict()["error_message"] == "no such table"


class TestSQLiteAdapter:
    """Tests for SQLite catalog adapter"""

    @pytest.fixture
    def adapter(self):
        config = DatabaseConfig(db_type=DatabaseType.SQLITE, sqlite_path=":memory:")
        adapter = SQLiteAdapter(config)
        adapter.connect()

        adapter.execute_query("""
            CREATE TABLE factories (
                id INTEGER PRIMARY KEY,
                name VARCHAR(100) NOT NULL
            )
        """)
        adapter.execute_query("""
            CREATE TABLE workers (
                id INTEGER PRIMARY KEY,
                name TEXT DEFAULT 'anon',
                factory_id INTEGER REFERENCES factories(id) ON DELETE CASCADE
            )
        """)
        adapter.execute_query("CREATE UNIQUE INDEX workers_name ON workers (name)")

        yield adapter
        adapter.disconnect()

    def test_connect_disconnect(self, adapter):
        assert adapter.is_connected()
        adapter.disconnect()
        assert not adapter.is_connected()

    def test_list_tables(self, adapter):
        assert adapter.list_tables() == ["factories", "workers"]

    def test_fetch_columns(self, adapter):
        columns = {c.name: c for c in adapter.fetch_columns("workers")}

        assert list(columns) == ["id", "name", "factory_id"]
        assert columns["id"].is_primary_key is True
        assert columns["name"].data_type == "TEXT"
        assert columns["name"].default_value == "'anon'"
        assert columns["factory_id"].nullable is True

    def test_fetch_foreign_keys(self, adapter):
        foreign_keys = adapter.fetch_foreign_keys("workers")

        assert len(foreign_keys) == 1
        fk = foreign_keys[0]
        assert fk.name == "fk_workers_0"
        assert fk.referenced_table == "factories"
        assert fk.columns == ["factory_id"]
        assert fk.referenced_columns == ["id"]
        assert fk.on_delete == "CASCADE"

    def test_fetch_indexes(self, adapter):
        indexes = adapter.fetch_indexes("workers")

        assert len(indexes) == 1
        assert indexes[0].name == "workers_name"
        assert indexes[0].columns == ["name"]
        assert indexes[0].is_unique is True

    def test_connection_leaves_pragmas_alone(self, adapter):
        assert adapter.execute_query("PRAGMA foreign_keys").rows == [(0,)]

    def test_failed_catalog_query_raises(self, adapter):
        with pytest.raises(CatalogQueryError) as exc_info:
            adapter._catalog_query("SELECT * FROM missing_table", table_name="missing_table")
        assert exc_info.value.table_name == "missing_table"

    def test_context_manager(self):
        config = DatabaseConfig(db_type=DatabaseType.SQLITE, sqlite_path=":memory:")
        with SQLiteAdapter(config) as adapter:
            assert adapter.is_connected()
        assert not adapter.is_connected()


class TestPostgreSQLAdapter:
    """Tests for PostgreSQL catalog queries (driver mocked)"""

    def test_list_tables_uses_schema_name(self):
        config = DatabaseConfig(db_type=DatabaseType.POSTGRESQL, schema_name="inventory")
        adapter = PostgreSQLAdapter(config)
        adapter.execute_query = MagicMock(return_value=QueryResult(
            success=True, columns=["table_name"], rows=[("factories",), ("workers",)],
        ))

        assert adapter.list_tables() == ["factories", "workers"]
        sql, params = adapter.execute_query.call_args[0]
        assert "inventory" in params


class TestCatalogAdapterRegistry:
    """Tests for CatalogAdapterRegistry"""

    def test_supported_types(self):
        supported = get_supported_databases()
        assert DatabaseType.SQLITE in supported
        assert DatabaseType.POSTGRESQL in supported
        assert DatabaseType.MYSQL in supported

    def test_create_adapter(self):
        config = DatabaseConfig(db_type=DatabaseType.SQLITE, sqlite_path=":memory:")
        assert isinstance(create_adapter(config), SQLiteAdapter)

    def test_unsupported_type(self):
        with patch.dict(CatalogAdapterRegistry._adapters, clear=True):
            with pytest.raises(ValueError):
                CatalogAdapterRegistry.get_adapter_class(DatabaseType.SQLITE)
