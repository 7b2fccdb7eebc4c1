"""
PostgreSQL Catalog Adapter
Reads the PostgreSQL catalog through information_schema and pg_catalog
"""
from __future__ import annotations

import time
from typing import Any, Dict, List

from ..config import DatabaseConfig, DatabaseType
from .base import (
    BaseCatalogAdapter,
    ColumnInfo,
    ForeignKeyInfo,
    IndexInfo,
    QueryParams,
    QueryResult,
    register_adapter,
)


@register_adapter(DatabaseType.POSTGRESQL)
class PostgreSQLAdapter(BaseCatalogAdapter):
    """PostgreSQL catalog adapter"""

    def __init__(self, config: DatabaseConfig):
        super().__init__(config)
        self._cursor = None

    @property
    def database_type(self) -> DatabaseType:
        return DatabaseType.POSTGRESQL

    def connect(self) -> None:
        """Establish PostgreSQL connection"""
        try:
            import psycopg2
        except ImportError:
            raise ImportError(
                "psycopg2 is required for PostgreSQL support. "
                "Install it with: pip install dbschemas[postgresql]"
            )

        connection_params = {
            "host": self.config.host,
            "port": self.config.port,
            "dbname": self.config.database,
            "user": self.config.username,
            "password": self.config.password.get_secret_value() if self.config.password else None,
            "connect_timeout": self.config.connection_timeout,
        }

        # Add SSL configuration if enabled
        if self.config.ssl_enabled:
            connection_params["sslmode"] = "require"
            if self.config.ssl_ca_path:
                connection_params["sslrootcert"] = self.config.ssl_ca_path

        self._connection = psycopg2.connect(**connection_params)
        self._connection.autocommit = True
        self._cursor = self._connection.cursor()

    def disconnect(self) -> None:
        """Close PostgreSQL connection"""
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None

        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def is_connected(self) -> bool:
        """Check if connection is active"""
        if self._connection is None:
            return False
        return self._connection.closed == 0

    def execute_query(self, sql: str, params: QueryParams = None) -> QueryResult:
        """Execute SQL query"""
        import psycopg2

        if not self.is_connected():
            self.connect()

        start_time = time.time()

        try:
            self._cursor.execute(sql, params or None)

            # Check if query returns results
            if self._cursor.description:
                columns = [desc[0] for desc in self._cursor.description]
                rows = [tuple(row) for row in self._cursor.fetchall()]
                row_count = len(rows)
            else:
                columns = []
                rows = []
                row_count = self._cursor.rowcount

            execution_time = (time.time() - start_time) * 1000

            return QueryResult(
                success=True,
                columns=columns,
                rows=rows,
                row_count=row_count,
                execution_time_ms=execution_time,
            )

        except psycopg2.Error as e:
            execution_time = (time.time() - start_time) * 1000
            return QueryResult(
                success=False,
                execution_time_ms=execution_time,
                error_message=str(e),
            )

    def list_tables(self) -> List[str]:
        """Fetch all base table names in the configured schema"""
        result = self._catalog_query(
            """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema = %s AND table_type = 'BASE TABLE'
            ORDER BY table_name
            """,
            (self.config.schema_name,)
        )
        return [row[0] for row in result.rows]

    def fetch_columns(self, table_name: str) -> List[ColumnInfo]:
        """Fetch columns for a table"""
        result = self._catalog_query(
            """
            SELECT
                c.column_name,
                c.data_type,
                c.is_nullable,
                c.column_default,
                c.character_maximum_length,
                c.numeric_precision,
                c.numeric_scale
            FROM information_schema.columns c
            WHERE c.table_schema = %s AND c.table_name = %s
            ORDER BY c.ordinal_position
            """,
            (self.config.schema_name, table_name),
            table_name=table_name,
        )

        pk_cols = set(self._fetch_primary_key(table_name))

        columns = []
        for row in result.rows:
            columns.append(ColumnInfo(
                name=row[0],
                data_type=row[1],
                nullable=row[2] == "YES",
                default_value=row[3],
                max_length=row[4],
                precision=row[5],
                scale=row[6],
                is_primary_key=row[0] in pk_cols,
            ))

        return columns

    def _fetch_primary_key(self, table_name: str) -> List[str]:
        """Fetch primary key columns"""
        result = self._catalog_query(
            """
            SELECT a.attname
            FROM pg_index i
            JOIN pg_attribute a ON a.attrelid = i.indrelid AND a.attnum = ANY(i.indkey)
            WHERE i.indrelid = (quote_ident(%s) || '.' || quote_ident(%s))::regclass
                AND i.indisprimary
            ORDER BY array_position(i.indkey, a.attnum)
            """,
            (self.config.schema_name, table_name),
            table_name=table_name,
        )
        return [row[0] for row in result.rows]

    def fetch_foreign_keys(self, table_name: str) -> List[ForeignKeyInfo]:
        """Fetch foreign key relationships"""
        result = self._catalog_query(
            """
            SELECT
                tc.constraint_name,
                kcu.column_name,
                ccu.table_name AS referenced_table,
                ccu.column_name AS referenced_column,
                rc.delete_rule,
                rc.update_rule
            FROM information_schema.table_constraints tc
            JOIN information_schema.key_column_usage kcu
                ON tc.constraint_name = kcu.constraint_name
                AND tc.table_schema = kcu.table_schema
            JOIN information_schema.constraint_column_usage ccu
                ON ccu.constraint_name = tc.constraint_name
                AND ccu.table_schema = tc.table_schema
            JOIN information_schema.referential_constraints rc
                ON tc.constraint_name = rc.constraint_name
            WHERE tc.constraint_type = 'FOREIGN KEY'
                AND tc.table_schema = %s
                AND tc.table_name = %s
            ORDER BY tc.constraint_name, kcu.ordinal_position
            """,
            (self.config.schema_name, table_name),
            table_name=table_name,
        )

        # Group by constraint name
        fk_dict: Dict[str, Dict[str, Any]] = {}
        for row in result.rows:
            constraint_name = row[0]
            if constraint_name not in fk_dict:
                fk_dict[constraint_name] = {
                    "columns": [],
                    "referenced_table": row[2],
                    "referenced_columns": [],
                    "on_delete": row[4],
                    "on_update": row[5],
                }
            fk_dict[constraint_name]["columns"].append(row[1])
            fk_dict[constraint_name]["referenced_columns"].append(row[3])

        return [
            ForeignKeyInfo(
                name=name,
                columns=fk_data["columns"],
                referenced_table=fk_data["referenced_table"],
                referenced_columns=fk_data["referenced_columns"],
                on_delete=fk_data["on_delete"],
                on_update=fk_data["on_update"],
            )
            for name, fk_data in fk_dict.items()
        ]

    def fetch_indexes(self, table_name: str) -> List[IndexInfo]:
        """Fetch index information"""
        result = self._catalog_query(
            """
            SELECT
                i.relname AS index_name,
                a.attname AS column_name,
                ix.indisunique AS is_unique,
                ix.indisprimary AS is_primary,
                am.amname AS index_type
            FROM pg_class t
            JOIN pg_namespace n ON n.oid = t.relnamespace
            JOIN pg_index ix ON t.oid = ix.indrelid
            JOIN pg_class i ON i.oid = ix.indexrelid
            JOIN pg_am am ON i.relam = am.oid
            JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = ANY(ix.indkey)
            WHERE t.relkind = 'r' AND n.nspname = %s AND t.relname = %s
            ORDER BY i.relname, array_position(ix.indkey, a.attnum)
            """,
            (self.config.schema_name, table_name),
            table_name=table_name,
        )

        # Group by index name
        idx_dict: Dict[str, Dict[str, Any]] = {}
        for row in result.rows:
            index_name = row[0]
            if index_name not in idx_dict:
                idx_dict[index_name] = {
                    "columns": [],
                    "is_unique": row[2],
                    "is_primary": row[3],
                    "index_type": row[4],
                }
            idx_dict[index_name]["columns"].append(row[1])

        return [
            IndexInfo(
                name=name,
                columns=idx_data["columns"],
                is_unique=idx_data["is_unique"],
                is_primary=idx_data["is_primary"],
                index_type=idx_data["index_type"],
            )
            for name, idx_data in idx_dict.items()
        ]
