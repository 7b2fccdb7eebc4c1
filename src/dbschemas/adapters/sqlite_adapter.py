"""
SQLite Catalog Adapter
Reads the SQLite catalog through sqlite_master and PRAGMA queries
"""
from __future__ import annotations

import sqlite3
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


@register_adapter(DatabaseType.SQLITE)
class SQLiteAdapter(BaseCatalogAdapter):
    """SQLite catalog adapter"""

    def __init__(self, config: DatabaseConfig):
        super().__init__(config)
        self._cursor = None

    @property
    def database_type(self) -> DatabaseType:
        return DatabaseType.SQLITE

    def connect(self) -> None:
        """Establish SQLite connection"""
        db_path = self.config.sqlite_path or self.config.database

        if not db_path:
            db_path = ":memory:"

        self._connection = sqlite3.connect(
            db_path,
            timeout=self.config.connection_timeout,
        )

        # Set row factory for named columns
        self._connection.row_factory = sqlite3.Row

        self._cursor = self._connection.cursor()

    def disconnect(self) -> None:
        """Close SQLite connection"""
        if self._cursor is not None:
            try:
                self._cursor.close()
            except sqlite3.Error:
                pass
            self._cursor = None

        if self._connection is not None:
            try:
                self._connection.close()
            except sqlite3.Error:
                pass
            self._connection = None

    def is_connected(self) -> bool:
        """Check if connection is active"""
        if self._connection is None:
            return False
        try:
            self._connection.execute("SELECT 1")
            return True
        except sqlite3.Error:
            return False

    def execute_query(self, sql: str, params: QueryParams = None) -> QueryResult:
        """Execute SQL query"""
        if not self.is_connected():
            self.connect()

        start_time = time.time()

        try:
            if params:
                self._cursor.execute(sql, params)
            else:
                self._cursor.execute(sql)

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

        except sqlite3.Error as e:
            execution_time = (time.time() - start_time) * 1000
            return QueryResult(
                success=False,
                execution_time_ms=execution_time,
                error_message=str(e),
            )

    def list_tables(self) -> List[str]:
        """Fetch all table names"""
        result = self._catalog_query(
            """
            SELECT name
            FROM sqlite_master
            WHERE type = 'table' AND name NOT LIKE 'sqlite_%'
            ORDER BY name
            """
        )
        return [row[0] for row in result.rows]

    def fetch_columns(self, table_name: str) -> List[ColumnInfo]:
        """Fetch columns for a table"""
        result = self._catalog_query(
            f"PRAGMA table_info(\"{table_name}\")", table_name=table_name
        )

        columns = []
        for row in result.rows:
            # PRAGMA table_info returns: cid, name, type, notnull, dflt_value, pk
            columns.append(ColumnInfo(
                name=row[1],
                data_type=row[2] or "TEXT",  # SQLite default
                nullable=not row[3],
                default_value=row[4],
                is_primary_key=bool(row[5]),
            ))

        return columns

    def fetch_foreign_keys(self, table_name: str) -> List[ForeignKeyInfo]:
        """Fetch foreign key relationships"""
        result = self._catalog_query(
            f"PRAGMA foreign_key_list(\"{table_name}\")", table_name=table_name
        )

        # Group by id
        fk_dict: Dict[int, Dict[str, Any]] = {}
        for row in result.rows:
            # id, seq, table, from, to, on_update, on_delete, match
            fk_id = row[0]
            if fk_id not in fk_dict:
                fk_dict[fk_id] = {
                    "columns": [],
                    "referenced_table": row[2],
                    "referenced_columns": [],
                    "on_update": row[5],
                    "on_delete": row[6],
                }
            fk_dict[fk_id]["columns"].append(row[3])
            # "to" is NULL when the constraint targets the implicit primary key
            if row[4] is not None:
                fk_dict[fk_id]["referenced_columns"].append(row[4])

        foreign_keys = []
        for fk_id, fk_data in sorted(fk_dict.items()):
            foreign_keys.append(ForeignKeyInfo(
                name=f"fk_{table_name}_{fk_id}",
                columns=fk_data["columns"],
                referenced_table=fk_data["referenced_table"],
                referenced_columns=fk_data["referenced_columns"],
                on_update=fk_data["on_update"],
                on_delete=fk_data["on_delete"],
            ))

        return foreign_keys

    def fetch_indexes(self, table_name: str) -> List[IndexInfo]:
        """Fetch index information"""
        result = self._catalog_query(
            f"PRAGMA index_list(\"{table_name}\")", table_name=table_name
        )

        indexes = []
        for row in result.rows:
            # seq, name, unique, origin, partial
            index_name = row[1]
            is_unique = bool(row[2])
            origin = row[3]  # 'pk', 'c' (created), 'u' (unique constraint)

            col_result = self._catalog_query(
                f"PRAGMA index_info(\"{index_name}\")", table_name=table_name
            )

            indexes.append(IndexInfo(
                name=index_name,
                columns=[col_row[2] for col_row in col_result.rows],
                is_unique=is_unique,
                is_primary=origin == 'pk',
            ))

        return indexes
