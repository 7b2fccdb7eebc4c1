"""
MySQL Catalog Adapter
Reads the MySQL/MariaDB catalog through INFORMATION_SCHEMA
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


@register_adapter(DatabaseType.MYSQL)
class MySQLAdapter(BaseCatalogAdapter):
    """MySQL/MariaDB catalog adapter"""

    def __init__(self, config: DatabaseConfig):
        super().__init__(config)
        self._cursor = None

    @property
    def database_type(self) -> DatabaseType:
        return DatabaseType.MYSQL

    def connect(self) -> None:
        """Establish MySQL connection"""
        try:
            import mysql.connector
        except ImportError:
            raise ImportError(
                "mysql-connector-python is required for MySQL support. "
                "Install it with: pip install dbschemas[mysql]"
            )

        connection_config = {
            "host": self.config.host,
            "port": self.config.port,
            "database": self.config.database,
            "user": self.config.username,
            "password": self.config.password.get_secret_value() if self.config.password else None,
            "connection_timeout": self.config.connection_timeout,
            "autocommit": True,
        }

        # Add SSL configuration if enabled
        if self.config.ssl_enabled:
            connection_config["ssl_ca"] = self.config.ssl_ca_path

        self._connection = mysql.connector.connect(**connection_config)
        self._cursor = self._connection.cursor()

    def disconnect(self) -> None:
        """Close MySQL connection"""
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
        return self._connection.is_connected()

    def execute_query(self, sql: str, params: QueryParams = None) -> QueryResult:
        """Execute SQL query"""
        import mysql.connector

        if not self.is_connected():
            self.connect()

        start_time = time.time()

        try:
            self._cursor.execute(sql, params or ())

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

        except mysql.connector.Error as e:
            execution_time = (time.time() - start_time) * 1000
            return QueryResult(
                success=False,
                execution_time_ms=execution_time,
                error_message=str(e),
            )

    def list_tables(self) -> List[str]:
        """Fetch all base table names in the configured database"""
        result = self._catalog_query(
            """
            SELECT TABLE_NAME
            FROM INFORMATION_SCHEMA.TABLES
            WHERE TABLE_SCHEMA = %s AND TABLE_TYPE = 'BASE TABLE'
            ORDER BY TABLE_NAME
            """,
            (self.config.database,)
        )
        return [row[0] for row in result.rows]

    def fetch_columns(self, table_name: str) -> List[ColumnInfo]:
        """Fetch columns for a table"""
        result = self._catalog_query(
            """
            SELECT
                COLUMN_NAME,
                DATA_TYPE,
                IS_NULLABLE,
                COLUMN_DEFAULT,
                CHARACTER_MAXIMUM_LENGTH,
                NUMERIC_PRECISION,
                NUMERIC_SCALE,
                COLUMN_KEY,
                COLUMN_COMMENT
            FROM INFORMATION_SCHEMA.COLUMNS
            WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s
            ORDER BY ORDINAL_POSITION
            """,
            (self.config.database, table_name),
            table_name=table_name,
        )

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
                is_primary_key=row[7] == "PRI",
                comment=row[8] if row[8] else None,
            ))

        return columns

    def fetch_foreign_keys(self, table_name: str) -> List[ForeignKeyInfo]:
        """Fetch foreign key relationships"""
        result = self._catalog_query(
            """
            SELECT
                k.CONSTRAINT_NAME,
                k.COLUMN_NAME,
                k.REFERENCED_TABLE_NAME,
                k.REFERENCED_COLUMN_NAME,
                r.DELETE_RULE,
                r.UPDATE_RULE
            FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE k
            JOIN INFORMATION_SCHEMA.REFERENTIAL_CONSTRAINTS r
                ON r.CONSTRAINT_SCHEMA = k.TABLE_SCHEMA
                AND r.CONSTRAINT_NAME = k.CONSTRAINT_NAME
            WHERE k.TABLE_SCHEMA = %s
              AND k.TABLE_NAME = %s
              AND k.REFERENCED_TABLE_NAME IS NOT NULL
            ORDER BY k.CONSTRAINT_NAME, k.ORDINAL_POSITION
            """,
            (self.config.database, table_name),
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
                INDEX_NAME,
                COLUMN_NAME,
                NON_UNIQUE,
                INDEX_TYPE
            FROM INFORMATION_SCHEMA.STATISTICS
            WHERE TABLE_SCHEMA = %s AND TABLE_NAME = %s
            ORDER BY INDEX_NAME, SEQ_IN_INDEX
            """,
            (self.config.database, table_name),
            table_name=table_name,
        )

        # Group by index name
        idx_dict: Dict[str, Dict[str, Any]] = {}
        for row in result.rows:
            index_name = row[0]
            if index_name not in idx_dict:
                idx_dict[index_name] = {
                    "columns": [],
                    "is_unique": row[2] == 0,
                    "is_primary": index_name == "PRIMARY",
                    "index_type": row[3],
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
