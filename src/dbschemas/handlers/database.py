"""
Database Handler

Drafts a Schema from a live database catalog in two passes:

1. Introspection: every table the connection can list becomes a Table with
   its fields, indexes and foreign keys; each declared foreign key also
   yields a direct relation on the owning table.
2. Pivot inference: tables named ``<left>_<right>`` are checked against the
   completed table set and, when their keys resolve, turned into
   many-to-many joins between ``left`` and ``right``.

A failure on one table is recorded and that table is skipped; the rest of
the catalog is still drafted.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from ..adapters import BaseCatalogAdapter, ColumnInfo, ForeignKeyInfo, IndexInfo, create_adapter
from ..config import SchemasConfig
from ..inference import PivotInferencer
from ..models import Field, ForeignKey, Index, Pivot, Relation, RelationType, Schema, Table
from ..naming import is_foreign_key_field, pivot_candidates
from ..utils import (
    ConfigurationError,
    SchemasError,
    classify_database_error,
    get_logger,
)
from .base import DraftHandler, register_handler

logger = get_logger(__name__)


@register_handler("database")
class DatabaseHandler(DraftHandler):
    """Catalog introspection plus pivot inference"""

    def __init__(
        self,
        config: Optional[SchemasConfig] = None,
        adapter: Optional[BaseCatalogAdapter] = None,
    ):
        super().__init__(config)
        self.adapter = adapter

    def _get_adapter(self) -> BaseCatalogAdapter:
        if self.adapter is None:
            if self.config.database is None:
                raise ConfigurationError(
                    "No database configured for the database handler",
                    config_key="database",
                )
            self.adapter = create_adapter(self.config.database)
        return self.adapter

    def close(self) -> None:
        """Release the catalog connection"""
        if self.adapter is not None:
            self.adapter.disconnect()

    def draft(self) -> Optional[Schema]:
        """Map the database into a new Schema"""
        # A connection this handler opened itself is closed again after each draft
        owns_adapter = self.adapter is None
        try:
            return self._draft_schema()
        finally:
            if owns_adapter:
                self.close()
                self.adapter = None

    def _draft_schema(self) -> Optional[Schema]:
        try:
            adapter = self._get_adapter()
            if not adapter.is_connected():
                adapter.connect()
            table_names = adapter.list_tables()
        except Exception as e:
            self._record_error(classify_database_error(e))
            return None

        schema = Schema()

        # Foreign-key-looking fields per table, used when pivots lack declared keys
        field_relations: Dict[str, List[str]] = {}

        for table_name in table_names:
            if table_name in self.config.ignored_tables:
                logger.debug(f"Skipping ignored table {table_name}")
                continue

            try:
                table, candidates = self._introspect_table(adapter, table_name)
            except SchemasError as e:
                self._record_error(classify_database_error(e, table_name))
                continue

            if candidates:
                field_relations[table_name] = candidates
            schema.tables[table_name] = table

        # Second pass: every candidate's member tables must already exist
        inferencer = PivotInferencer(schema, field_relations)
        pivots = inferencer.infer(pivot_candidates(schema.tables.keys()))

        logger.info(
            f"Drafted {len(schema.tables)} table(s) from the database "
            f"({len(pivots)} pivot(s))"
        )

        return schema

    def _introspect_table(
        self,
        adapter: BaseCatalogAdapter,
        table_name: str,
    ) -> Tuple[Table, List[str]]:
        """Build one Table; returns it with its candidate foreign key fields"""
        table = Table(name=table_name)
        candidates: List[str] = []

        for column in adapter.fetch_columns(table_name):
            field = self._field_from_column(column)

            if not field.primary_key and is_foreign_key_field(field.name):
                candidates.append(field.name)

            table.fields[field.name] = field

        for index_info in adapter.fetch_indexes(table_name):
            index = self._index_from_info(index_info)
            table.indexes[index.name] = index

        for fk_info in adapter.fetch_foreign_keys(table_name):
            foreign_key = self._foreign_key_from_info(table_name, fk_info)
            table.foreign_keys[foreign_key.constraint_name] = foreign_key

            relation = Relation(
                table=foreign_key.foreign_table_name,
                type=RelationType.BELONGS_TO,
            )

            # Not all drivers supply the column names
            if foreign_key.column_name:
                relation.pivots = [Pivot(
                    foreign_key.foreign_table_name,
                    foreign_key.column_name,
                    foreign_key.foreign_column_name,
                )]

            table.relations[relation.table] = relation

        return table, candidates

    @staticmethod
    def _field_from_column(column: ColumnInfo) -> Field:
        extra = {
            key: value
            for key, value in (
                ("precision", column.precision),
                ("scale", column.scale),
                ("comment", column.comment),
            )
            if value is not None
        }

        return Field(
            name=column.name,
            type=column.data_type,
            nullable=column.nullable,
            primary_key=column.is_primary_key,
            default=column.default_value,
            max_length=column.max_length,
            extra=extra,
        )

    @staticmethod
    def _index_from_info(index_info: IndexInfo) -> Index:
        return Index(
            name=index_info.name,
            fields=list(index_info.columns),
            unique=index_info.is_unique,
        )

    @staticmethod
    def _foreign_key_from_info(table_name: str, fk_info: ForeignKeyInfo) -> ForeignKey:
        return ForeignKey(
            constraint_name=fk_info.name,
            table_name=table_name,
            foreign_table_name=fk_info.referenced_table,
            column_name=fk_info.columns[0] if fk_info.columns else None,
            foreign_column_name=fk_info.referenced_columns[0] if fk_info.referenced_columns else None,
            on_delete=fk_info.on_delete,
            on_update=fk_info.on_update,
        )
