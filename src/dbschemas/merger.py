"""
Schema Merger

Folds schemas from independent sources into one. Inputs are never
modified: every merge returns a new Schema, sharing unchanged tables with
its inputs and building new Table objects where both sides define a table.

Collision policy is "later source wins per key": for a table present in
both schemas, fields, indexes, foreign keys and relations are combined by
name and the addition's entry replaces the base's entry of the same name.
A field of unknown type only names a column (and may flag it as primary
key); it never replaces what an earlier source reported for it.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, Optional

from .models import UNKNOWN_TYPE, Field, Schema, Table, iter_tables
from .utils import get_logger

logger = get_logger(__name__)


def merge_fields(base: Field, addition: Field) -> Field:
    """Combine two reports of the same column"""
    if addition.type == UNKNOWN_TYPE:
        return replace(base, primary_key=base.primary_key or addition.primary_key)
    return addition


def merge_tables(base: Table, addition: Table) -> Table:
    """Combine two definitions of the same table"""
    is_pivot = base.is_pivot or addition.is_pivot

    fields = dict(base.fields)
    for name, field in addition.fields.items():
        fields[name] = merge_fields(fields[name], field) if name in fields else field

    relations = {**base.relations, **addition.relations}
    if is_pivot and relations:
        logger.debug(
            f"Dropping {len(relations)} relation(s) declared for pivot table {base.name}"
        )

    return Table(
        name=base.name,
        fields=fields,
        indexes={**base.indexes, **addition.indexes},
        foreign_keys={**base.foreign_keys, **addition.foreign_keys},
        # A pivot is expressed through its member tables only
        relations={} if is_pivot else relations,
        is_pivot=is_pivot,
        model=addition.model if addition.model is not None else base.model,
    )


def merge_schemas(base: Schema, addition: Schema) -> Schema:
    """
    Merge ``addition`` into a copy of ``base``

    Only the mapping interface of ``tables`` is used, so either side may be
    backed by a lazily populated container.
    """
    tables: Dict[str, Table] = {}

    for name, table in iter_tables(base.tables):
        tables[name] = table

    for name, table in iter_tables(addition.tables):
        if name in tables:
            tables[name] = merge_tables(tables[name], table)
        else:
            tables[name] = table

    logger.debug(
        f"Merged {len(addition.tables)} table(s) into {len(base.tables)}: "
        f"{len(tables)} total"
    )

    return Schema(tables)


def merge_all(schemas: Iterable[Optional[Schema]]) -> Optional[Schema]:
    """Left fold of merge_schemas over schemas in order, skipping None"""
    merged: Optional[Schema] = None
    for schema in schemas:
        if schema is None:
            continue
        merged = schema if merged is None else merge_schemas(merged, schema)
    return merged
