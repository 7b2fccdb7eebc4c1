"""
Pivot Inference

Second pass over a fully introspected schema that recognizes implicit
many-to-many join tables by name and rewrites relations around them.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .models import Pivot, Relation, RelationType, Schema
from .naming import find_key_to_foreign_table, find_primary_key, split_pivot_name
from .utils import get_logger

logger = get_logger(__name__)


@dataclass
class PivotMatch:
    """A join table whose four keys all resolved"""
    table: str
    left: str
    right: str
    left_primary_key: str
    left_foreign_key: str
    right_primary_key: str
    right_foreign_key: str


class PivotInferencer:
    """
    Detects join tables named ``<left>_<right>``

    A candidate is committed only when both member tables exist, both have
    a primary key, and the candidate has a field pointing at each of them.
    Anything less leaves the candidate untouched.
    """

    def __init__(
        self,
        schema: Schema,
        field_candidates: Optional[Dict[str, List[str]]] = None,
    ):
        self.schema = schema
        self.field_candidates = field_candidates or {}

    def match(self, table_name: str) -> Optional[PivotMatch]:
        """Resolve a candidate without modifying the schema"""
        split = split_pivot_name(table_name)
        if split is None:
            return None

        left, right = split
        tables = self.schema.tables
        if table_name not in tables or left not in tables or right not in tables:
            return None

        pivot_table = tables[table_name]
        candidates: Optional[Sequence[str]] = self.field_candidates.get(table_name)

        left_foreign_key = find_key_to_foreign_table(pivot_table, left, candidates)
        left_primary_key = find_primary_key(tables[left])
        right_foreign_key = find_key_to_foreign_table(pivot_table, right, candidates)
        right_primary_key = find_primary_key(tables[right])

        if not (left_foreign_key and left_primary_key and right_foreign_key and right_primary_key):
            logger.debug(f"Table {table_name} looks like a pivot but its keys did not resolve")
            return None

        return PivotMatch(
            table=table_name,
            left=left,
            right=right,
            left_primary_key=left_primary_key,
            left_foreign_key=left_foreign_key,
            right_primary_key=right_primary_key,
            right_foreign_key=right_foreign_key,
        )

    def apply(self, match: PivotMatch) -> None:
        """Flag the join table and add the mirrored many-to-many relations"""
        tables = self.schema.tables

        pivot_table = tables[match.table]
        pivot_table.is_pivot = True
        pivot_table.relations = {}

        # groups -> groups_users -> users
        tables[match.left].relations[match.right] = Relation(
            table=match.right,
            type=RelationType.MANY_TO_MANY,
            pivots=[
                Pivot(match.table, match.left_primary_key, match.left_foreign_key),
                Pivot(match.right, match.right_foreign_key, match.right_primary_key),
            ],
        )

        # users -> groups_users -> groups
        tables[match.right].relations[match.left] = Relation(
            table=match.left,
            type=RelationType.MANY_TO_MANY,
            pivots=[
                Pivot(match.table, match.right_primary_key, match.right_foreign_key),
                Pivot(match.left, match.left_foreign_key, match.left_primary_key),
            ],
        )

        logger.info(f"Identified pivot table: {match.table} ({match.left} <-> {match.right})")

    def infer(self, candidates: Sequence[str]) -> List[str]:
        """Process candidates in order; returns the names committed as pivots"""
        pivots = []
        for table_name in candidates:
            match = self.match(table_name)
            if match is not None:
                self.apply(match)
                pivots.append(table_name)
        return pivots
