"""
Naming Conventions

Pure string matching used to infer relations that a catalog does not
declare: join tables named ``<left>_<right>`` and foreign key fields named
``<singular>_id``. Nothing here touches a database.

Common patterns:
- groups_users -> (groups, users)
- group_id -> groups.id
- category_id -> categories.id
- person_id -> people.id
"""
from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import Table

SEPARATOR = "_"

FIELD_PATTERN = re.compile(r'^(.+)_id$')

# Common singular -> plural mappings for irregular nouns
IRREGULAR_PLURALS = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "analysis": "analyses",
}


def split_pivot_name(table_name: str) -> Optional[Tuple[str, str]]:
    """
    Split a table name at its first separator

    ``users_groups_extra`` yields ``("users", "groups_extra")``; no other
    split point is tried.
    """
    if SEPARATOR not in table_name:
        return None
    left, right = table_name.split(SEPARATOR, 1)
    if not left or not right:
        return None
    return left, right


def pivot_candidates(table_names: Iterable[str]) -> List[str]:
    """Table names that could be join tables, in the given order"""
    return [name for name in table_names if SEPARATOR in name]


def is_foreign_key_field(field_name: str) -> bool:
    """Whether a field name follows the foreign key convention"""
    return FIELD_PATTERN.match(field_name) is not None


def pluralize(word: str) -> str:
    """Simple pluralization covering common English rules"""
    if word in IRREGULAR_PLURALS:
        return IRREGULAR_PLURALS[word]
    if word.endswith('y') and len(word) > 1 and word[-2] not in 'aeiou':
        return word[:-1] + 'ies'
    if word.endswith(('s', 'x', 'z', 'ch', 'sh')):
        return word + 'es'
    return word + 's'


def singularize(word: str) -> str:
    """Simple singularization (reverse of common plural rules)"""
    for singular, plural in IRREGULAR_PLURALS.items():
        if word == plural:
            return singular
    if word.endswith('ies') and len(word) > 3:
        return word[:-3] + 'y'
    if word.endswith(('ses', 'xes', 'zes', 'ches', 'shes')):
        return word[:-2]
    if word.endswith('s') and not word.endswith('ss'):
        return word[:-1]
    return word


def field_targets_table(field_name: str, table_name: str) -> bool:
    """Whether ``<prefix>_id`` names ``table_name`` in singular or plural form"""
    match = FIELD_PATTERN.match(field_name.lower())
    if not match:
        return False

    prefix = match.group(1)
    target = table_name.lower()
    return target in (prefix, pluralize(prefix)) or singularize(target) == prefix


def find_primary_key(table: Table) -> Optional[str]:
    """Name of the table's primary key, falling back to a field named ``id``"""
    primary = table.primary_key()
    if primary is not None:
        return primary.name
    if "id" in table.fields:
        return "id"
    return None


def foreign_key_candidates(table: Table) -> List[str]:
    """Non-primary fields whose names follow the foreign key convention"""
    return [
        f.name for f in table.fields.values()
        if not f.primary_key and is_foreign_key_field(f.name)
    ]


def find_key_to_foreign_table(
    table: Table,
    foreign_table_name: str,
    candidates: Optional[Sequence[str]] = None,
) -> Optional[str]:
    """
    Name of the field in ``table`` that points at ``foreign_table_name``

    An explicit foreign key wins; otherwise the first candidate field whose
    name matches the foreign table by convention.
    """
    for fk in table.foreign_keys.values():
        if fk.foreign_table_name == foreign_table_name and fk.column_name:
            return fk.column_name

    if candidates is None:
        candidates = foreign_key_candidates(table)

    for field_name in candidates:
        if field_targets_table(field_name, foreign_table_name):
            return field_name

    return None
