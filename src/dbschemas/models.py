"""
Schema Model Definitions

Plain data structures describing a database: tables with their fields,
indexes, foreign keys and relations. Relations reference other tables by
name only, so a Schema never holds cycles.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, MutableMapping, NamedTuple, Optional, Tuple
import yaml

from .utils.errors import SchemaSerializationError


# Type of a field whose source did not say
UNKNOWN_TYPE = "unknown"


class RelationType(str, Enum):
    """Kinds of relation from one table to another"""
    BELONGS_TO = "belongsTo"
    HAS_MANY = "hasMany"
    MANY_TO_MANY = "manyToMany"


class Pivot(NamedTuple):
    """
    One hop of a join path

    The hop enters ``table`` by matching ``local_key`` on the previous
    side against ``foreign_key`` on ``table``.
    """
    table: str
    local_key: Optional[str] = None
    foreign_key: Optional[str] = None


@dataclass
class Field:
    """A column as reported by a source"""
    name: str
    type: str = UNKNOWN_TYPE
    nullable: bool = True
    primary_key: bool = False
    default: Optional[Any] = None
    max_length: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "type": self.type,
            "nullable": self.nullable,
            "primary_key": self.primary_key,
            "default": self.default,
            "max_length": self.max_length,
        }
        if self.extra:
            data["extra"] = dict(self.extra)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], name: Optional[str] = None) -> "Field":
        return cls(
            name=data.get("name", name),
            type=data.get("type", data.get("data_type", UNKNOWN_TYPE)),
            nullable=data.get("nullable", True),
            primary_key=data.get("primary_key", False),
            default=data.get("default"),
            max_length=data.get("max_length"),
            extra=dict(data.get("extra", {})),
        )


@dataclass
class Index:
    """An index over one or more fields"""
    name: str
    fields: List[str] = field(default_factory=list)
    unique: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "fields": list(self.fields),
            "unique": self.unique,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], name: Optional[str] = None) -> "Index":
        return cls(
            name=data.get("name", name),
            fields=list(data.get("fields", [])),
            unique=data.get("unique", False),
        )


@dataclass
class ForeignKey:
    """A declared foreign key constraint"""
    constraint_name: str
    table_name: str
    foreign_table_name: str
    # Not every driver reports column names
    column_name: Optional[str] = None
    foreign_column_name: Optional[str] = None
    on_delete: Optional[str] = None
    on_update: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "constraint_name": self.constraint_name,
            "table_name": self.table_name,
            "column_name": self.column_name,
            "foreign_table_name": self.foreign_table_name,
            "foreign_column_name": self.foreign_column_name,
            "on_delete": self.on_delete,
            "on_update": self.on_update,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], name: Optional[str] = None) -> "ForeignKey":
        return cls(
            constraint_name=data.get("constraint_name", name),
            table_name=data.get("table_name", ""),
            foreign_table_name=data["foreign_table_name"],
            column_name=data.get("column_name"),
            foreign_column_name=data.get("foreign_column_name"),
            on_delete=data.get("on_delete"),
            on_update=data.get("on_update"),
        )


@dataclass
class Relation:
    """
    A relation from the owning table to ``table``

    Direct relations carry zero or one pivot; many-to-many relations carry
    exactly two: the join table, then the far table.
    """
    table: str
    type: RelationType = RelationType.BELONGS_TO
    pivots: List[Pivot] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "table": self.table,
            "type": self.type.value,
            "pivots": [list(p) for p in self.pivots],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], table: Optional[str] = None) -> "Relation":
        return cls(
            table=data.get("table", table),
            type=RelationType(data.get("type", RelationType.BELONGS_TO.value)),
            pivots=[Pivot(*p) for p in data.get("pivots", [])],
        )


@dataclass
class Table:
    """A table and everything it owns"""
    name: str
    fields: Dict[str, Field] = field(default_factory=dict)
    indexes: Dict[str, Index] = field(default_factory=dict)
    foreign_keys: Dict[str, ForeignKey] = field(default_factory=dict)
    relations: Dict[str, Relation] = field(default_factory=dict)
    is_pivot: bool = False

    # Identifier of the model class bound to this table, if any
    model: Optional[str] = None

    def primary_key(self) -> Optional[Field]:
        """First field flagged as primary key"""
        for f in self.fields.values():
            if f.primary_key:
                return f
        return None

    def get_field(self, name: str) -> Optional[Field]:
        """Get field by name (case-insensitive)"""
        if name in self.fields:
            return self.fields[name]
        name_lower = name.lower()
        for field_name, f in self.fields.items():
            if field_name.lower() == name_lower:
                return f
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "fields": {k: v.to_dict() for k, v in self.fields.items()},
            "indexes": {k: v.to_dict() for k, v in self.indexes.items()},
            "foreign_keys": {k: v.to_dict() for k, v in self.foreign_keys.items()},
            "relations": {k: v.to_dict() for k, v in self.relations.items()},
            "is_pivot": self.is_pivot,
            "model": self.model,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], name: Optional[str] = None) -> "Table":
        """Create table from dictionary"""
        try:
            table_name = data.get("name", name)

            return cls(
                name=table_name,
                fields={
                    k: Field.from_dict(v or {}, k)
                    for k, v in (data.get("fields") or {}).items()
                },
                indexes={
                    k: Index.from_dict(v or {}, k)
                    for k, v in (data.get("indexes") or {}).items()
                },
                foreign_keys={
                    k: _foreign_key_from_dict(v, k, table_name)
                    for k, v in (data.get("foreign_keys") or {}).items()
                },
                relations={
                    k: Relation.from_dict(v or {}, k)
                    for k, v in (data.get("relations") or {}).items()
                },
                is_pivot=data.get("is_pivot", False),
                model=data.get("model"),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise SchemaSerializationError(
                f"Invalid definition for table '{name or data}'",
                original_error=e,
            )


def _foreign_key_from_dict(data: Dict[str, Any], name: str, table_name: str) -> ForeignKey:
    fk = ForeignKey.from_dict(data, name)
    if not fk.table_name:
        fk.table_name = table_name
    return fk


# Anything offering keyed access to tables; may be populated lazily
TableContainer = MutableMapping[str, Table]


def iter_tables(tables: TableContainer) -> Iterator[Tuple[str, Table]]:
    """(name, table) pairs, skipping tables the container can no longer produce"""
    for name in list(tables.keys()):
        table = tables.get(name)
        if table is not None:
            yield name, table


class Schema:
    """
    A collection of tables keyed by name

    ``tables`` is a plain dict for drafted schemas and may be a lazily
    populated container for schemas read back from an archive; consumers
    only rely on the mapping interface.
    """

    def __init__(self, tables: Optional[TableContainer] = None):
        self.tables: TableContainer = tables if tables is not None else {}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return dict(iter_tables(self.tables)) == dict(iter_tables(other.tables))

    def __repr__(self) -> str:
        return f"Schema(tables={list(self.tables.keys())!r})"

    def __iter__(self) -> Iterator[Table]:
        return (table for _, table in iter_tables(self.tables))

    def __len__(self) -> int:
        return len(self.tables)

    def get_table(self, name: str) -> Optional[Table]:
        """Get table by name (case-insensitive)"""
        if name in self.tables:
            return self.tables.get(name)
        name_lower = name.lower()
        for table_name in list(self.tables.keys()):
            if table_name.lower() == name_lower:
                return self.tables.get(table_name)
        return None

    def get_table_names(self) -> List[str]:
        """Get all table names in discovery order"""
        return list(self.tables.keys())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tables": {k: v.to_dict() for k, v in iter_tables(self.tables)},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Schema":
        """Create schema from dictionary"""
        if not isinstance(data, dict):
            raise SchemaSerializationError("Schema data must be a mapping")

        tables = data.get("tables") or {}
        if not isinstance(tables, dict):
            raise SchemaSerializationError("'tables' must be a mapping of table name to definition")

        return cls({name: Table.from_dict(t or {}, name) for name, t in tables.items()})

    def to_json(self, indent: int = 2) -> str:
        """Export as JSON"""
        return json.dumps(self.to_dict(), indent=indent, default=str, ensure_ascii=False)

    def to_yaml(self) -> str:
        """Export as YAML"""
        return yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=False, allow_unicode=True)

    def save(self, path: str) -> None:
        """Save schema to file (JSON or YAML based on extension)"""
        with open(path, 'w', encoding="utf-8") as f:
            if path.endswith('.yaml') or path.endswith('.yml'):
                f.write(self.to_yaml())
            else:
                f.write(self.to_json())

    @classmethod
    def load(cls, path: str) -> "Schema":
        """Load schema from file"""
        return cls.from_dict(load_document(path))


def load_document(path: str) -> Dict[str, Any]:
    """Parse a YAML or JSON document, raising SchemaSerializationError on bad content"""
    try:
        with open(path, 'r', encoding="utf-8") as f:
            if path.endswith('.yaml') or path.endswith('.yml'):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError, UnicodeDecodeError) as e:
        raise SchemaSerializationError(f"Could not parse {path}", source=path, original_error=e)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise SchemaSerializationError(f"Expected a mapping in {path}", source=path)
    return data
