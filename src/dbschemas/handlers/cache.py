"""
Cache Handler

Archives a Schema into a cache store and reads it back lazily. The store
holds one index entry per connection group and one entry per table:

    schema:<group>          -> {"tables": [<name>, ...]}
    schema:<group>:<table>  -> <table definition>

Reading fetches only the index; each table is fetched on first access.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from ..cache import CacheStore, get_default_cache
from ..config import SchemasConfig
from ..models import Schema, Table, iter_tables
from ..reader import LazyTableContainer
from ..utils import SchemaSerializationError, TableUnavailableError, get_logger
from .base import ArchiveHandler, ReadHandler, register_handler

logger = get_logger(__name__)

KEY_PREFIX = "schema"


@register_handler("cache")
class CacheHandler(ArchiveHandler, ReadHandler):
    """Cache store destination and source"""

    def __init__(
        self,
        config: Optional[SchemasConfig] = None,
        store: Optional[CacheStore] = None,
        group: Optional[str] = None,
    ):
        super().__init__(config)
        self.store = store if store is not None else get_default_cache()
        self.group = group or self.config.group
        self.ttl = self.config.cache_ttl

    @property
    def key(self) -> str:
        return f"{KEY_PREFIX}:{self.group}"

    def table_key(self, table_name: str) -> str:
        return f"{self.key}:{table_name}"

    def archive(self, schema: Schema) -> bool:
        result = True
        names = []

        for name, table in iter_tables(schema.tables):
            stored = self.store.set(self.table_key(name), table.to_dict(), self.ttl)
            if not stored:
                self._record_error(f"Could not cache table {name}")
            result = result and stored
            names.append(name)

        # Index last, so a reader never sees tables that were not written
        indexed = self.store.set(self.key, {"tables": names}, self.ttl)
        if not indexed:
            self._record_error(f"Could not cache schema index under {self.key}")

        logger.info(f"Archived {len(names)} table(s) under {self.key}")
        return result and indexed

    def read(self) -> Optional[Schema]:
        index = self.store.get(self.key)
        if index is None:
            self._record_error(f"No archived schema under {self.key}")
            return None

        names = index.get("tables") if isinstance(index, dict) else None
        if not isinstance(names, list):
            self._record_error(f"Malformed schema index under {self.key}")
            return None

        logger.info(f"Reading {len(names)} table(s) from {self.key}")
        return Schema(LazyTableContainer(names, self._load_table))

    def _load_table(self, name: str) -> Table:
        data: Optional[Dict[str, Any]] = self.store.get(self.table_key(name))
        if data is None:
            raise TableUnavailableError(name)
        try:
            return Table.from_dict(data, name)
        except SchemaSerializationError as e:
            raise TableUnavailableError(name, f"Archived table '{name}' is malformed", e)
