"""
File Handler

Archives a Schema as a single YAML or JSON document (chosen by the file
extension) and reads it back. The document is parsed once on read; Table
objects are built on first access.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from ..config import SchemasConfig
from ..models import Schema, Table, load_document
from ..reader import LazyTableContainer
from ..utils import SchemaSerializationError, TableUnavailableError, get_logger
from .base import ArchiveHandler, ReadHandler, register_handler

logger = get_logger(__name__)


@register_handler("file")
class FileHandler(ArchiveHandler, ReadHandler):
    """Single-document file destination and source"""

    def __init__(
        self,
        config: Optional[SchemasConfig] = None,
        path: Optional[str] = None,
    ):
        super().__init__(config)
        self.path = Path(path or self.config.archive_path)

    def archive(self, schema: Schema) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            schema.save(str(self.path))
        except OSError as e:
            self._record_error(f"Could not write schema to {self.path}: {e}")
            return False

        logger.info(f"Archived {len(schema.tables)} table(s) to {self.path}")
        return True

    def read(self) -> Optional[Schema]:
        if not self.path.is_file():
            self._record_error(f"Schema file not found: {self.path}")
            return None

        try:
            data = load_document(str(self.path))
        except (OSError, SchemaSerializationError) as e:
            self._record_error(f"Could not read schema from {self.path}: {e}")
            return None

        tables: Dict[str, Any] = data.get("tables") or {}
        if not isinstance(tables, dict):
            self._record_error(f"Malformed schema document: {self.path}")
            return None

        def load_table(name: str) -> Table:
            try:
                return Table.from_dict(tables[name] or {}, name)
            except SchemaSerializationError as e:
                raise TableUnavailableError(name, f"Table '{name}' in {self.path} is malformed", e)

        logger.info(f"Reading {len(tables)} table(s) from {self.path}")
        return Schema(LazyTableContainer(tables.keys(), load_table))
