"""
Directory Handler

Drafts a Schema from schema definition files kept alongside an
application. Every ``*.yaml``, ``*.yml`` and ``*.json`` file in the
configured directory is read in file-name order; later files override
earlier ones key by key.

Expected file format:
```yaml
tables:
  workers:
    fields:
      id:
        type: integer
        primary_key: true
      factory_id:
        type: integer
    relations:
      factories:
        type: belongsTo
        pivots:
          - [factories, factory_id, id]
      products:
        type: hasMany
```
"""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from ..config import SchemasConfig
from ..merger import merge_schemas
from ..models import Schema, load_document
from ..utils import SchemaSerializationError, get_logger
from .base import DraftHandler, register_handler

logger = get_logger(__name__)

SCHEMA_FILE_SUFFIXES = ('.yaml', '.yml', '.json')


@register_handler("directory")
class DirectoryHandler(DraftHandler):
    """Schema definition files in a directory"""

    def __init__(
        self,
        config: Optional[SchemasConfig] = None,
        directory: Optional[str] = None,
    ):
        super().__init__(config)
        self.directory = Path(directory or self.config.schemas_directory)

    def schema_files(self) -> List[Path]:
        """Definition files in load order"""
        return sorted(
            path for path in self.directory.iterdir()
            if path.is_file() and path.suffix.lower() in SCHEMA_FILE_SUFFIXES
        )

    def draft(self) -> Optional[Schema]:
        if not self.directory.is_dir():
            self._record_error(f"Schema directory not found: {self.directory}")
            return None

        try:
            paths = self.schema_files()
        except OSError as e:
            self._record_error(f"Could not list schema directory {self.directory}: {e}")
            return None

        schema = Schema()
        for path in paths:
            try:
                file_schema = Schema.from_dict(load_document(str(path)))
            except (OSError, SchemaSerializationError) as e:
                self._record_error(f"Could not load schema file {path.name}: {e}")
                continue

            logger.debug(f"Loaded {len(file_schema.tables)} table(s) from {path.name}")
            schema = merge_schemas(schema, file_schema)

        logger.info(f"Drafted {len(schema.tables)} table(s) from {self.directory}")
        return schema
