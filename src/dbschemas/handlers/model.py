"""
Model Handler

Drafts a Schema from application model classes so that tables discovered
elsewhere can be bound to the class that represents them. A model class
names its table with ``table`` (or ``__tablename__``) and may declare:

- ``primary_key``: name of the primary key field
- ``fields``: field names, or a mapping of field name to type

Fields without a declared type are left as ``unknown`` so that merging
them over a database-drafted table keeps the catalog's column metadata.

Usage:
    class FactoryModel:
        table = "factories"
        fields = {"name": "varchar", "uid": "varchar"}

    handler = ModelHandler(models=[FactoryModel])
    schema = handler.draft()
    schema.tables["factories"].model  # "myapp.models.FactoryModel"
"""
from __future__ import annotations

import importlib
from typing import Any, List, Optional, Sequence, Union

from ..config import SchemasConfig
from ..models import UNKNOWN_TYPE, Field, Schema, Table
from ..utils import get_logger
from .base import DraftHandler, register_handler

logger = get_logger(__name__)

ModelSpec = Union[str, type]


def model_identifier(model: type) -> str:
    """Dotted import path of a model class"""
    return f"{model.__module__}.{model.__qualname__}"


def import_model(path: str) -> type:
    """Import ``package.module.ClassName``"""
    module_name, _, class_name = path.rpartition(".")
    if not module_name:
        raise ImportError(f"'{path}' is not a dotted class path")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, class_name)
    except AttributeError:
        raise ImportError(f"Module '{module_name}' has no attribute '{class_name}'")


def model_table_name(model: type) -> Optional[str]:
    return getattr(model, "table", None) or getattr(model, "__tablename__", None)


@register_handler("model")
class ModelHandler(DraftHandler):
    """Model classes bound to tables"""

    def __init__(
        self,
        config: Optional[SchemasConfig] = None,
        models: Optional[Sequence[ModelSpec]] = None,
    ):
        super().__init__(config)
        self.models: List[ModelSpec] = list(models if models is not None else self.config.models)

    def draft(self) -> Optional[Schema]:
        schema = Schema()

        for spec in self.models:
            try:
                model = import_model(spec) if isinstance(spec, str) else spec
            except ImportError as e:
                self._record_error(f"Could not import model {spec}: {e}")
                continue

            table_name = model_table_name(model)
            if not table_name:
                self._record_error(f"Model {model_identifier(model)} does not name a table")
                continue

            schema.tables[table_name] = self._table_from_model(model, table_name)

        logger.info(f"Drafted {len(schema.tables)} table(s) from models")
        return schema

    def _table_from_model(self, model: type, table_name: str) -> Table:
        table = Table(name=table_name, model=model_identifier(model))

        primary_key = getattr(model, "primary_key", None)
        if primary_key:
            table.fields[primary_key] = Field(
                name=primary_key,
                nullable=False,
                primary_key=True,
            )

        declared: Any = getattr(model, "fields", None) or {}
        if isinstance(declared, dict):
            for name, field_type in declared.items():
                table.fields[name] = Field(name=name, type=field_type or UNKNOWN_TYPE)
        else:
            for name in declared:
                table.fields[name] = Field(name=name)

        return table
