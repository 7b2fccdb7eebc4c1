"""
Schemas Orchestrator

Holds the current Schema and sequences handlers around it:

    schemas = Schemas(config)
    schemas.draft(["database", "model"]).archive()
    schema = schemas.get()

``get()`` falls back on the configured automation (read, then draft and
archive) when no schema is loaded. Handler errors never abort an
operation; they are collected and drained with ``get_errors()``.
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Union

from .config import SchemasConfig, get_config
from .handlers import ArchiveHandler, BaseHandler, DraftHandler, ReadHandler, create_handler
from .merger import merge_schemas
from .models import Schema
from .reader import LazyTableContainer
from .utils import (
    MissingSchemaError,
    SchemaUnavailableError,
    get_logger,
    log_context,
    log_operation,
)

logger = get_logger(__name__)

HandlerArg = Union[str, BaseHandler]
HandlersArg = Union[HandlerArg, Sequence[HandlerArg], None]


class Schemas:
    """Drafts, archives and reads database schemas"""

    def __init__(
        self,
        config: Optional[SchemasConfig] = None,
        schema: Optional[Schema] = None,
    ):
        self.config = config or get_config()
        self.schema = schema
        self.errors: List[str] = []

    def get_errors(self) -> List[str]:
        """Return and clear any error messages, including lazy table load failures"""
        self._collect_table_errors()
        errors = self.errors
        self.errors = []
        return errors

    def _collect_table_errors(self) -> None:
        if self.schema is not None and isinstance(self.schema.tables, LazyTableContainer):
            self.errors.extend(self.schema.tables.get_errors())

    def reset(self) -> "Schemas":
        """Drop the current schema and any errors"""
        self.schema = None
        self.errors = []
        return self

    def set_schema(self, schema: Optional[Schema]) -> "Schemas":
        self.schema = schema
        return self

    def get(self) -> Optional[Schema]:
        """
        Return the current schema, loading one if needed

        Raises:
            SchemaUnavailableError: If no source produced a schema and the
                configuration is not silent
        """
        if self.schema is not None:
            return self.schema

        automate = self.config.automate

        if automate.read:
            self.read()
            if self.schema is not None:
                return self.schema

        if automate.draft:
            self.draft()
            if self.schema is not None:
                if automate.archive:
                    self.archive()
                return self.schema

        error = SchemaUnavailableError()
        if self.config.silent:
            self.errors.append(error.message)
            return None
        raise error

    def draft(self, handlers: HandlersArg = None) -> "Schemas":
        """Draft from each handler in order, merging into the current schema"""
        names = self._resolve(handlers, self.config.draft_handlers)

        with log_operation(logger, "draft", handlers=[self._label(h) for h in names]) as ctx:
            for spec in names:
                handler = create_handler(spec, self.config)
                if not isinstance(handler, DraftHandler):
                    raise TypeError(f"{self._label(handler)} handler cannot draft")

                with log_context(handler=handler.name):
                    drafted = handler.draft()
                self.errors.extend(handler.get_errors())

                if drafted is None:
                    continue
                if self.schema is None:
                    self.schema = drafted
                else:
                    merged = merge_schemas(self.schema, drafted)
                    self._collect_table_errors()
                    self.schema = merged

            ctx['tables'] = len(self.schema.tables) if self.schema is not None else 0

        return self

    def archive(self, handlers: HandlersArg = None) -> bool:
        """
        Persist the current schema with each handler

        Returns:
            True only if every handler succeeded

        Raises:
            MissingSchemaError: If there is no current schema
        """
        if self.schema is None:
            raise MissingSchemaError("archive")

        names = self._resolve(handlers, self.config.archive_handlers)
        result = True

        with log_operation(logger, "archive", handlers=[self._label(h) for h in names]) as ctx:
            for spec in names:
                handler = create_handler(spec, self.config)
                if not isinstance(handler, ArchiveHandler):
                    raise TypeError(f"{self._label(handler)} handler cannot archive")

                with log_context(handler=handler.name):
                    archived = handler.archive(self.schema)
                self.errors.extend(handler.get_errors())

                result = result and archived

            ctx['success'] = result

        return result

    def read(self, handler: Optional[HandlerArg] = None) -> "Schemas":
        """Replace the current schema with a lazily loaded archived one"""
        spec = handler or self.config.read_handler

        with log_operation(logger, "read", handler=self._label(spec)) as ctx:
            instance = create_handler(spec, self.config)
            if not isinstance(instance, ReadHandler):
                raise TypeError(f"{self._label(instance)} handler cannot read")

            with log_context(handler=instance.name):
                schema = instance.read()
            self.errors.extend(instance.get_errors())

            if schema is not None:
                self._collect_table_errors()
                self.schema = schema
            ctx['found'] = schema is not None

        return self

    @staticmethod
    def _resolve(handlers: HandlersArg, default: Sequence[HandlerArg]) -> List[HandlerArg]:
        if not handlers:
            return list(default)
        if isinstance(handlers, (str, BaseHandler)):
            return [handlers]
        return list(handlers)

    @staticmethod
    def _label(handler: HandlerArg) -> str:
        return handler if isinstance(handler, str) else handler.name
