"""
Base Handler Module

Handlers are the sources and destinations the orchestrator sequences:
draft handlers produce a Schema, archive handlers persist one, and read
handlers rebuild one (lazily) from a persisted form. Every handler keeps
its own list of non-fatal error messages.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Type, Union
import threading

from ..config import SchemasConfig, get_config
from ..models import Schema
from ..utils import HandlerNotFoundError, format_error_message, get_logger

logger = get_logger(__name__)


class BaseHandler(ABC):
    """Common state for every handler: configuration and error messages"""

    name: str = "base"

    def __init__(self, config: Optional[SchemasConfig] = None):
        self.config = config or get_config()
        self.errors: List[str] = []

    def get_errors(self) -> List[str]:
        """Return and clear any error messages"""
        errors = self.errors
        self.errors = []
        return errors

    def _record_error(self, error: Union[str, Exception]) -> None:
        """Keep a non-fatal error and log it"""
        message = error if isinstance(error, str) else format_error_message(error)
        logger.warning(f"{self.__class__.__name__}: {message}")
        self.errors.append(message)


class DraftHandler(BaseHandler):
    """Produces a Schema from a live or declarative source"""

    @abstractmethod
    def draft(self) -> Optional[Schema]:
        """Build a Schema; None when the source failed entirely"""
        pass


class ArchiveHandler(BaseHandler):
    """Persists a Schema to a destination"""

    @abstractmethod
    def archive(self, schema: Schema) -> bool:
        """Persist the schema; returns success"""
        pass


class ReadHandler(BaseHandler):
    """Rebuilds a previously archived Schema"""

    @abstractmethod
    def read(self) -> Optional[Schema]:
        """Return a Schema backed by a lazily populated table container"""
        pass


# Type alias for handler classes
HandlerClass = Type[BaseHandler]
HandlerSpec = Union[str, BaseHandler]


class HandlerRegistry:
    """Registry mapping handler identifiers to classes"""

    _handlers: Dict[str, HandlerClass] = {}
    _lock = threading.Lock()

    @classmethod
    def register(cls, name: str, handler_class: HandlerClass) -> None:
        """Register a handler class under an identifier"""
        with cls._lock:
            cls._handlers[name.lower()] = handler_class

    @classmethod
    def get_handler_class(cls, name: str) -> HandlerClass:
        """Get handler class for identifier"""
        with cls._lock:
            key = name.lower()
            if key not in cls._handlers:
                raise HandlerNotFoundError(name, list(cls._handlers.keys()))
            return cls._handlers[key]

    @classmethod
    def create_handler(cls, name: str, config: Optional[SchemasConfig] = None) -> BaseHandler:
        """Create handler instance from identifier"""
        handler_class = cls.get_handler_class(name)
        return handler_class(config)

    @classmethod
    def get_registered_names(cls) -> List[str]:
        """Get list of registered identifiers"""
        with cls._lock:
            return list(cls._handlers.keys())

    @classmethod
    def is_registered(cls, name: str) -> bool:
        """Check if identifier is registered"""
        with cls._lock:
            return name.lower() in cls._handlers


def register_handler(name: str):
    """Decorator to register a handler class"""
    def decorator(cls: HandlerClass) -> HandlerClass:
        cls.name = name
        HandlerRegistry.register(name, cls)
        return cls
    return decorator


def create_handler(handler: HandlerSpec, config: Optional[SchemasConfig] = None) -> BaseHandler:
    """Return handler instances unchanged; instantiate registered identifiers"""
    if isinstance(handler, BaseHandler):
        return handler
    return HandlerRegistry.create_handler(handler, config)
