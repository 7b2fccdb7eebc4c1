"""
Handlers Package
Draft, archive and read handlers sequenced by the Schemas orchestrator
"""
from .base import (
    BaseHandler,
    DraftHandler,
    ArchiveHandler,
    ReadHandler,
    HandlerRegistry,
    register_handler,
    create_handler,
)

# Import handlers to register them
from .database import DatabaseHandler
from .directory import DirectoryHandler
from .model import ModelHandler
from .cache import CacheHandler
from .file import FileHandler

__all__ = [
    # Base classes
    "BaseHandler",
    "DraftHandler",
    "ArchiveHandler",
    "ReadHandler",
    "HandlerRegistry",
    "register_handler",
    "create_handler",
    # Concrete handlers
    "DatabaseHandler",
    "DirectoryHandler",
    "ModelHandler",
    "CacheHandler",
    "FileHandler",
]
