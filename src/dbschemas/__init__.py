"""
dbschemas - Database schema introspection, relation inference and archiving
"""
from .config import (
    AutomationConfig,
    DatabaseConfig,
    DatabaseType,
    SchemasConfig,
    get_config,
    reset_config,
    set_config,
)
from .models import (
    Field,
    ForeignKey,
    Index,
    Pivot,
    Relation,
    RelationType,
    Schema,
    Table,
)
from .merger import merge_all, merge_schemas, merge_tables
from .inference import PivotInferencer, PivotMatch
from .handlers import (
    ArchiveHandler,
    BaseHandler,
    CacheHandler,
    DatabaseHandler,
    DirectoryHandler,
    DraftHandler,
    FileHandler,
    HandlerRegistry,
    ModelHandler,
    ReadHandler,
    register_handler,
)
from .schemas import Schemas
from .utils import (
    MissingSchemaError,
    SchemaUnavailableError,
    SchemasError,
    setup_logging,
)

__version__ = "1.0.0"

__all__ = [
    "Schemas",
    # Configuration
    "AutomationConfig",
    "DatabaseConfig",
    "DatabaseType",
    "SchemasConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Model
    "Field",
    "ForeignKey",
    "Index",
    "Pivot",
    "Relation",
    "RelationType",
    "Schema",
    "Table",
    # Merge and inference
    "merge_all",
    "merge_schemas",
    "merge_tables",
    "PivotInferencer",
    "PivotMatch",
    # Handlers
    "ArchiveHandler",
    "BaseHandler",
    "CacheHandler",
    "DatabaseHandler",
    "DirectoryHandler",
    "DraftHandler",
    "FileHandler",
    "HandlerRegistry",
    "ModelHandler",
    "ReadHandler",
    "register_handler",
    # Errors and logging
    "MissingSchemaError",
    "SchemaUnavailableError",
    "SchemasError",
    "setup_logging",
]
