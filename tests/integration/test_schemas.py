"""
Integration Tests for the Schemas Orchestrator
Drafts from a real SQLite catalog, archives, and reads back
"""
import json
import pytest
import sqlite3
from unittest.mock import patch
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from dbschemas import (
    AutomationConfig,
    DatabaseConfig,
    DatabaseType,
    Schema,
    Schemas,
    SchemasConfig,
    Table,
    reset_config,
)
from dbschemas.adapters import SQLiteAdapter
from dbschemas.cache import get_default_cache, reset_default_cache
from dbschemas.handlers import CacheHandler, DatabaseHandler, DirectoryHandler, FileHandler, ModelHandler
from dbschemas.models import Pivot, RelationType
from dbschemas.reader import LazyTableContainer
from dbschemas.utils import MissingSchemaError, SchemaUnavailableError


CATALOG = """
CREATE TABLE factories (
    id INTEGER PRIMARY KEY,
    name VARCHAR(100) NOT NULL
);
CREATE TABLE workers (
    id INTEGER PRIMARY KEY,
    name TEXT,
    factory_id INTEGER REFERENCES factories(id)
);
CREATE TABLE products (
    id INTEGER PRIMARY KEY,
    name TEXT,
    factory_id INTEGER REFERENCES factories(id)
);
CREATE TABLE "groups" (
    id INTEGER PRIMARY KEY,
    name TEXT
);
CREATE TABLE users (
    id INTEGER PRIMARY KEY,
    email TEXT UNIQUE
);
CREATE TABLE groups_users (
    group_id INTEGER NOT NULL REFERENCES "groups"(id),
    user_id INTEGER NOT NULL REFERENCES users(id)
);
CREATE TABLE migrations (
    id INTEGER PRIMARY KEY,
    version TEXT
);
"""


class MachineModel:
    table = "machines"
    primary_key = "id"
    fields = {"serial": "varchar"}


class WorkerModel:
    table = "workers"
    fields = {"name": "varchar"}


@pytest.fixture(autouse=True)
def clean_state():
    reset_default_cache()
    reset_config()
    yield
    reset_default_cache()
    reset_config()


@pytest.fixture
def database_path(tmp_path):
    path = str(tmp_path / "catalog.db")
    connection = sqlite3.connect(path)
    connection.executescript(CATALOG)
    connection.commit()
    connection.close()
    return path


@pytest.fixture
def config(database_path, tmp_path):
    return SchemasConfig(
        database=DatabaseConfig(db_type=DatabaseType.SQLITE, sqlite_path=database_path),
        schemas_directory=str(tmp_path / "schemas"),
        archive_path=str(tmp_path / "schema.json"),
    )


class TestDraftFromDatabase:
    """Drafting a live SQLite catalog"""

    def test_tables(self, config):
        schema = Schemas(config).draft().get()

        assert sorted(schema.get_table_names()) == [
            "factories", "groups", "groups_users", "products", "users", "workers",
        ]

    def test_pivot_detected(self, config):
        schema = Schemas(config).draft().get()

        assert schema.tables["groups_users"].is_pivot is True
        assert schema.tables["groups_users"].relations == {}

        groups_to_users = schema.tables["groups"].relations["users"]
        assert groups_to_users.type == RelationType.MANY_TO_MANY
        assert groups_to_users.pivots == [
            Pivot("groups_users", "id", "group_id"),
            Pivot("users", "user_id", "id"),
        ]
        assert schema.tables["users"].relations["groups"].type == RelationType.MANY_TO_MANY

    def test_direct_relations(self, config):
        schema = Schemas(config).draft().get()

        relation = schema.tables["workers"].relations["factories"]
        assert relation.type == RelationType.BELONGS_TO
        assert relation.pivots == [Pivot("factories", "factory_id", "id")]
        assert schema.tables["factories"].relations == {}
        assert schema.tables["workers"].relations.keys() == {"factories"}

    def test_draft_without_errors(self, config):
        schemas = Schemas(config).draft()
        assert schemas.get_errors() == []


class TestRoundTrip:
    """Draft, archive, reset, read"""

    def test_cache(self, config):
        schemas = Schemas(config)
        drafted = schemas.draft().get()

        assert schemas.archive() is True

        read = schemas.reset().read().get()

        assert read is not drafted
        assert isinstance(read.tables, LazyTableContainer)
        assert read == drafted

    def test_file(self, config):
        schemas = Schemas(config)
        drafted = schemas.draft().get()

        assert schemas.archive("file") is True
        with open(config.archive_path) as f:
            assert "groups_users" in json.load(f)["tables"]

        read = schemas.reset().read("file").get()

        assert read == drafted
        assert read.tables["groups"].relations["users"].type == RelationType.MANY_TO_MANY

    def test_archive_to_several_destinations(self, config):
        schemas = Schemas(config).draft()

        assert schemas.archive(["cache", "file"]) is True
        assert get_default_cache().get("schema:default") is not None
        assert os.path.isfile(config.archive_path)

    def test_group_keys_archive(self, config):
        config.database.group = "reports"
        Schemas(config).draft().archive()

        assert get_default_cache().get("schema:reports") is not None
        assert get_default_cache().get("schema:default") is None


class TestAutomation:
    """Schemas.get() fallbacks"""

    def test_drafts_and_archives(self, config):
        schemas = Schemas(config)

        schema = schemas.get()

        assert len(schema) > 0
        assert get_default_cache().get("schema:default")["tables"] == schema.get_table_names()

    def test_second_get_returns_same_schema(self, config):
        schemas = Schemas(config)
        first = schemas.get()

        # Catalog changes are not picked up until reset
        connection = sqlite3.connect(config.database.sqlite_path)
        connection.execute("CREATE TABLE extras (id INTEGER PRIMARY KEY)")
        connection.commit()
        connection.close()

        assert schemas.get() is first
        assert "extras" not in first.tables

    def test_draft_without_archive(self, config):
        config.automate = AutomationConfig(draft=True, archive=False)
        Schemas(config).get()

        assert get_default_cache().get("schema:default") is None

    def test_reads_before_drafting(self, config):
        Schemas(config).draft().archive()
        config.automate = AutomationConfig(read=True, draft=False)
        config.database = None

        schema = Schemas(config).get()

        assert isinstance(schema.tables, LazyTableContainer)
        assert schema.tables["groups_users"].is_pivot is True

    def test_read_miss_falls_back_to_draft(self, config):
        config.automate = AutomationConfig(read=True, draft=True, archive=False)
        schemas = Schemas(config)

        schema = schemas.get()

        assert "groups" in schema.tables
        assert schemas.get_errors() == ["No archived schema under schema:default"]

    def test_nothing_available_raises(self, config):
        config.automate = AutomationConfig(read=False, draft=False)

        with pytest.raises(SchemaUnavailableError):
            Schemas(config).get()

    def test_silent_mode(self, config):
        config.database = None
        config.silent = True
        schemas = Schemas(config)

        assert schemas.get() is None

        errors = schemas.get_errors()
        assert errors[-1] == "No schema available from any source"
        assert "No database configured" in errors[0]
        assert schemas.get_errors() == []


class TestOrchestrator:
    """Other Schemas operations"""

    def test_archive_without_schema(self, config):
        with pytest.raises(MissingSchemaError):
            Schemas(config).archive()

    def test_set_schema(self, config):
        schema = Schema({"users": Table(name="users")})
        schemas = Schemas(config).set_schema(schema)

        assert schemas.get() is schema

    def test_initial_schema(self, config):
        schema = Schema()
        assert Schemas(config, schema).get() is schema

    def test_reset_clears_errors(self, config):
        config.database = None
        schemas = Schemas(config).draft()

        schemas.reset()

        assert schemas.schema is None
        assert schemas.get_errors() == []

    def test_read_miss_keeps_schema_unset(self, config):
        schemas = Schemas(config).read()

        assert schemas.schema is None
        assert len(schemas.get_errors()) == 1

    def test_read_miss_keeps_current_schema(self, config):
        schemas = Schemas(config).draft()
        drafted = schemas.schema

        schemas.read("file")

        assert schemas.schema is drafted

    def test_ignored_tables(self, config):
        schema = Schemas(config).draft().get()
        assert "migrations" not in schema.tables

        config.ignored_tables = []
        schema = Schemas(config).draft().get()
        assert "migrations" in schema.tables

    def test_handler_instances(self, config):
        handler = DatabaseHandler(config)
        schemas = Schemas(config).draft(handler)
        handler.close()

        assert "workers" in schemas.get().tables

    def test_wrong_handler_kind(self, config):
        with pytest.raises(TypeError):
            Schemas(config).draft("cache")

    def test_draft_merges_into_current_schema(self, config):
        schemas = Schemas(config).draft()
        schemas.draft([ModelHandler(config, models=[MachineModel])])

        schema = schemas.get()
        assert "machines" in schema.tables
        assert "groups_users" in schema.tables


class TestMultipleSources:
    """Merging the database with declarative sources"""

    def test_database_directory_and_models(self, config, tmp_path):
        directory = tmp_path / "schemas"
        directory.mkdir()
        (directory / "workers.yaml").write_text(
            "tables:\n"
            "  workers:\n"
            "    relations:\n"
            "      products:\n"
            "        type: hasMany\n"
            "        pivots:\n"
            "          - [products, factory_id, factory_id]\n"
        )

        handlers = [
            "database",
            DirectoryHandler(config),
            ModelHandler(config, models=[WorkerModel, MachineModel]),
        ]
        schemas = Schemas(config).draft(handlers)
        schema = schemas.get()

        workers = schema.tables["workers"]
        assert set(workers.relations) == {"factories", "products"}
        assert workers.relations["products"].type == RelationType.HAS_MANY
        assert workers.model == f"{__name__}.WorkerModel"
        # The model declares its own type for name, and the later source wins
        assert workers.fields["name"].type == "varchar"
        assert workers.fields["factory_id"].type == "INTEGER"

        assert schema.tables["machines"].fields["id"].primary_key is True
        assert schemas.get_errors() == []

    def test_archive_only_handler_cannot_draft(self, config):
        handlers = ["database", DirectoryHandler(config), FileHandler(config)]

        with pytest.raises(TypeError):
            Schemas(config).draft(handlers)

    def test_missing_directory_recorded(self, config):
        schemas = Schemas(config).draft(["database", "directory"])

        assert "groups" in schemas.get().tables
        errors = schemas.get_errors()
        assert len(errors) == 1
        assert "Schema directory not found" in errors[0]

    def test_failed_table_skipped(self, config):
        class BrokenAdapterHandler(DatabaseHandler):
            def _introspect_table(self, adapter, table_name):
                if table_name == "products":
                    adapter._catalog_query("SELECT * FROM no_such_table", table_name=table_name)
                return super()._introspect_table(adapter, table_name)

        handler = BrokenAdapterHandler(config)
        schemas = Schemas(config).draft(handler)
        handler.close()

        schema = schemas.get()
        assert "products" not in schema.tables
        assert "workers" in schema.tables

        errors = schemas.get_errors()
        assert len(errors) == 1
        assert "products" in errors[0]

    def test_cache_store_injected(self, config):
        from dbschemas.cache import MemoryCache

        store = MemoryCache()
        schemas = Schemas(config).draft()
        schemas.archive([CacheHandler(config, store=store)])

        assert store.get("schema:default") is not None
        assert get_default_cache().get("schema:default") is None


class WorkerBindingModel:
    table = "workers"
    primary_key = "id"
    fields = ["name"]


class TestSourceFailures:
    """Source failures stay non-fatal"""

    def test_undecodable_schema_file(self, config, tmp_path):
        directory = tmp_path / "schemas"
        directory.mkdir()
        (directory / "bad.json").write_bytes(b'{"tables": {"x\xff\xfe": {}}}')

        schemas = Schemas(config).draft(["database", "directory"])

        assert "groups_users" in schemas.get().tables
        errors = schemas.get_errors()
        assert len(errors) == 1
        assert "bad.json" in errors[0]

    def test_model_binding_keeps_catalog_types(self, config):
        schema = Schemas(config).draft([
            "database",
            ModelHandler(config, models=[WorkerBindingModel]),
        ]).get()

        workers = schema.tables["workers"]
        assert workers.model == f"{__name__}.WorkerBindingModel"
        assert workers.fields["id"].type == "INTEGER"
        assert workers.fields["id"].primary_key is True
        assert workers.fields["name"].type == "TEXT"

    def test_expired_cache_entry_after_read(self, config):
        Schemas(config).draft().archive()
        get_default_cache().delete("schema:default:workers")

        schemas = Schemas(config).read()
        assert schemas.get().tables.get("workers") is None

        schemas.draft([ModelHandler(config, models=[MachineModel])])

        schema = schemas.get()
        assert "workers" not in schema.tables
        assert "machines" in schema.tables
        assert "groups_users" in schema.tables
        assert schemas.get_errors() == ["Archived table 'workers' is missing or expired"]

    def test_connection_closed_after_draft(self, config):
        with patch.object(
            SQLiteAdapter, "disconnect", autospec=True, side_effect=SQLiteAdapter.disconnect
        ) as mock_disconnect:
            Schemas(config).get()

        assert mock_disconnect.call_count == 1
