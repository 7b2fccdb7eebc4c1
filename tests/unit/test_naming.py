"""
Unit Tests for Naming Conventions
"""
import pytest
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from dbschemas.models import Field, ForeignKey, Table
from dbschemas.naming import (
    field_targets_table,
    find_key_to_foreign_table,
    find_primary_key,
    foreign_key_candidates,
    is_foreign_key_field,
    pivot_candidates,
    pluralize,
    singularize,
    split_pivot_name,
)


class TestSplitPivotName:
    """Tests for split_pivot_name"""

    def test_two_parts(self):
        assert split_pivot_name("groups_users") == ("groups", "users")

    def test_splits_at_first_separator_only(self):
        assert split_pivot_name("users_groups_extra") == ("users", "groups_extra")

    @pytest.mark.parametrize("name", ["users", "_users", "users_"])
    def test_not_splittable(self, name):
        assert split_pivot_name(name) is None

    def test_candidates_keep_order(self):
        names = ["workers", "groups_users", "groups", "jobs_lanes"]
        assert pivot_candidates(names) == ["groups_users", "jobs_lanes"]


class TestFieldNames:
    """Tests for foreign key field conventions"""

    @pytest.mark.parametrize("name,expected", [
        ("group_id", True),
        ("parent_group_id", True),
        ("id", False),
        ("_id", False),
        ("identity", False),
        ("group_ids", False),
    ])
    def test_is_foreign_key_field(self, name, expected):
        assert is_foreign_key_field(name) is expected

    @pytest.mark.parametrize("singular,plural", [
        ("group", "groups"),
        ("category", "categories"),
        ("box", "boxes"),
        ("person", "people"),
        ("day", "days"),
    ])
    def test_plural_forms(self, singular, plural):
        assert pluralize(singular) == plural
        assert singularize(plural) == singular

    @pytest.mark.parametrize("field_name,table_name,expected", [
        ("group_id", "groups", True),
        ("category_id", "categories", True),
        ("person_id", "people", True),
        ("staff_id", "staff", True),
        ("GROUP_ID", "Groups", True),
        ("group_id", "users", False),
        ("group", "groups", False),
    ])
    def test_field_targets_table(self, field_name, table_name, expected):
        assert field_targets_table(field_name, table_name) is expected


class TestKeys:
    """Tests for primary and foreign key lookup"""

    def test_primary_key_flag(self):
        table = Table(name="users", fields={
            "id": Field(name="id"),
            "uid": Field(name="uid", primary_key=True),
        })
        assert find_primary_key(table) == "uid"

    def test_primary_key_falls_back_to_id(self):
        table = Table(name="users", fields={"id": Field(name="id")})
        assert find_primary_key(table) == "id"

    def test_primary_key_unresolved(self):
        table = Table(name="users", fields={"uid": Field(name="uid")})
        assert find_primary_key(table) is None

    def test_foreign_key_candidates_skip_primary_key(self):
        table = Table(name="t", fields={
            "user_id": Field(name="user_id", primary_key=True),
            "group_id": Field(name="group_id"),
            "name": Field(name="name"),
        })
        assert foreign_key_candidates(table) == ["group_id"]

    def test_declared_foreign_key_wins(self):
        table = Table(
            name="groups_users",
            fields={
                "group_id": Field(name="group_id"),
                "owner": Field(name="owner"),
            },
            foreign_keys={
                "fk": ForeignKey(
                    constraint_name="fk",
                    table_name="groups_users",
                    foreign_table_name="groups",
                    column_name="owner",
                ),
            },
        )
        assert find_key_to_foreign_table(table, "groups") == "owner"

    def test_declared_foreign_key_without_column_is_skipped(self):
        table = Table(
            name="groups_users",
            fields={"group_id": Field(name="group_id")},
            foreign_keys={
                "fk": ForeignKey(
                    constraint_name="fk",
                    table_name="groups_users",
                    foreign_table_name="groups",
                ),
            },
        )
        assert find_key_to_foreign_table(table, "groups") == "group_id"

    def test_explicit_candidates(self):
        table = Table(name="groups_users", fields={"group_id": Field(name="group_id")})
        assert find_key_to_foreign_table(table, "groups", candidates=[]) is None
        assert find_key_to_foreign_table(table, "groups", candidates=["group_id"]) == "group_id"

    def test_no_match(self):
        table = Table(name="groups_users", fields={"name": Field(name="name")})
        assert find_key_to_foreign_table(table, "users") is None
