from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any, Sequence

import pytest

from peopledb.repositories.crud import CrudRepository
from peopledb.repositories.errors import DuplicateSqlError
from peopledb.repositories.sql import (
    CrudOperation,
    collect_sql_tags,
    register_sql_table,
    resolve_sql,
    sql,
    sql_table,
)


@dataclass
class Item:
    name: str
    id: int | None = None


class ItemsRepo(CrudRepository[Item]):
    @sql("INSERT INTO items (name) VALUES (?)", CrudOperation.SAVE)
    def map_for_save(self, entity: Item) -> Sequence[Any]:
        return (entity.name,)

    def map_for_update(self, entity: Item) -> Sequence[Any]:
        return (entity.name,)

    @sql("SELECT id, name FROM items WHERE id = ?", CrudOperation.FIND_BY_ID)
    @sql("SELECT COUNT(*) FROM items", CrudOperation.COUNT)
    def extract_entity(self, row: sqlite3.Row) -> Item:
        return Item(row["name"], row["id"])


class _Fallback:
    def __init__(self, value: str) -> None:
        self.value = value
        self.calls = 0

    def __call__(self) -> str:
        self.calls += 1
        return self.value


def test_resolve_returns_tagged_template_without_calling_fallback() -> None:
    repo = ItemsRepo(sqlite3.connect(":memory:"))
    fallback = _Fallback("SELECT 1")
    assert resolve_sql(repo, CrudOperation.SAVE, fallback) == "INSERT INTO items (name) VALUES (?)"
    assert resolve_sql(repo, CrudOperation.COUNT, fallback) == "SELECT COUNT(*) FROM items"
    assert fallback.calls == 0


def test_resolve_calls_fallback_once_on_miss() -> None:
    repo = ItemsRepo(sqlite3.connect(":memory:"))
    fallback = _Fallback("UPDATE items SET name = ? WHERE id = ?")
    assert resolve_sql(repo, CrudOperation.UPDATE, fallback) == fallback.value
    assert fallback.calls == 1


def test_tag_group_is_flattened_and_keeps_member_name() -> None:
    table = sql_table(ItemsRepo)
    assert set(table) == {CrudOperation.SAVE, CrudOperation.FIND_BY_ID, CrudOperation.COUNT}
    assert table[CrudOperation.FIND_BY_ID].member == "extract_entity"
    assert table[CrudOperation.COUNT].member == "extract_entity"
    assert table[CrudOperation.SAVE].member == "map_for_save"


def test_stacked_tags_keep_written_order() -> None:
    @sql("A", CrudOperation.FIND_ALL)
    @sql("B", CrudOperation.COUNT)
    def member() -> None:
        pass

    tags = member.__sql_tags__  # type: ignore[attr-defined]
    assert [t.template for t in tags] == ["A", "B"]


def test_duplicate_tags_in_one_class_raise_at_definition() -> None:
    with pytest.raises(DuplicateSqlError, match="COUNT"):

        class BrokenRepo(CrudRepository[Item]):
            @sql("SELECT COUNT(*) FROM items", CrudOperation.COUNT)
            def map_for_save(self, entity: Item) -> Sequence[Any]:
                return ()

            def map_for_update(self, entity: Item) -> Sequence[Any]:
                return ()

            @sql("SELECT COUNT(id) FROM items", CrudOperation.COUNT)
            def extract_entity(self, row: sqlite3.Row) -> Item:
                return Item("x")


def test_duplicate_tags_on_one_member_raise() -> None:
    @sql("X", CrudOperation.DELETE_ONE)
    @sql("Y", CrudOperation.DELETE_ONE)
    def member() -> None:
        pass

    with pytest.raises(DuplicateSqlError):
        collect_sql_tags({"member": member}, "Owner")


def test_subclass_overrides_inherited_tag() -> None:
    class ArchivedItemsRepo(ItemsRepo):
        @sql("SELECT COUNT(*) FROM archived_items", CrudOperation.COUNT)
        def extract_entity(self, row: sqlite3.Row) -> Item:
            return super().extract_entity(row)

    table = sql_table(ArchivedItemsRepo)
    assert table[CrudOperation.COUNT].template == "SELECT COUNT(*) FROM archived_items"
    # Untouched entries are inherited
    assert table[CrudOperation.SAVE].template == "INSERT INTO items (name) VALUES (?)"
    # The base table is unchanged
    assert sql_table(ItemsRepo)[CrudOperation.COUNT].template == "SELECT COUNT(*) FROM items"


def test_registration_table_for_plain_class_is_built_lazily() -> None:
    class Plain:
        @sql("SELECT 1", CrudOperation.COUNT)
        def count_sql(self) -> None:
            pass

    assert "__sql_table__" not in Plain.__dict__
    assert resolve_sql(Plain(), CrudOperation.COUNT, lambda: "unused") == "SELECT 1"
    assert "__sql_table__" in Plain.__dict__


def test_registration_table_is_read_only() -> None:
    table = register_sql_table(ItemsRepo)
    with pytest.raises(TypeError):
        table[CrudOperation.UPDATE] = table[CrudOperation.SAVE]  # type: ignore[index]


def test_static_and_class_methods_can_carry_tags() -> None:
    class Repo:
        @staticmethod
        @sql("SELECT 2", CrudOperation.FIND_ALL)
        def static_member() -> None:
            pass

        @classmethod
        @sql("SELECT 3", CrudOperation.COUNT)
        def class_member(cls) -> None:
            pass

    table = sql_table(Repo)
    assert table[CrudOperation.FIND_ALL].template == "SELECT 2"
    assert table[CrudOperation.COUNT].template == "SELECT 3"
