"""Tests for key/value storage adapters."""

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from calorie_estimator.adapters.file_storage import JsonFileStorage
from calorie_estimator.adapters.supabase_storage import SupabaseStorage
from calorie_estimator.domain.errors import PersistenceFailureError
from calorie_estimator.services.history import HISTORY_KEY, HistoryStore
from tests.conftest import make_recipe


def test_file_storage_roundtrip(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path / "state")

    assert storage.read("recipeHistory") is None
    storage.write("recipeHistory", "[]")
    assert storage.read("recipeHistory") == "[]"
    assert (tmp_path / "state" / "recipeHistory.json").exists()

    storage.remove("recipeHistory")
    storage.remove("recipeHistory")
    assert storage.read("recipeHistory") is None


def test_file_storage_write_failure(tmp_path: Path) -> None:
    blocker = tmp_path / "state"
    blocker.write_text("not a directory")
    storage = JsonFileStorage(blocker)

    with pytest.raises(PersistenceFailureError):
        storage.write("recipeHistory", "[]")


def test_file_storage_write_failure_removes_temp_file(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path)
    (tmp_path / "recipeHistory.json").mkdir()

    with pytest.raises(PersistenceFailureError):
        storage.write("recipeHistory", "[]")

    assert list(tmp_path.glob("*.tmp")) == []


def test_history_store_over_file_storage(tmp_path: Path) -> None:
    store = HistoryStore(JsonFileStorage(tmp_path))
    history: list = []
    for name in ("A", "B", "C", "D", "E", "F"):
        history = store.record(history, make_recipe(name))

    reloaded = HistoryStore(JsonFileStorage(tmp_path)).load()

    assert [item.recipe_name for item in reloaded] == ["F", "E", "D", "C", "B"]


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    rows: list[dict[str, object]] = field(default_factory=list)
    last_payload: object | None = None
    last_conflict: str | None = None
    filters: list[tuple[str, object]] = field(default_factory=list)
    fail: bool = False

    def select(self, *_args) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "select"
        self.filters = []
        return self

    def upsert(  # type: ignore[no-untyped-def]
        self, payload, on_conflict: str = ""
    ) -> "FakeTable":
        self._action = "upsert"
        self.last_payload = payload
        self.last_conflict = on_conflict
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        self.filters = []
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def _matches(self, row: dict[str, object]) -> bool:
        return all(row.get(column) == value for column, value in self.filters)

    def execute(self) -> FakeResponse:
        if self.fail:
            raise RuntimeError("supabase unavailable")
        if self._action == "select":
            return FakeResponse(data=[row for row in self.rows if self._matches(row)])
        if self._action == "upsert":
            payload = dict(self.last_payload)  # type: ignore[arg-type]
            self.rows = [
                row
                for row in self.rows
                if (row["device_id"], row["key"])
                != (payload["device_id"], payload["key"])
            ]
            self.rows.append(payload)
            return FakeResponse(data=[payload])
        self.rows = [row for row in self.rows if not self._matches(row)]
        return FakeResponse(data=[])


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_supabase_storage_scopes_by_device() -> None:
    client = FakeSupabaseClient()
    phone = SupabaseStorage(client, device_id="phone")
    browser = SupabaseStorage(client, device_id="browser")

    phone.write(HISTORY_KEY, "[1]")
    phone.write(HISTORY_KEY, "[2]")
    browser.write(HISTORY_KEY, "[3]")

    assert phone.read(HISTORY_KEY) == "[2]"
    assert browser.read(HISTORY_KEY) == "[3]"
    assert client.table("app_state").last_conflict == "device_id,key"

    phone.remove(HISTORY_KEY)

    assert phone.read(HISTORY_KEY) is None
    assert browser.read(HISTORY_KEY) == "[3]"


def test_supabase_storage_wraps_errors() -> None:
    client = FakeSupabaseClient()
    client.table("app_state").fail = True
    storage = SupabaseStorage(client, device_id="phone")

    with pytest.raises(PersistenceFailureError):
        storage.read(HISTORY_KEY)
    with pytest.raises(PersistenceFailureError):
        storage.write(HISTORY_KEY, "[]")
