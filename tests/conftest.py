from __future__ import annotations

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from confirmation import DeleteConfirmation
from database import CollaboratorError, NotFound
from store import EntryStore


class FakeMoodTable:
    """In-memory stand-in for the moods table, with failure injection."""

    def __init__(self):
        self.rows: list[dict] = []
        self.next_id = 1
        self.fail: set[str] = set()
        self.calls: list[tuple] = []

    def add(self, category: str, time: datetime, description: str = "") -> dict:
        row = {
            "id": self.next_id,
            "category": category,
            "description": description,
            "time": time,
            "created_at": datetime.now(timezone.utc),
        }
        self.next_id += 1
        self.rows.append(row)
        return row

    def select(self, ascending: bool = False) -> list[dict]:
        self.calls.append(("select", ascending))
        if "select" in self.fail:
            raise CollaboratorError("network down")
        return sorted((dict(r) for r in self.rows), key=lambda r: r["time"], reverse=not ascending)

    def insert(self, category: str, description: str, time: datetime) -> dict:
        self.calls.append(("insert", category))
        if "insert" in self.fail:
            raise CollaboratorError("rejected")
        return dict(self.add(category, time, description))

    def delete(self, entry_id: int) -> None:
        self.calls.append(("delete", entry_id))
        if "delete" in self.fail:
            raise CollaboratorError("rejected")
        before = len(self.rows)
        self.rows = [r for r in self.rows if r["id"] != entry_id]
        if len(self.rows) == before:
            raise NotFound(f"no mood with id {entry_id}")

    def ping(self) -> list[str]:
        if "select" in self.fail:
            raise CollaboratorError("network down")
        return ["moods"]


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture()
def table() -> FakeMoodTable:
    return FakeMoodTable()


@pytest.fixture()
def store(table) -> EntryStore:
    return EntryStore(table, tz=timezone.utc)


@pytest.fixture()
def confirmation(store) -> DeleteConfirmation:
    return DeleteConfirmation(store)


@pytest.fixture()
def client(store, confirmation):
    from main import app

    app.state.store = store
    app.state.confirmation = confirmation
    yield TestClient(app)
    app.state.store = None
    app.state.confirmation = None
