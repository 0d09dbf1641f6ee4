from __future__ import annotations

from contextlib import contextmanager
from typing import Any

import psycopg
import pytest


class FakeCursor:
    def __init__(self, db: FakeDatabase) -> None:
        self._db = db
        self._rows: list[Any] = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return None

    def execute(self, sql: str, params: Any = None):
        self._db.calls.append((sql, params))
        if self._db.raise_on and self._db.raise_on in sql:
            raise psycopg.OperationalError("connection lost")
        self._rows = []
        for marker, rows in self._db.responses:
            if marker in sql:
                self._rows = rows
                break
        return self

    def fetchall(self) -> list[Any]:
        return list(self._rows)

    def fetchone(self) -> Any:
        return self._rows[0] if self._rows else None


class FakeConn:
    def __init__(self, db: FakeDatabase) -> None:
        self._db = db

    def cursor(self, row_factory: Any = None) -> FakeCursor:
        return FakeCursor(self._db)

    def execute(self, sql: str, params: Any = None) -> FakeCursor:
        return FakeCursor(self._db).execute(sql, params)


class FakeDatabase:
    """Maps SQL fragments to canned rows and records every statement."""

    def __init__(self, responses: list[tuple[str, list[Any]]] | None = None, raise_on: str | None = None) -> None:
        self.responses = responses or []
        self.raise_on = raise_on
        self.calls: list[tuple[str, Any]] = []

    @contextmanager
    def get_conn(self):
        yield FakeConn(self)

    def statements(self, marker: str) -> list[tuple[str, Any]]:
        return [call for call in self.calls if marker in call[0]]


@pytest.fixture
def fake_db(monkeypatch: pytest.MonkeyPatch):
    def _install(module: str, responses: list[tuple[str, list[Any]]] | None = None, raise_on: str | None = None):
        db = FakeDatabase(responses, raise_on)
        monkeypatch.setattr(f"{module}.get_conn", db.get_conn)
        return db

    return _install
