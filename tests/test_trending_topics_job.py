import asyncio
import dataclasses
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

from portal.batch import trending_topics


class _FakeCursor:
    def __init__(self, articles: list[dict], lock_acquired: bool = True) -> None:
        self.articles = articles
        self.lock_acquired = lock_acquired
        self.calls: list[tuple[str, object]] = []
        self.inserted: list[tuple] = []
        self._rows: list[dict] = []

    async def execute(self, sql: str, params=None) -> None:
        self.calls.append((sql, params))
        if "pg_try_advisory_xact_lock" in sql:
            self._rows = [{"acquired": self.lock_acquired}]
        elif "FROM articles" in sql:
            self._rows = self.articles
        else:
            self._rows = []

    async def executemany(self, sql: str, seq) -> None:
        rows = list(seq)
        self.calls.append((sql, rows))
        self.inserted.extend(rows)

    async def fetchone(self):
        return self._rows[0] if self._rows else None

    async def fetchall(self):
        return list(self._rows)


class _CursorCtx:
    def __init__(self, cursor: _FakeCursor) -> None:
        self._cursor = cursor

    async def __aenter__(self):
        return self._cursor

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _FakeConn:
    def __init__(self, cursor: _FakeCursor) -> None:
        self._cursor = cursor

    def cursor(self, row_factory=None):
        return _CursorCtx(self._cursor)


@asynccontextmanager
async def _fake_get_conn(cursor: _FakeCursor):
    yield _FakeConn(cursor)


def _recent_articles(count: int) -> list[dict]:
    published = datetime.now(timezone.utc) - timedelta(hours=2)
    return [
        {
            "id": i,
            "title": f"alpha{i} bravo{i} charlie{i} delta{i}",
            "view_count": i * 100,
            "published_at": published,
            "category_id": 1,
            "category_name": "Sports",
        }
        for i in range(1, count + 1)
    ]


def test_refresh_replaces_all_rows_with_top_twenty(monkeypatch) -> None:
    cursor = _FakeCursor(_recent_articles(12))
    monkeypatch.setattr(trending_topics, "get_conn_async", lambda: _fake_get_conn(cursor))

    inserted = asyncio.run(trending_topics.run())

    assert inserted == 20
    assert len(cursor.inserted) == 20

    statements = [sql for sql, _ in cursor.calls]
    delete_index = next(i for i, sql in enumerate(statements) if "DELETE FROM trending_topics" in sql)
    insert_index = next(i for i, sql in enumerate(statements) if "INSERT INTO trending_topics" in sql)
    assert delete_index < insert_index

    scores = [row[2] for row in cursor.inserted]
    assert scores == sorted(scores, reverse=True)
    assert "Sports" in {row[0] for row in cursor.inserted}


def test_refresh_with_no_recent_articles_clears_table(monkeypatch) -> None:
    cursor = _FakeCursor([])
    monkeypatch.setattr(trending_topics, "get_conn_async", lambda: _fake_get_conn(cursor))

    inserted = asyncio.run(trending_topics.run())

    assert inserted == 0
    assert any("DELETE FROM trending_topics" in sql for sql, _ in cursor.calls)
    assert cursor.inserted == []


def test_refresh_skips_when_another_run_holds_the_lock(monkeypatch) -> None:
    cursor = _FakeCursor(_recent_articles(3), lock_acquired=False)
    monkeypatch.setattr(trending_topics, "get_conn_async", lambda: _fake_get_conn(cursor))

    result = asyncio.run(trending_topics.run())

    assert result is None
    assert len(cursor.calls) == 1
    assert not any("DELETE" in sql for sql, _ in cursor.calls)


def test_refresh_caps_configured_limit_at_twenty(monkeypatch) -> None:
    cursor = _FakeCursor(_recent_articles(12))
    monkeypatch.setattr(trending_topics, "get_conn_async", lambda: _fake_get_conn(cursor))
    monkeypatch.setattr(
        trending_topics,
        "settings",
        dataclasses.replace(trending_topics.settings, trending_topics_limit=50),
    )

    inserted = asyncio.run(trending_topics.run())

    assert inserted == 20
    assert len(cursor.inserted) == 20
