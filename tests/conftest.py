"""
Pytest fixtures. The message store runs against an in-memory stand-in for
`core.db.Database`, so no PostgreSQL server is needed.
"""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient

from core.db import DatabaseError
from hello.dependencies import get_store
from hello.repository import MessageStore
from main import create_app


def _normalize(sql: str) -> str:
    return " ".join(sql.split())


class InMemoryDatabase:
    """
    Understands exactly the statements MessageStore issues.

    Set `broken = True` to make every call fail like a dropped connection.
    """

    def __init__(self) -> None:
        self.rows: dict[int, str] = {}
        self.statements: list[str] = []
        self.broken = False
        self.closed = False
        self._next_id = 1

    def _begin(self, sql: str) -> str:
        statement = _normalize(sql)
        self.statements.append(statement)
        if self.broken:
            raise DatabaseError("connection refused: 10.0.0.5:5432")
        return statement

    async def close(self) -> None:
        self.closed = True

    async def fetch_value(self, sql: str, *args: Any) -> Any:
        statement = self._begin(sql)
        assert statement == "SELECT 1"
        return 1

    async def execute(self, sql: str, *args: Any) -> str:
        statement = self._begin(sql)
        assert statement.startswith("CREATE TABLE IF NOT EXISTS hello_worlds")
        return "CREATE TABLE"

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        statement = self._begin(sql)
        assert statement == "SELECT id, message FROM hello_worlds ORDER BY id"
        return [{"id": k, "message": v} for k, v in sorted(self.rows.items())]

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        statement = self._begin(sql)
        if statement.startswith("INSERT INTO hello_worlds"):
            new_id = self._next_id
            self._next_id += 1
            self.rows[new_id] = args[0]
            return {"id": new_id, "message": args[0]}
        if statement.startswith("SELECT id, message FROM hello_worlds WHERE id = $1"):
            if args[0] not in self.rows:
                return None
            return {"id": args[0], "message": self.rows[args[0]]}
        if statement.startswith("DELETE FROM hello_worlds WHERE id = $1"):
            if self.rows.pop(args[0], None) is None:
                return None
            return {"id": args[0]}
        raise AssertionError(f"unexpected statement: {statement}")


@pytest.fixture
def database() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def store(database) -> MessageStore:
    return MessageStore(database)


@pytest.fixture
def client(store):
    """
    TestClient without the lifespan (no real database); the store is injected directly.
    """
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    return TestClient(app)
