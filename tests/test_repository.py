import asyncio

import pytest

from core.errors import InvalidInputError, NotFoundError, PersistenceError, UnavailableError


def test_create_assigns_increasing_ids(store):
    first = asyncio.run(store.create("a"))
    second = asyncio.run(store.create("b"))

    assert first == {"id": 1, "message": "a"}
    assert second == {"id": 2, "message": "b"}


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_create_rejects_blank_before_touching_database(store, database, text):
    with pytest.raises(InvalidInputError):
        asyncio.run(store.create(text))
    assert database.statements == []


def test_create_rejects_overlong_text(store, database):
    with pytest.raises(InvalidInputError):
        asyncio.run(store.create("y" * 256))
    assert database.statements == []


def test_get_missing_raises_not_found(store):
    with pytest.raises(NotFoundError):
        asyncio.run(store.get(99))


def test_delete_removes_row(store, database):
    asyncio.run(store.create("gone soon"))
    asyncio.run(store.delete(1))

    assert database.rows == {}
    with pytest.raises(NotFoundError):
        asyncio.run(store.delete(1))


def test_list_all_uses_insertion_order(store):
    for text in ["c", "a", "b"]:
        asyncio.run(store.create(text))

    rows = asyncio.run(store.list_all())
    assert [r["message"] for r in rows] == ["c", "a", "b"]


def test_database_failures_become_persistence_errors(store, database):
    database.broken = True

    for call in (store.list_all(), store.get(1), store.delete(1), store.create("x"), store.ensure_schema()):
        with pytest.raises(PersistenceError) as excinfo:
            asyncio.run(call)
        assert excinfo.value.status_code == 500
        assert "connection refused" in str(excinfo.value.__cause__)


def test_ping(store, database):
    asyncio.run(store.ping())
    assert database.statements == ["SELECT 1"]

    database.broken = True
    with pytest.raises(UnavailableError):
        asyncio.run(store.ping())


def test_ensure_schema_is_idempotent(store, database):
    asyncio.run(store.ensure_schema())
    asyncio.run(store.ensure_schema())

    assert len(database.statements) == 2
    assert all("IF NOT EXISTS" in s for s in database.statements)
    assert "BIGSERIAL PRIMARY KEY" in database.statements[0]
    assert "VARCHAR(255)" in database.statements[0]


def test_create_rejects_nul_before_touching_database(store, database):
    with pytest.raises(InvalidInputError, match="NUL"):
        asyncio.run(store.create("a\x00b"))
    assert database.statements == []
