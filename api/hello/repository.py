"""
Message persistence (raw SQL).

`MessageStore` is the record store behind the /hello endpoints. Every call
goes to the database; there is no caching layer.
"""

from __future__ import annotations

from typing import Any

from core.db import Database, DatabaseError
from core.errors import InvalidInputError, NotFoundError, PersistenceError, UnavailableError

from .schemas import MAX_MESSAGE_LENGTH

TABLE_NAME = "hello_worlds"


class MessageStore:
    def __init__(self, db: Database) -> None:
        self._db = db

    async def ensure_schema(self) -> None:
        """
        Create the messages table when it does not exist yet. Safe to run on every start.
        """
        try:
            await self._db.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                    id BIGSERIAL PRIMARY KEY,
                    message VARCHAR({MAX_MESSAGE_LENGTH}) NOT NULL
                )
                """
            )
        except DatabaseError as exc:
            raise PersistenceError() from exc

    async def ping(self) -> None:
        try:
            await self._db.fetch_value("SELECT 1")
        except DatabaseError as exc:
            raise UnavailableError() from exc

    async def create(self, text: str) -> dict[str, Any]:
        if not (text or "").strip():
            raise InvalidInputError("Message is required")
        if len(text) > MAX_MESSAGE_LENGTH:
            raise InvalidInputError(f"Message must be at most {MAX_MESSAGE_LENGTH} characters")
        if "\x00" in text:
            # PostgreSQL text columns cannot hold NUL.
            raise InvalidInputError("Message must not contain NUL characters")

        try:
            row = await self._db.fetch_one(
                f"""
                INSERT INTO {TABLE_NAME} (message)
                VALUES ($1)
                RETURNING id, message
                """,
                text,
            )
        except DatabaseError as exc:
            raise PersistenceError() from exc
        if row is None:
            raise PersistenceError() from RuntimeError("INSERT returned no row.")
        return row

    async def list_all(self) -> list[dict[str, Any]]:
        """
        Return all messages in insertion order (ids are monotonic).
        """
        try:
            return await self._db.fetch_all(
                f"""
                SELECT id, message
                FROM {TABLE_NAME}
                ORDER BY id
                """
            )
        except DatabaseError as exc:
            raise PersistenceError() from exc

    async def get(self, message_id: int) -> dict[str, Any]:
        try:
            row = await self._db.fetch_one(
                f"""
                SELECT id, message
                FROM {TABLE_NAME}
                WHERE id = $1
                """,
                message_id,
            )
        except DatabaseError as exc:
            raise PersistenceError() from exc
        if row is None:
            raise NotFoundError()
        return row

    async def delete(self, message_id: int) -> None:
        try:
            row = await self._db.fetch_one(
                f"""
                DELETE FROM {TABLE_NAME}
                WHERE id = $1
                RETURNING id
                """,
                message_id,
            )
        except DatabaseError as exc:
            raise PersistenceError() from exc
        if row is None:
            raise NotFoundError()
