"""
Message business logic.

Input parsing happens here, before the store is touched:
- path ids must be positive decimal integers (400 otherwise, never 404)
- POST bodies must be a JSON object with only a `message` key
"""

from __future__ import annotations

import re

from pydantic import ValidationError

from core.errors import InvalidInputError

from . import schemas
from .repository import MessageStore

# Largest value a BIGSERIAL id can hold.
MAX_MESSAGE_ID = 2**63 - 1

_ID_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_message_id(raw: str) -> int:
    id_str = (raw or "").strip("/")
    if not _ID_PATTERN.fullmatch(id_str):
        raise InvalidInputError("ID must be a positive integer")
    message_id = int(id_str)
    if message_id < 1 or message_id > MAX_MESSAGE_ID:
        raise InvalidInputError("ID must be a positive integer")
    return message_id


def parse_new_message(body: bytes) -> str:
    try:
        payload = schemas.CreateMessageRequest.model_validate_json(body)
    except ValidationError as exc:
        raise InvalidInputError("Invalid JSON payload") from exc

    text = payload.message or ""
    if not text.strip():
        raise InvalidInputError("Message is required")
    return text


def _to_message_response(row: dict) -> schemas.MessageResponse:
    return schemas.MessageResponse(id=int(row["id"]), message=str(row["message"]))


async def list_messages(store: MessageStore) -> list[schemas.MessageResponse]:
    rows = await store.list_all()
    return [_to_message_response(row) for row in rows]


async def get_message(store: MessageStore, raw_id: str) -> schemas.MessageResponse:
    message_id = parse_message_id(raw_id)
    row = await store.get(message_id)
    return _to_message_response(row)


async def create_message(store: MessageStore, body: bytes) -> schemas.MessageResponse:
    text = parse_new_message(body)
    row = await store.create(text)
    return _to_message_response(row)


async def delete_message(store: MessageStore, raw_id: str) -> None:
    message_id = parse_message_id(raw_id)
    await store.delete(message_id)


async def health(store: MessageStore) -> schemas.HealthResponse:
    await store.ping()
    return schemas.HealthResponse(status="ok")
