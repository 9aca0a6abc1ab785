"""
HelloWorld message endpoints.

Successful bodies use the `{"data": ...}` envelope; DELETE answers 204
with no body.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status

from . import service
from .dependencies import get_store
from .repository import MessageStore

router = APIRouter()


@router.get("/hello")
async def list_messages(store: MessageStore = Depends(get_store)) -> dict:
    messages = await service.list_messages(store)
    return {"data": [m.model_dump() for m in messages]}


@router.post("/hello", status_code=status.HTTP_201_CREATED)
async def create_message(request: Request, store: MessageStore = Depends(get_store)) -> dict:
    # Decoded by hand so unknown keys and malformed JSON map to 400, not 422.
    body = await request.body()
    message = await service.create_message(store, body)
    return {"data": message.model_dump()}


@router.get("/hello/{raw_id:path}")
async def get_message(raw_id: str, store: MessageStore = Depends(get_store)) -> dict:
    message = await service.get_message(store, raw_id)
    return {"data": message.model_dump()}


@router.delete("/hello/{raw_id:path}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(raw_id: str, store: MessageStore = Depends(get_store)) -> Response:
    await service.delete_message(store, raw_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT, media_type="application/json")
