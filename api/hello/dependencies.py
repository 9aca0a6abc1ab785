"""
Store dependency for message routes.
"""

from __future__ import annotations

from fastapi import Request

from .repository import MessageStore


def get_store(request: Request) -> MessageStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Message store is not initialized. It is created during app startup.")
    return store
