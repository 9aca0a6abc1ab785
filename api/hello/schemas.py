"""
Pydantic schemas for message endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

MAX_MESSAGE_LENGTH = 255


class CreateMessageRequest(BaseModel):
    # Only `message` is accepted; ids are assigned by the store.
    model_config = ConfigDict(extra="forbid", strict=True)

    message: str | None = None


class MessageResponse(BaseModel):
    id: int
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
