"""Base domain model classes."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


def generate_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DomainEntity(BaseModel):
    """Mutable entity with identity.

    ``version`` is the optimistic concurrency token: repositories only store
    a write when the stored version still equals the one that was read.
    """

    id: str = Field(default_factory=generate_id)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    version: int = Field(default=1)

    model_config = {"validate_assignment": True}

    def touch(self) -> None:
        """Record a change: refresh ``updated_at`` and bump ``version``."""
        self.updated_at = utc_now()
        self.version += 1


class ValueObject(BaseModel):
    """Immutable value; changes go through ``model_copy(update=...)``."""

    model_config = {"frozen": True}


class DomainEvent(BaseModel):
    """Fact about a deployment, handed to the event publisher after a write."""

    event_id: str = Field(default_factory=generate_id)
    event_type: str = ""
    occurred_at: datetime = Field(default_factory=utc_now)
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def to_message(self) -> tuple[str, dict[str, Any]]:
        """``(event_type, json-safe payload)`` as accepted by ``publish_batch``."""
        return self.event_type, self.model_dump(mode="json")
