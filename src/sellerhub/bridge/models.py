"""Bridge adapter data models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ConnectionStatus(str, Enum):
    """Adapter connection health status."""

    CONNECTED = "connected"
    DEGRADED = "degraded"
    DISCONNECTED = "disconnected"


class AdapterConfig(BaseModel):
    """Configuration for a bridge adapter."""

    name: str
    provider: str = "mock"
    base_url: str = ""
    api_key: str | None = None
    timeout_seconds: int = 30
    max_retries: int = 0
    description: str = ""


class RegistryRecord(BaseModel):
    """What a verification registry said about one declared number.

    ``status`` is the registry's own status string; ``active`` is its
    boolean reading for the document kind in question.
    """

    number: str
    status: str = ""
    active: bool = False
    remarks: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)


class AdapterSchema(BaseModel):
    """Schema describing an adapter's capabilities."""

    name: str
    description: str = ""
    provider: str = "mock"
    operations: list[str] = Field(default_factory=list)
    status: ConnectionStatus = ConnectionStatus.CONNECTED
