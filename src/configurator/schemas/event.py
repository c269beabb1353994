"""Event schemas."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import Field

from .base import SchemaBase


class EventType(str, Enum):
    ENGINE = "engine"
    ARTIFACT = "artifact"
    ERROR = "error"


class Event(SchemaBase):
    event_id: str
    domain_id: Optional[str] = Field(default=None)
    artifact_path: Optional[str] = Field(default=None)
    type: EventType
    timestamp: Optional[str] = Field(default=None)
    payload: Dict[str, Any]
