"""Dispatch outcomes and status codes."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Optional

from pydantic import Field

from .base import SchemaBase


class StatusCode(IntEnum):
    """Status codes carried by dispatch outcomes and bus responses.

    ``OK`` is the only success value; every other code is a failure, except
    ``IN_PROGRESS`` which marks an advisory skip when returned synchronously.
    """

    OK = 0
    IN_PROGRESS = 1
    ACCESS_DENIED = 2
    INTERNAL = 3
    PARSE = 4
    IO = 5
    TRANSPORT = 6


class OutcomeKind(str, Enum):
    ACCEPTED = "accepted"
    ADVISORY_SKIP = "advisory_skip"
    FAILURE = "failure"


class RunMode(str, Enum):
    """Processing semantics for a configurator run."""

    APPLY = "apply"  # incremental, consults the stamp cache
    REAPPLY = "reapply"  # force, ignores the stamp cache
    REMOVE = "remove"  # undo


class Outcome(SchemaBase):
    """Synchronous result of handing an artifact to a handler hook."""

    kind: OutcomeKind
    code: int = Field(default=StatusCode.OK)
    message: Optional[str] = Field(default=None)

    @classmethod
    def accepted(cls) -> "Outcome":
        return cls(kind=OutcomeKind.ACCEPTED)

    @classmethod
    def advisory_skip(cls, message: Optional[str] = None) -> "Outcome":
        return cls(kind=OutcomeKind.ADVISORY_SKIP, code=StatusCode.IN_PROGRESS, message=message)

    @classmethod
    def failure(cls, code: int, message: Optional[str] = None) -> "Outcome":
        if code == StatusCode.OK:
            raise ValueError("failure outcome requires a non-zero status code")
        return cls(kind=OutcomeKind.FAILURE, code=int(code), message=message)

    @classmethod
    def from_status(cls, status: int, message: Optional[str] = None) -> "Outcome":
        """Map a raw status code to an outcome."""
        if status == StatusCode.OK:
            return cls.accepted()
        if status == StatusCode.IN_PROGRESS:
            return cls.advisory_skip(message)
        return cls.failure(status, message)

    @property
    def is_accepted(self) -> bool:
        return self.kind == OutcomeKind.ACCEPTED

    @property
    def is_advisory_skip(self) -> bool:
        return self.kind == OutcomeKind.ADVISORY_SKIP

    def describe(self) -> str:
        """Human-readable form used in log lines."""
        try:
            name = StatusCode(self.code).name
        except ValueError:
            name = str(self.code)
        if self.message:
            return f"{name}: {self.message}"
        return name
