"""Schemas for the blueprint generation event stream."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class EventKind(StrEnum):
    DELTA = "delta"
    DONE = "done"
    ERROR = "error"


class StreamEvent(BaseModel):
    """One logical event of a generation stream.

    ``payload`` is the text fragment for ``delta``, the failure description
    for ``error`` and empty for ``done``. Events of one stream are consumed
    in arrival order and never deduplicated.
    """

    kind: EventKind
    payload: str = ""

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def delta(cls, text: str) -> StreamEvent:
        return cls(kind=EventKind.DELTA, payload=text)

    @classmethod
    def done(cls) -> StreamEvent:
        return cls(kind=EventKind.DONE)

    @classmethod
    def error(cls, message: str) -> StreamEvent:
        return cls(kind=EventKind.ERROR, payload=message)

    @property
    def is_terminal(self) -> bool:
        return self.kind is not EventKind.DELTA
