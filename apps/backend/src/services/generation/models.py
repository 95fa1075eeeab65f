"""Domain models for blueprint generation attempts.

* GenerationStatus  - lifecycle of a persisted record
* GenerationRecord  - the store's view of a project as seen by the controller
* GenerationUpdate  - the only value the controller writes back; validates
  that ``complete`` always travels with an artifact and no other status does
* GenerationOutcome - what one controller call returns to its caller
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any
from uuid import UUID

from services.streaming.exceptions import InvalidState


class GenerationStatus(StrEnum):
    PENDING = "pending"
    # Written by older clients; read as PENDING
    GENERATING = "generating"
    STREAMING = "streaming"
    COMPLETE = "complete"
    ERROR = "error"


AWAITING_GENERATION = frozenset({GenerationStatus.PENDING, GenerationStatus.GENERATING})

# Statuses a record must currently hold for each write to apply. Nothing moves
# a record back to pending, and complete or error are only left through a new
# attempt.
TRANSITION_SOURCES: dict[GenerationStatus, frozenset[GenerationStatus]] = {
    GenerationStatus.STREAMING: AWAITING_GENERATION | {GenerationStatus.ERROR},
    GenerationStatus.COMPLETE: frozenset({GenerationStatus.STREAMING}),
    GenerationStatus.ERROR: frozenset({GenerationStatus.STREAMING}),
}


def allowed_sources(status: GenerationStatus) -> frozenset[GenerationStatus]:
    return TRANSITION_SOURCES.get(status, frozenset())


@dataclass(slots=True)
class GenerationRecord:
    id: UUID
    source_text: str
    status: GenerationStatus
    artifact: dict[str, Any] | None = None
    title: str | None = None

    @property
    def awaits_generation(self) -> bool:
        return self.status in AWAITING_GENERATION and self.artifact is None


@dataclass(frozen=True, slots=True)
class GenerationUpdate:
    """Status change written through ``ProjectStore.update`` as one unit."""

    status: GenerationStatus
    artifact: dict[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.status == GenerationStatus.COMPLETE and self.artifact is None:
            raise InvalidState("A complete record requires an artifact")
        if self.status != GenerationStatus.COMPLETE and self.artifact is not None:
            raise InvalidState(f"A {self.status} record cannot carry an artifact")

    @property
    def allowed_from(self) -> frozenset[GenerationStatus]:
        return allowed_sources(self.status)

    @classmethod
    def streaming(cls) -> GenerationUpdate:
        return cls(GenerationStatus.STREAMING)

    @classmethod
    def complete(cls, artifact: dict[str, Any]) -> GenerationUpdate:
        return cls(GenerationStatus.COMPLETE, artifact)

    @classmethod
    def failed(cls) -> GenerationUpdate:
        return cls(GenerationStatus.ERROR)


@dataclass(slots=True)
class GenerationOutcome:
    """Result of a controller call.

    ``record`` is the state after the call. ``error_code``/``message`` are
    set only when this call ran an attempt that failed.
    """

    record: GenerationRecord
    attempted: bool
    error_code: str | None = None
    message: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.record.status == GenerationStatus.COMPLETE
