"""Collaborator protocols for the generation controller.

The controller never reaches storage or the network directly; it is handed a
ProjectStore and a GenerationPipeline. Server and client wire different
implementations of both (SQL store + in-process relay on the server, REST
store + HTTP stream on the client).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol
from uuid import UUID

from services.generation.models import GenerationRecord, GenerationUpdate
from services.streaming.assembler import BlueprintAssembler


class ProjectStore(Protocol):
    """Narrow persistence interface used by the controller."""

    async def get(self, record_id: UUID) -> GenerationRecord | None:
        """Return the record, or None when it does not exist."""
        ...

    async def create(self, source_text: str, title: str | None = None) -> UUID:
        """Persist a new pending record and return its id."""
        ...

    async def update(self, record_id: UUID, update: GenerationUpdate) -> GenerationRecord:
        """Apply ``update`` (status and artifact together) and return the record.

        Raises ``GenerationConflictError`` unless the stored status is one of
        ``update.allowed_from``.
        """
        ...


class TokenSource(Protocol):
    """Upstream LLM client producing text deltas for one project idea."""

    def stream(self, project_idea: str) -> AsyncIterator[str]:
        """Return an async iterator of text deltas."""
        ...


class GenerationPipeline(Protocol):
    """Moves one attempt's raw stream bytes into an assembler."""

    async def run(self, source_text: str, assembler: BlueprintAssembler) -> None:
        """Feed the full stream for ``source_text`` into ``assembler``.

        Transport level failures are raised as ``TransportError``; stream
        content (including error frames) is left for the assembler to judge.
        """
        ...
