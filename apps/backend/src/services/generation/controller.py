"""Generation controller: ties a record's status to one stream's outcome.

State machine::

    pending ──► streaming ──► complete
                    │
                    └──────► error ──(retry)──► streaming

Every transition is written through ``ProjectStore.update`` with a
``GenerationUpdate``, so ``complete`` and the artifact are always persisted
together and ``error`` never carries one. Each attempt gets a fresh
``BlueprintAssembler``; nothing from a failed attempt is reused.

The controller never retries on its own. A record with an attempt already in
flight is refused rather than raced: locally through the in-flight set, and
across processes by the store, which only accepts the ``streaming`` claim
while the record still awaits an attempt. Once claimed, the record always
leaves ``streaming``, including when the attempt is cancelled.
"""

from __future__ import annotations

import asyncio
from uuid import UUID

from core.error_handler import StructuredLogger
from core.exceptions import GenerationConflictError, ProjectNotFoundError
from core.observability import get_tracer
from services.generation.interfaces import GenerationPipeline, ProjectStore
from services.generation.models import (
    GenerationOutcome,
    GenerationRecord,
    GenerationStatus,
    GenerationUpdate,
)
from services.streaming.assembler import BlueprintAssembler
from services.streaming.exceptions import AttemptFailure


logger = StructuredLogger(__name__)
tracer = get_tracer(__name__)


class GenerationController:
    def __init__(self, store: ProjectStore, pipeline: GenerationPipeline) -> None:
        self._store = store
        self._pipeline = pipeline
        self._in_flight: set[UUID] = set()

    def is_generating(self, record_id: UUID) -> bool:
        return record_id in self._in_flight

    async def _load(self, record_id: UUID) -> GenerationRecord:
        record = await self._store.get(record_id)
        if record is None:
            raise ProjectNotFoundError(f"Project {record_id} not found")
        return record

    async def ensure_blueprint(self, record_id: UUID) -> GenerationOutcome:
        """Start an attempt if the record is waiting for one.

        Records that are already streaming, complete or failed are returned
        unchanged; failed records need an explicit ``retry``.
        """
        record = await self._load(record_id)
        if not record.awaits_generation:
            logger.debug(
                "Generation not required",
                record_id=str(record_id),
                status=str(record.status),
            )
            return GenerationOutcome(record=record, attempted=False)
        return await self._attempt(record, record.source_text)

    async def retry(
        self, record_id: UUID, source_text: str | None = None
    ) -> GenerationOutcome:
        """Re-enter ``streaming`` from ``error`` with a fresh assembler."""
        record = await self._load(record_id)
        if record.status != GenerationStatus.ERROR:
            raise GenerationConflictError(
                f"Retry is only allowed from error; project is {record.status}"
            )
        if source_text is not None and source_text != record.source_text:
            raise GenerationConflictError(
                "The project idea cannot change between generation attempts"
            )
        return await self._attempt(record, record.source_text)

    async def _attempt(
        self, record: GenerationRecord, source_text: str
    ) -> GenerationOutcome:
        # Check and claim happen with no await in between
        if record.id in self._in_flight:
            raise GenerationConflictError(
                f"Project {record.id} already has a generation in progress"
            )
        self._in_flight.add(record.id)
        try:
            with tracer.start_as_current_span("generation.attempt") as span:
                span.set_attribute("project.id", str(record.id))
                span.set_attribute("project.previous_status", str(record.status))
                return await self._run_attempt(record.id, source_text)
        finally:
            self._in_flight.discard(record.id)

    async def _run_attempt(self, record_id: UUID, source_text: str) -> GenerationOutcome:
        # The store refuses this claim unless the record still awaits an attempt
        await self._store.update(record_id, GenerationUpdate.streaming())
        logger.info("Generation started", record_id=str(record_id))

        assembler = BlueprintAssembler()
        try:
            await self._pipeline.run(source_text, assembler)
            artifact = assembler.finish()
            record = await self._store.update(
                record_id, GenerationUpdate.complete(artifact)
            )
        except AttemptFailure as exc:
            record = await self._store.update(record_id, GenerationUpdate.failed())
            logger.warning(
                "Generation failed",
                record_id=str(record_id),
                error_code=exc.error_code,
                error=exc.message,
            )
            return GenerationOutcome(
                record=record,
                attempted=True,
                error_code=exc.error_code,
                message=exc.message,
            )
        except Exception:
            # Never leave the record stuck in streaming
            await self._store.update(record_id, GenerationUpdate.failed())
            logger.exception("Generation crashed", record_id=str(record_id))
            raise
        except BaseException:
            # Cancelled or interrupted; the write must outlive the cancellation
            await asyncio.shield(
                self._store.update(record_id, GenerationUpdate.failed())
            )
            logger.warning("Generation interrupted", record_id=str(record_id))
            raise

        logger.info(
            "Generation complete",
            record_id=str(record_id),
            sections=sorted(artifact.keys()),
        )
        return GenerationOutcome(record=record, attempted=True)
