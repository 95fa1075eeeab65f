"""Shared test fixtures for pytest.

ENVIRONMENT is pinned to ``test`` before the app is imported so settings load
without an env file. No test talks to a real model provider or database:
routes get in-memory collaborators through ``app.dependency_overrides``.
"""

import os
import uuid
from collections.abc import AsyncGenerator, AsyncIterator, Callable, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient


os.environ.setdefault("ENVIRONMENT", "test")

from dependencies.db import get_db
from dependencies.generation import (
    get_generation_controller,
    get_project_store,
    get_token_source,
)
from main import app
from services.generation import (
    GenerationController,
    GenerationRecord,
    GenerationStatus,
    GenerationUpdate,
    RelayPipeline,
)


BLUEPRINT_TEXT = (
    '{"projectAnalysis": {"objective": "Track climbing sessions", '
    '"type": "web app", "complexity": "intermediate", "domains": ["web"]}, '
    '"folderStructure": "app/\\n  main.py"}'
)


class InMemoryProjectStore:
    """ProjectStore keeping records in a dict; records every update applied.

    Updates are compare-and-set on the stored status, like the SQL store.
    """

    def __init__(self) -> None:
        self.records: dict[uuid.UUID, GenerationRecord] = {}
        self.updates: list[tuple[uuid.UUID, GenerationUpdate]] = []

    def add(
        self,
        source_text: str = "A tracker for climbing sessions",
        status: GenerationStatus = GenerationStatus.PENDING,
        artifact: dict | None = None,
    ) -> GenerationRecord:
        record = GenerationRecord(
            id=uuid.uuid4(), source_text=source_text, status=status, artifact=artifact
        )
        self.records[record.id] = record
        return record

    async def get(self, record_id: uuid.UUID) -> GenerationRecord | None:
        record = self.records.get(record_id)
        if record is None:
            return None
        # Hand out copies so callers can't mutate stored state
        return GenerationRecord(
            id=record.id,
            source_text=record.source_text,
            status=record.status,
            artifact=record.artifact,
            title=record.title,
        )

    async def create(self, source_text: str, title: str | None = None) -> uuid.UUID:
        record = self.add(source_text)
        record.title = title
        return record.id

    async def update(
        self, record_id: uuid.UUID, update: GenerationUpdate
    ) -> GenerationRecord:
        from core.exceptions import GenerationConflictError, ProjectNotFoundError

        record = self.records.get(record_id)
        if record is None:
            raise ProjectNotFoundError(f"Project {record_id} not found")
        if record.status not in update.allowed_from:
            raise GenerationConflictError(
                f"Cannot move project from {record.status} to {update.status}"
            )
        record.status = update.status
        record.artifact = update.artifact
        self.updates.append((record_id, update))
        return await self.get(record_id)  # type: ignore[return-value]

    def statuses(self, record_id: uuid.UUID) -> list[str]:
        return [str(u.status) for rid, u in self.updates if rid == record_id]


class ScriptedTokenSource:
    """TokenSource replaying fixed deltas, optionally failing afterwards."""

    def __init__(
        self, deltas: list[str], failure: Exception | None = None
    ) -> None:
        self.deltas = deltas
        self.failure = failure
        self.prompts: list[str] = []
        self.pulled = 0
        self.closed = False

    async def stream(self, project_idea: str) -> AsyncIterator[str]:
        self.prompts.append(project_idea)
        try:
            for delta in self.deltas:
                self.pulled += 1
                yield delta
            if self.failure is not None:
                raise self.failure
        finally:
            self.closed = True


@pytest.fixture
def project_store() -> InMemoryProjectStore:
    return InMemoryProjectStore()


@pytest.fixture
def make_token_source() -> Callable[..., ScriptedTokenSource]:
    def _make(
        deltas: list[str] | None = None, failure: Exception | None = None
    ) -> ScriptedTokenSource:
        return ScriptedTokenSource(
            deltas if deltas is not None else [BLUEPRINT_TEXT], failure
        )

    return _make


@pytest.fixture
def blueprint_text() -> str:
    return BLUEPRINT_TEXT


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """
    Create a test client for the FastAPI application.
    """
    with TestClient(app) as client:
        yield client


class _FakeSession:
    """Placeholder session; routes under test have their crud calls patched."""

    async def close(self):  # pragma: no cover - no-op
        return None


async def _override_get_db_factory() -> AsyncGenerator[_FakeSession, None]:
    """Yield a fake session for dependency override."""
    fake = _FakeSession()
    try:
        yield fake
    finally:  # pragma: no cover - cleanup path
        await fake.close()


@pytest.fixture
def wire_generation(
    project_store: InMemoryProjectStore,
) -> Generator[Callable[[ScriptedTokenSource], GenerationController], None, None]:
    """Point the generation dependencies at in-memory collaborators."""

    def _wire(token_source: ScriptedTokenSource) -> GenerationController:
        controller = GenerationController(
            store=project_store, pipeline=RelayPipeline(token_source)
        )
        app.dependency_overrides[get_token_source] = lambda: token_source
        app.dependency_overrides[get_project_store] = lambda: project_store
        app.dependency_overrides[get_generation_controller] = lambda: controller
        return controller

    yield _wire
    for dependency in (get_token_source, get_project_store, get_generation_controller):
        app.dependency_overrides.pop(dependency, None)


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Async client with the DB dependency overridden."""
    app.dependency_overrides[get_db] = _override_get_db_factory
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.pop(get_db, None)
