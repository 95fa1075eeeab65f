"""SQL-backed ProjectStore used by the server-side controller."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

import crud.projects as crud_projects
from core.exceptions import ProjectNotFoundError
from models.projects import Project
from services.generation.models import (
    GenerationRecord,
    GenerationStatus,
    GenerationUpdate,
)


logger = logging.getLogger(__name__)


def record_from_project(project: Project) -> GenerationRecord:
    return GenerationRecord(
        id=project.id,
        source_text=project.description,
        status=GenerationStatus(project.status),
        artifact=project.blueprint,
        title=project.title,
    )


class SqlProjectStore:
    """ProjectStore over an async session factory.

    Each operation uses its own short-lived session so a long-running stream
    never holds a connection open between status updates.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, record_id: UUID) -> GenerationRecord | None:
        async with self._session_factory() as session:
            project = await crud_projects.get_project_by_id(session, record_id)
        return record_from_project(project) if project is not None else None

    async def create(self, source_text: str, title: str | None = None) -> UUID:
        async with self._session_factory() as session:
            project = await crud_projects.create_project(
                session, description=source_text, title=title
            )
        logger.debug("Created project id=%s", project.id)
        return project.id

    async def update(self, record_id: UUID, update: GenerationUpdate) -> GenerationRecord:
        """Write ``update`` only if the stored status allows it.

        Raises ``GenerationConflictError`` when another writer got there first.
        """
        async with self._session_factory() as session:
            project = await crud_projects.update_project_generation(
                session,
                record_id,
                status=str(update.status),
                blueprint=update.artifact,
                expected_statuses=sorted(str(s) for s in update.allowed_from),
            )
        if project is None:
            raise ProjectNotFoundError(f"Project {record_id} not found")
        logger.debug("Project id=%s now %s", record_id, update.status)
        return record_from_project(project)
