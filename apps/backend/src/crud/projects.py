"""CRUD operations for projects."""

from collections.abc import Collection
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import GenerationConflictError
from models.projects import Project


async def create_project(
    db: AsyncSession,
    description: str,
    title: str | None = None,
    status: str = "pending",
) -> Project:
    """Create a new project awaiting generation.

    Args:
        db: Database session
        description: The user's project idea
        title: Optional display title
        status: Initial status (default "pending")

    Returns:
        Created Project instance
    """
    project = Project(title=title, description=description, status=status)
    db.add(project)
    await db.commit()
    await db.refresh(project)
    return project


async def get_project_by_id(db: AsyncSession, project_id: UUID) -> Project | None:
    """Get a project by ID, or None if it does not exist."""
    result = await db.execute(select(Project).where(Project.id == project_id))
    return result.scalar_one_or_none()


async def list_projects(db: AsyncSession, limit: int = 100) -> list[Project]:
    """List projects, newest first."""
    query = select(Project).order_by(Project.created_at.desc()).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())


async def update_project_generation(
    db: AsyncSession,
    project_id: UUID,
    status: str,
    blueprint: dict[str, Any] | None,
    expected_statuses: Collection[str] | None = None,
) -> Project | None:
    """Set status and blueprint together in a single commit.

    With ``expected_statuses`` the write is a compare-and-set: a single
    ``UPDATE ... WHERE status IN (...)`` that only matches while the stored
    status is one of them, so two writers can never both claim a project.

    Args:
        db: Database session
        project_id: Project to update
        status: New status
        blueprint: Parsed blueprint, or None to clear it
        expected_statuses: Statuses the project must currently hold

    Returns:
        Updated Project, or None if it does not exist

    Raises:
        GenerationConflictError: The project exists but holds another status
    """
    stmt = update(Project).where(Project.id == project_id)
    if expected_statuses is not None:
        stmt = stmt.where(Project.status.in_(list(expected_statuses)))
    stmt = (
        stmt.values(status=status, blueprint=blueprint)
        .returning(Project)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    project = result.scalar_one_or_none()
    await db.commit()

    if project is None:
        current = await get_project_by_id(db, project_id)
        if current is None:
            return None
        raise GenerationConflictError(
            f"Project {project_id} cannot move to {status} from its current status"
        )

    await db.refresh(project)
    return project
