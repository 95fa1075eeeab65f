"""Project endpoints and server-side blueprint generation."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

import crud.projects as crud_projects
from dependencies.db import DbSession
from dependencies.generation import ControllerDep
from schemas.api import ApiResponse
from schemas.projects import (
    GenerationResult,
    ProjectCreate,
    ProjectResponse,
    ProjectUpdate,
    RetryRequest,
)
from services.generation.models import (
    GenerationOutcome,
    GenerationRecord,
    allowed_sources,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])


def _project_from_record(record: GenerationRecord) -> ProjectResponse:
    return ProjectResponse(
        id=record.id,
        title=record.title,
        description=record.source_text,
        status=record.status,
        blueprint=record.artifact,
    )


def _generation_response(outcome: GenerationOutcome) -> ApiResponse[GenerationResult]:
    result = GenerationResult(
        project=_project_from_record(outcome.record),
        attempted=outcome.attempted,
        error_code=outcome.error_code,
        error_message=outcome.message,
    )
    if outcome.error_code is not None:
        return ApiResponse(
            success=False,
            data=result,
            message=outcome.message or "Generation failed",
            error={"type": outcome.error_code, "message": outcome.message},
        )
    if not outcome.attempted:
        return ApiResponse(
            success=True,
            data=result,
            message=f"No generation needed; project is {outcome.record.status}",
        )
    return ApiResponse(success=True, data=result, message="Blueprint generated")


@router.post("", response_model=ApiResponse[ProjectResponse])
async def create_project(
    payload: ProjectCreate, db: DbSession
) -> ApiResponse[ProjectResponse]:
    """Create a project in the ``pending`` state."""
    project = await crud_projects.create_project(
        db, description=payload.description, title=payload.title
    )
    logger.debug("create_project: created id=%s", project.id)
    return ApiResponse(
        success=True,
        data=ProjectResponse.model_validate(project),
        message="Project created",
    )


@router.get("", response_model=ApiResponse[list[ProjectResponse]])
async def list_projects(db: DbSession) -> ApiResponse[list[ProjectResponse]]:
    projects = await crud_projects.list_projects(db)
    return ApiResponse(
        success=True,
        data=[ProjectResponse.model_validate(p) for p in projects],
        message="Projects retrieved",
    )


@router.get("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def get_project(project_id: UUID, db: DbSession) -> ApiResponse[ProjectResponse]:
    project = await crud_projects.get_project_by_id(db, project_id)
    if project is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Project not found"
        )
    return ApiResponse(
        success=True,
        data=ProjectResponse.model_validate(project),
        message="Project retrieved",
    )


@router.patch("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def update_project(
    project_id: UUID, payload: ProjectUpdate, db: DbSession
) -> ApiResponse[ProjectResponse]:
    """Record a status transition made by a client-side generation run.

    The write only applies while the stored status allows it (409 otherwise),
    so a finished project cannot be reopened and two runs cannot both claim
    ``streaming``.
    """
    project = await crud_projects.update_project_generation(
        db,
        project_id,
        status=str(payload.status),
        blueprint=payload.blueprint,
        expected_statuses=sorted(str(s) for s in allowed_sources(payload.status)),
    )
    if project is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Project not found"
        )
    return ApiResponse(
        success=True,
        data=ProjectResponse.model_validate(project),
        message="Project updated",
    )


@router.post("/{project_id}/generate", response_model=ApiResponse[GenerationResult])
async def generate_project_blueprint(
    project_id: UUID, controller: ControllerDep
) -> ApiResponse[GenerationResult]:
    """Run one generation attempt on the server if the project awaits one.

    Returns ``success=false`` with the failure message when the attempt
    failed; the project is then in ``error`` and can be retried.
    """
    outcome = await controller.ensure_blueprint(project_id)
    return _generation_response(outcome)


@router.post("/{project_id}/retry", response_model=ApiResponse[GenerationResult])
async def retry_project_blueprint(
    project_id: UUID,
    controller: ControllerDep,
    payload: RetryRequest | None = None,
) -> ApiResponse[GenerationResult]:
    """Explicit retry of a failed generation (409 unless status is ``error``)."""
    source_text = payload.project_idea if payload is not None else None
    outcome = await controller.retry(project_id, source_text)
    return _generation_response(outcome)
