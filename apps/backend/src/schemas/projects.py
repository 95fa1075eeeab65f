"""Request/response schemas for projects and blueprint generation."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from services.generation.models import GenerationStatus


class ProjectCreate(BaseModel):
    """Payload for creating a project awaiting generation."""

    title: str | None = Field(default=None, max_length=200)
    description: str = Field(..., min_length=1, max_length=4000)

    model_config = ConfigDict(extra="forbid")


class ProjectUpdate(BaseModel):
    """Status transition written by a client-side controller.

    ``blueprint`` must be present exactly when ``status`` is ``complete``.
    """

    status: GenerationStatus
    blueprint: dict[str, Any] | None = None

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def _blueprint_iff_complete(self) -> ProjectUpdate:
        if (self.status == GenerationStatus.COMPLETE) != (self.blueprint is not None):
            raise ValueError("blueprint must be provided if and only if status is complete")
        return self


class ProjectResponse(BaseModel):
    id: UUID
    title: str | None = None
    description: str
    status: GenerationStatus
    blueprint: dict[str, Any] | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class GenerationResult(BaseModel):
    """Outcome of a server-side generation request."""

    project: ProjectResponse
    attempted: bool
    error_code: str | None = None
    error_message: str | None = None


class GenerateStreamRequest(BaseModel):
    """Body of the streaming relay endpoint (camelCase on the wire)."""

    project_idea: str = Field(..., alias="projectIdea", min_length=1, max_length=4000)
    project_id: UUID | None = Field(default=None, alias="projectId")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class RetryRequest(BaseModel):
    """Explicit retry carrying the idea text the client believes is stored."""

    project_idea: str | None = Field(default=None, alias="projectIdea")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")
