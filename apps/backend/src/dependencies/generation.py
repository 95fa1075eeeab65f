"""Dependencies wiring the generation pipeline into FastAPI routes.

The controller is a process-wide singleton: its in-flight set is what keeps
two requests from running concurrent attempts against the same project.
Tests replace these providers through ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from core.config import get_settings
from dependencies.db import AsyncSessionLocal
from services.ai import BlueprintTokenSource, create_blueprint_agent
from services.generation import GenerationController, RelayPipeline
from services.generation.interfaces import ProjectStore, TokenSource
from services.generation.store import SqlProjectStore


@lru_cache
def get_token_source() -> TokenSource:
    settings = get_settings()
    return BlueprintTokenSource(
        create_blueprint_agent(),
        chunk_timeout=settings.GENERATION_CHUNK_TIMEOUT_SECONDS,
    )


@lru_cache
def get_project_store() -> ProjectStore:
    return SqlProjectStore(AsyncSessionLocal)


@lru_cache
def get_generation_controller() -> GenerationController:
    return GenerationController(
        store=get_project_store(),
        pipeline=RelayPipeline(get_token_source()),
    )


TokenSourceDep = Annotated[TokenSource, Depends(get_token_source)]
ProjectStoreDep = Annotated[ProjectStore, Depends(get_project_store)]
ControllerDep = Annotated[GenerationController, Depends(get_generation_controller)]
