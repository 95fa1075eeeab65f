"""Client-side collaborators that talk to a running API over HTTP.

``HttpProjectStore`` implements the ProjectStore protocol against the
``/projects`` REST endpoints and ``HttpStreamPipeline`` consumes the
``/generate`` relay stream, feeding raw response bytes into the assembler
exactly as they arrive. Wired into a ``GenerationController`` they reproduce
the browser flow: fetch the record, stream, assemble, then write the outcome
back.
"""

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

import httpx

from core.exceptions import GenerationConflictError, ProjectNotFoundError
from services.generation.models import (
    GenerationRecord,
    GenerationStatus,
    GenerationUpdate,
)
from services.streaming.assembler import BlueprintAssembler
from services.streaming.exceptions import TransportError


logger = logging.getLogger(__name__)

PROJECTS_PATH = "/api/v1/projects"
GENERATE_PATH = "/api/v1/generate"


def record_from_payload(data: dict[str, Any]) -> GenerationRecord:
    return GenerationRecord(
        id=UUID(str(data["id"])),
        source_text=data["description"],
        status=GenerationStatus(data["status"]),
        artifact=data.get("blueprint"),
        title=data.get("title"),
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"Error {response.status_code}"
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return f"Error {response.status_code}"


class HttpProjectStore:
    """ProjectStore backed by the REST API."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def get(self, record_id: UUID) -> GenerationRecord | None:
        response = await self._client.get(f"{PROJECTS_PATH}/{record_id}")
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()
        return record_from_payload(response.json()["data"])

    async def create(self, source_text: str, title: str | None = None) -> UUID:
        response = await self._client.post(
            PROJECTS_PATH, json={"title": title, "description": source_text}
        )
        response.raise_for_status()
        return UUID(str(response.json()["data"]["id"]))

    async def update(self, record_id: UUID, update: GenerationUpdate) -> GenerationRecord:
        response = await self._client.patch(
            f"{PROJECTS_PATH}/{record_id}",
            json={"status": str(update.status), "blueprint": update.artifact},
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            raise ProjectNotFoundError(f"Project {record_id} not found")
        if response.status_code == httpx.codes.CONFLICT:
            raise GenerationConflictError(_error_message(response))
        response.raise_for_status()
        return record_from_payload(response.json()["data"])


class HttpStreamPipeline:
    """Streams the relay endpoint into an assembler."""

    def __init__(self, client: httpx.AsyncClient, project_id: UUID | None = None) -> None:
        self._client = client
        self._project_id = project_id

    async def run(self, source_text: str, assembler: BlueprintAssembler) -> None:
        body: dict[str, Any] = {"projectIdea": source_text}
        if self._project_id is not None:
            body["projectId"] = str(self._project_id)
        try:
            async with self._client.stream("POST", GENERATE_PATH, json=body) as response:
                if response.is_error:
                    await response.aread()
                    raise TransportError(_error_message(response))
                async for chunk in response.aiter_bytes():
                    assembler.feed(chunk)
        except httpx.HTTPError as exc:
            logger.warning("Generation stream transport failure: %s", exc)
            raise TransportError(str(exc) or exc.__class__.__name__) from exc
