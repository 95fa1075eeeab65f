"""Streaming relay endpoint.

Wire format (one event per ``data:`` line, blank line between events)::

    data: {"choices": [{"delta": {"content": "<text>"}}]}
    data: [DONE]

On an upstream failure the stream carries ``data: {"error": "<message>"}``
and closes without ``[DONE]``. The client owns reassembly and persistence
of the blueprint.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from dependencies.generation import TokenSourceDep
from schemas.projects import GenerateStreamRequest
from services.streaming.relay import relay_frames


logger = logging.getLogger(__name__)

router = APIRouter(tags=["generate"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    # Disable proxy buffering so deltas reach the client as they are produced
    "X-Accel-Buffering": "no",
}


@router.post(
    "/generate",
    response_class=StreamingResponse,
    summary="Stream blueprint token deltas via Server-Sent Events",
)
async def generate_blueprint_stream(
    request: GenerateStreamRequest, token_source: TokenSourceDep
) -> StreamingResponse:
    logger.debug(
        "generate_blueprint_stream: project_id=%s idea_chars=%d",
        request.project_id,
        len(request.project_idea),
    )
    return StreamingResponse(
        relay_frames(token_source.stream(request.project_idea)),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
