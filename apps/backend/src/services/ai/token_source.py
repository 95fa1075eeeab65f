"""Upstream token source: streams blueprint text deltas from the LLM."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from pydantic_ai import Agent

from services.ai.agents import build_user_prompt
from services.streaming.exceptions import UpstreamTimeout


logger = logging.getLogger(__name__)


class BlueprintTokenSource:
    """Yields raw text deltas for one project idea.

    The wait for each delta is bounded by ``chunk_timeout`` seconds; a stalled
    provider raises ``UpstreamTimeout``, which the relay reports like any
    other upstream failure. Provider errors propagate unchanged.
    """

    def __init__(self, agent: Agent[None, str], chunk_timeout: float = 60.0) -> None:
        self._agent = agent
        self._chunk_timeout = chunk_timeout

    async def stream(self, project_idea: str) -> AsyncIterator[str]:
        prompt = build_user_prompt(project_idea)
        async with self._agent.run_stream(prompt) as result:
            deltas = result.stream_text(delta=True, debounce_by=None)
            received = 0
            while True:
                try:
                    async with asyncio.timeout(self._chunk_timeout):
                        delta = await anext(deltas)
                except StopAsyncIteration:
                    break
                except TimeoutError as exc:
                    raise UpstreamTimeout(
                        f"No output from the model for {self._chunk_timeout:g}s"
                    ) from exc
                received += len(delta)
                yield delta
        logger.debug("Upstream stream finished after %d chars", received)
