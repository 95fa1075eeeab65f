"""Server-side relay from an upstream token source to a framed event stream.

The relay is pull based: it asks the upstream iterator for the next delta only
after the previous frame has been handed to the consumer, so it never holds
more than one delta ahead of the sink. Every stream ends with exactly one
terminal event, ``done`` on upstream exhaustion or ``error`` when the upstream
call raises. Timeouts are the token source's concern and arrive here as
ordinary upstream exceptions.

Two consumer styles are supported:

* ``relay_frames`` is an async generator suitable as a ``StreamingResponse``
  body. When the HTTP client disconnects, Starlette stops iterating and the
  generator's cleanup closes the upstream iterator.
* ``StreamRelay.run`` pushes frames into a ``FrameSink``. A failing
  ``send`` raises ``TransportError`` after the upstream pull is closed.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from typing import Protocol

from schemas.streaming import StreamEvent
from services.streaming.exceptions import GenerationError, TransportError
from services.streaming.frame_codec import encode_event


logger = logging.getLogger(__name__)


class FrameSink(Protocol):
    """Downstream consumer of encoded frames."""

    async def send(self, frame: str) -> None:
        """Deliver one frame; raise if the consumer is gone."""
        ...

    async def aclose(self) -> None:
        """Signal that no more frames will be sent."""
        ...


def describe_failure(exc: BaseException) -> str:
    """Render an upstream failure as the text carried by an error frame."""
    if isinstance(exc, GenerationError):
        return exc.message
    text = str(exc).strip()
    return text or exc.__class__.__name__


async def _close_upstream(tokens: AsyncIterator[str]) -> None:
    aclose = getattr(tokens, "aclose", None)
    if aclose is not None:
        await aclose()


async def relay_events(tokens: AsyncIterator[str]) -> AsyncGenerator[StreamEvent, None]:
    """Yield one delta event per upstream delta, then one terminal event."""
    try:
        async for delta in tokens:
            yield StreamEvent.delta(delta)
    except Exception as exc:
        logger.warning("Upstream generation failed: %s", exc, exc_info=True)
        yield StreamEvent.error(describe_failure(exc))
        return
    finally:
        await _close_upstream(tokens)
    yield StreamEvent.done()


async def relay_frames(tokens: AsyncIterator[str]) -> AsyncGenerator[str, None]:
    """Encoded form of ``relay_events``, one wire frame per event."""
    events = relay_events(tokens)
    try:
        async for event in events:
            yield encode_event(event)
    finally:
        await events.aclose()


class StreamRelay:
    """Push-style relay writing frames into a FrameSink."""

    async def run(self, tokens: AsyncIterator[str], sink: FrameSink) -> StreamEvent:
        """Relay ``tokens`` into ``sink`` and return the terminal event.

        Raises:
            TransportError: the sink rejected a frame (consumer disconnected).
                The upstream iterator is closed before this propagates.
        """
        events = relay_events(tokens)
        terminal: StreamEvent | None = None
        try:
            async for event in events:
                try:
                    await sink.send(encode_event(event))
                except Exception as exc:
                    logger.info("Downstream consumer went away: %s", exc)
                    raise TransportError(
                        f"Downstream consumer disconnected: {describe_failure(exc)}"
                    ) from exc
                if event.is_terminal:
                    terminal = event
        finally:
            await events.aclose()
            await sink.aclose()
        # relay_events always ends with exactly one terminal event
        assert terminal is not None
        return terminal
