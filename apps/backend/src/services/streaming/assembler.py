"""Client-side assembly of a blueprint from a framed token stream.

``BlueprintAssembler.feed`` accepts raw transport bytes in whatever chunks they
arrive, decodes complete frames and accumulates the delta text. ``finish``
turns the accumulated text into exactly one JSON object using a bounded,
ordered extraction pipeline:

1. slice from the first ``{`` to the last ``}``; a Markdown code fence
   around the object lies outside that span and falls away with the slice
2. strict ``json.loads``
3. one repair pass escaping raw CR/LF inside string literals, then a
   single strict retry
4. otherwise fail with ``MalformedArtifact`` carrying the strict-parse error

No other heuristics are attempted. The parsed object is returned as-is; its
schema is the model's responsibility.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from schemas.streaming import EventKind, StreamEvent
from services.streaming.exceptions import (
    InvalidState,
    MalformedArtifact,
    NoArtifactFound,
    TransportError,
    UpstreamError,
)
from services.streaming.frame_codec import FrameDecoder


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AssemblyBuffer:
    """Per-attempt state; never shared between attempts."""

    raw_accumulated: list[str] = field(default_factory=list)
    error_payload: str | None = None
    done_seen: bool = False

    @property
    def text(self) -> str:
        return "".join(self.raw_accumulated)

    @property
    def terminated(self) -> bool:
        return self.done_seen or self.error_payload is not None


def locate_object(text: str) -> tuple[int, int]:
    """Return ``(start, end)`` of the first ``{`` and last ``}`` (inclusive end).

    Raises:
        NoArtifactFound: no brace pair is present.
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise NoArtifactFound()
    return start, end


def escape_newlines_in_strings(candidate: str) -> str:
    """Escape raw CR/LF characters that appear inside JSON string literals.

    Walks the text once, tracking whether the cursor is inside a double-quoted
    literal and whether the previous character was an escaping backslash.
    Everything outside string literals, and every other character inside
    them, is left untouched.
    """
    out: list[str] = []
    in_string = False
    escaped = False
    for ch in candidate:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            elif ch == "\n":
                out.append("\\n")
                continue
            elif ch == "\r":
                out.append("\\r")
                continue
        elif ch == '"':
            in_string = True
        out.append(ch)
    return "".join(out)


def extract_artifact(text: str) -> dict[str, Any]:
    """Run the bounded extraction pipeline over accumulated text."""
    start, end = locate_object(text)
    # Any surrounding prose or code fence is outside the braces
    candidate = text[start : end + 1]

    try:
        value = json.loads(candidate)
    except json.JSONDecodeError as strict_error:
        repaired = escape_newlines_in_strings(candidate)
        try:
            value = json.loads(repaired)
        except json.JSONDecodeError:
            raise MalformedArtifact(
                f"Failed to parse AI response: {strict_error}"
            ) from strict_error
        logger.info("Blueprint JSON parsed after newline repair")

    if not isinstance(value, dict):
        raise MalformedArtifact("Failed to parse AI response: top-level value is not an object")
    return value


class BlueprintAssembler:
    """Accumulates one generation stream and parses the final blueprint.

    One instance per attempt. ``finish`` may be called exactly once.
    """

    def __init__(self) -> None:
        self._decoder = FrameDecoder()
        self._buffer: AssemblyBuffer | None = AssemblyBuffer()
        self._finished = False

    @property
    def raw_text(self) -> str:
        """Text accumulated so far (for progress display)."""
        return self._buffer.text if self._buffer is not None else ""

    @property
    def terminated(self) -> bool:
        return self._buffer is not None and self._buffer.terminated

    def feed(self, raw_chunk: bytes) -> list[StreamEvent]:
        """Decode ``raw_chunk`` and apply complete frames to the buffer.

        Returns the decoded events so callers can report progress.
        """
        if self._buffer is None:
            raise InvalidState("feed() called after finish()")
        events = self._decoder.feed(raw_chunk)
        for event in events:
            self._apply(self._buffer, event)
        return events

    def _apply(self, buffer: AssemblyBuffer, event: StreamEvent) -> None:
        # An error frame always poisons the attempt; the first one is kept.
        if event.kind is EventKind.ERROR:
            if buffer.error_payload is None:
                buffer.error_payload = event.payload
            return
        if buffer.terminated:
            logger.debug("Ignoring %s frame received after terminal frame", event.kind)
            return
        if event.kind is EventKind.DELTA:
            buffer.raw_accumulated.append(event.payload)
        else:
            buffer.done_seen = True

    def finish(self) -> dict[str, Any]:
        """Classify the stream outcome and return the parsed blueprint.

        Raises:
            UpstreamError: an error frame was received.
            TransportError: the stream ended without ``[DONE]`` or an error frame.
            NoArtifactFound: no ``{...}`` span in the accumulated text.
            MalformedArtifact: the span is not valid JSON even after repair.
            InvalidState: ``finish`` was already called.
        """
        if self._finished or self._buffer is None:
            raise InvalidState("finish() called more than once")
        self._finished = True
        buffer, self._buffer = self._buffer, None

        if buffer.error_payload is not None:
            raise UpstreamError(buffer.error_payload)
        if not buffer.done_seen:
            raise TransportError("Stream ended without a terminal signal")
        return extract_artifact(buffer.text)
