"""Wire codec for the generation event stream.

Each event is one ``data: <json>`` line followed by a blank line::

    data: {"choices": [{"delta": {"content": "<text>"}}]}
    data: {"error": "<message>"}
    data: [DONE]

The decoder is resumable: ``decode`` takes the undecoded remainder of the
previous call and returns a new one, so a chunk may split a frame anywhere,
including inside a multi-byte UTF-8 sequence. Lines are only decoded once
their ``\\n`` terminator has arrived. The newline byte never occurs inside a
multi-byte UTF-8 sequence, which makes splitting the raw bytes safe.

Anything that is not a recognised frame (keep-alive comments, blank lines,
proxy noise, undecodable JSON) is dropped and never pushed back onto the
buffer.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from schemas.streaming import EventKind, StreamEvent


logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"
COMMENT_PREFIX = ":"
FRAME_TERMINATOR = "\n\n"


def encode_delta(text: str) -> str:
    payload = {"choices": [{"delta": {"content": text}}]}
    return f"{DATA_PREFIX} {json.dumps(payload, ensure_ascii=False)}{FRAME_TERMINATOR}"


def encode_error(message: str) -> str:
    payload = {"error": message}
    return f"{DATA_PREFIX} {json.dumps(payload, ensure_ascii=False)}{FRAME_TERMINATOR}"


def encode_done() -> str:
    return f"{DATA_PREFIX} {DONE_SENTINEL}{FRAME_TERMINATOR}"


def encode_event(event: StreamEvent) -> str:
    """Serialize a StreamEvent into exactly one wire frame."""
    if event.kind is EventKind.DELTA:
        return encode_delta(event.payload)
    if event.kind is EventKind.ERROR:
        return encode_error(event.payload)
    return encode_done()


def decode(chunk: bytes, remainder: bytes = b"") -> tuple[list[StreamEvent], bytes]:
    """Decode every complete line of ``remainder + chunk``.

    Returns the events in arrival order and the unterminated tail, which the
    caller passes back in on the next call.
    """
    buffer = remainder + chunk
    *lines, new_remainder = buffer.split(b"\n")
    events: list[StreamEvent] = []
    for raw_line in lines:
        event = decode_line(raw_line)
        if event is not None:
            events.append(event)
    return events, new_remainder


def decode_line(raw_line: bytes) -> StreamEvent | None:
    """Decode a single complete line; return None for non-event lines."""
    line = raw_line.decode("utf-8", errors="replace")
    if line.endswith("\r"):
        line = line[:-1]
    if not line.strip() or line.startswith(COMMENT_PREFIX):
        return None
    if not line.startswith(DATA_PREFIX):
        logger.debug("Discarding non-data line (%d chars)", len(line))
        return None

    data = line[len(DATA_PREFIX) :].strip()
    if data == DONE_SENTINEL:
        return StreamEvent.done()

    try:
        payload = json.loads(data)
    except json.JSONDecodeError as exc:
        logger.debug("Discarding data line with invalid JSON: %s", exc)
        return None
    return _event_from_payload(payload)


def _event_from_payload(payload: Any) -> StreamEvent | None:
    if not isinstance(payload, dict):
        logger.debug("Discarding data line with non-object payload")
        return None

    if "error" in payload:
        return StreamEvent.error(_error_text(payload["error"]))

    try:
        content = payload["choices"][0]["delta"]["content"]
    except (KeyError, IndexError, TypeError):
        logger.debug("Discarding data line without delta content")
        return None
    if not isinstance(content, str):
        return None
    return StreamEvent.delta(content)


def _error_text(error: Any) -> str:
    # Providers send either a bare string or an object with a message field
    if isinstance(error, str):
        return error
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return json.dumps(error)


class FrameDecoder:
    """Stateful decoder that carries the line remainder between chunks."""

    def __init__(self) -> None:
        self._remainder = b""

    @property
    def remainder(self) -> bytes:
        return self._remainder

    def feed(self, chunk: bytes) -> list[StreamEvent]:
        events, self._remainder = decode(chunk, self._remainder)
        return events
