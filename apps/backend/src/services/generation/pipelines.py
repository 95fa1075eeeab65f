"""In-process generation pipeline: token source -> relay -> assembler."""

from __future__ import annotations

import logging

from services.generation.interfaces import TokenSource
from services.streaming.assembler import BlueprintAssembler
from services.streaming.relay import StreamRelay


logger = logging.getLogger(__name__)


class AssemblerSink:
    """FrameSink that hands each encoded frame to an assembler as bytes."""

    def __init__(self, assembler: BlueprintAssembler) -> None:
        self._assembler = assembler
        self.frames_sent = 0

    async def send(self, frame: str) -> None:
        self._assembler.feed(frame.encode("utf-8"))
        self.frames_sent += 1

    async def aclose(self) -> None:
        logger.debug("Assembler sink closed after %d frames", self.frames_sent)


class RelayPipeline:
    """Runs the relay in the same process as the controller."""

    def __init__(self, token_source: TokenSource, relay: StreamRelay | None = None) -> None:
        self._token_source = token_source
        self._relay = relay or StreamRelay()

    async def run(self, source_text: str, assembler: BlueprintAssembler) -> None:
        terminal = await self._relay.run(
            self._token_source.stream(source_text), AssemblerSink(assembler)
        )
        logger.debug("Relay finished with %s event", terminal.kind)
