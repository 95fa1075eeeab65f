"""Streaming pipeline: frame codec, relay and blueprint assembler."""

from .assembler import BlueprintAssembler, extract_artifact
from .frame_codec import FrameDecoder, decode, encode_event
from .relay import FrameSink, StreamRelay, relay_events, relay_frames


__all__ = [
    "BlueprintAssembler",
    "FrameDecoder",
    "FrameSink",
    "StreamRelay",
    "decode",
    "encode_event",
    "extract_artifact",
    "relay_events",
    "relay_frames",
]
