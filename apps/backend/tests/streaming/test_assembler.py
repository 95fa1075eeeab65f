"""Tests for blueprint assembly and JSON extraction."""

from __future__ import annotations

import json

import pytest

from services.streaming.assembler import (
    BlueprintAssembler,
    escape_newlines_in_strings,
    extract_artifact,
)
from services.streaming.exceptions import (
    InvalidState,
    MalformedArtifact,
    NoArtifactFound,
    TransportError,
    UpstreamError,
)
from services.streaming.frame_codec import encode_delta, encode_done, encode_error


def _wire(*frames: str) -> bytes:
    return "".join(frames).encode("utf-8")


def _assemble(*frames: str) -> BlueprintAssembler:
    assembler = BlueprintAssembler()
    assembler.feed(_wire(*frames))
    return assembler


class TestExtractArtifact:
    def test_plain_object(self) -> None:
        assert extract_artifact('{"a": 1}') == {"a": 1}

    def test_prose_around_object(self) -> None:
        text = 'Here is your blueprint:\n{"a": {"b": [1, 2]}}\nGood luck!'
        assert extract_artifact(text) == {"a": {"b": [1, 2]}}

    def test_json_code_fence(self) -> None:
        assert extract_artifact('```json\n{"a": 1}\n```') == {"a": 1}

    def test_bare_code_fence(self) -> None:
        assert extract_artifact('```\n{"a": 1}\n```') == {"a": 1}

    def test_fence_inside_prose(self) -> None:
        text = 'Sure!\n```json\n{"a": "```"}\n```\nEnjoy.'
        assert extract_artifact(text) == {"a": "```"}

    def test_no_braces(self) -> None:
        with pytest.raises(NoArtifactFound) as exc_info:
            extract_artifact("I cannot help with that.")
        assert exc_info.value.message == "No architectural blueprint found in AI response"
        assert exc_info.value.error_code == "no_artifact"

    def test_closing_brace_before_opening(self) -> None:
        with pytest.raises(NoArtifactFound):
            extract_artifact("} oops {")

    def test_raw_newline_inside_string_is_repaired(self) -> None:
        broken = '{"folderStructure": "src/\n  main.py\r\n  util.py"}'
        escaped = '{"folderStructure": "src/\\n  main.py\\r\\n  util.py"}'
        assert extract_artifact(broken) == extract_artifact(escaped)
        assert extract_artifact(broken) == json.loads(escaped)

    def test_newlines_between_tokens_are_untouched(self) -> None:
        text = '{\n  "a": "x",\n  "b": "y"\n}'
        assert escape_newlines_in_strings(text) == text
        assert extract_artifact(text) == {"a": "x", "b": "y"}

    def test_repair_respects_escaped_quotes(self) -> None:
        text = '{"q": "say \\"hi\\"\nthere"}'
        assert extract_artifact(text) == {"q": 'say "hi"\nthere'}

    def test_unrepairable_reports_strict_error(self) -> None:
        with pytest.raises(MalformedArtifact) as exc_info:
            extract_artifact('{"a": 1,}')
        assert exc_info.value.message.startswith("Failed to parse AI response: ")
        assert exc_info.value.error_code == "malformed_artifact"

    def test_braces_spanning_two_objects_is_malformed(self) -> None:
        with pytest.raises(MalformedArtifact):
            extract_artifact('{"a": 1} and {"b": 2}')


class TestBlueprintAssembler:
    def test_success(self) -> None:
        assembler = _assemble(
            encode_delta('{"projectAnalysis": '),
            encode_delta('{"objective": "x"}}'),
            encode_done(),
        )
        assert assembler.terminated
        assert assembler.finish() == {"projectAnalysis": {"objective": "x"}}

    def test_raw_newline_split_across_deltas(self) -> None:
        assembler = _assemble(
            encode_delta('{"a":1,'), encode_delta('"b":"x\ny"}'), encode_done()
        )
        assert assembler.finish() == {"a": 1, "b": "x\ny"}

    def test_error_before_any_delta(self) -> None:
        assembler = _assemble(encode_error("rate limited"))
        with pytest.raises(UpstreamError) as exc_info:
            assembler.finish()
        assert exc_info.value.message == "rate limited"

    def test_chunking_does_not_change_result(self) -> None:
        data = _wire(
            encode_delta('{"name": "Café'),
            encode_delta(' ✓"}'),
            encode_done(),
        )
        whole = BlueprintAssembler()
        whole.feed(data)
        split = BlueprintAssembler()
        for i in range(0, len(data), 3):
            split.feed(data[i : i + 3])
        assert split.finish() == whole.finish() == {"name": "Café ✓"}

    def test_feed_returns_decoded_events(self) -> None:
        assembler = BlueprintAssembler()
        events = assembler.feed(_wire(encode_delta("{"), encode_delta("}")))
        assert [e.payload for e in events] == ["{", "}"]
        assert assembler.raw_text == "{}"
        assert not assembler.terminated

    def test_error_frame_raises_upstream_error(self) -> None:
        assembler = _assemble(encode_delta('{"a": 1}'), encode_error("rate limited"))
        with pytest.raises(UpstreamError) as exc_info:
            assembler.finish()
        assert exc_info.value.message == "rate limited"

    def test_error_wins_over_done(self) -> None:
        assembler = _assemble(
            encode_delta('{"a": 1}'), encode_done(), encode_error("late failure")
        )
        with pytest.raises(UpstreamError, match="late failure"):
            assembler.finish()

    def test_first_error_is_kept(self) -> None:
        assembler = _assemble(encode_error("first"), encode_error("second"))
        with pytest.raises(UpstreamError) as exc_info:
            assembler.finish()
        assert exc_info.value.message == "first"

    def test_error_even_when_text_parses(self) -> None:
        assembler = _assemble(encode_delta('{"complete": true}'), encode_error("x"))
        with pytest.raises(UpstreamError):
            assembler.finish()

    def test_deltas_after_done_are_ignored(self) -> None:
        assembler = _assemble(
            encode_delta('{"a": 1}'), encode_done(), encode_delta("garbage}")
        )
        assert assembler.finish() == {"a": 1}

    def test_stream_without_terminal_is_transport_error(self) -> None:
        assembler = _assemble(encode_delta('{"a": 1}'))
        with pytest.raises(TransportError) as exc_info:
            assembler.finish()
        assert exc_info.value.error_code == "transport_error"

    def test_done_with_no_json(self) -> None:
        assembler = _assemble(encode_delta("Sorry, no."), encode_done())
        with pytest.raises(NoArtifactFound):
            assembler.finish()

    def test_done_with_fenced_multiline_json(self) -> None:
        assembler = _assemble(
            encode_delta("```json\n"),
            encode_delta('{"folderStructure": "a/\n  b.py"}'),
            encode_delta("\n```"),
            encode_done(),
        )
        assert assembler.finish() == {"folderStructure": "a/\n  b.py"}

    def test_finish_twice(self) -> None:
        assembler = _assemble(encode_delta("{}"), encode_done())
        assert assembler.finish() == {}
        with pytest.raises(InvalidState):
            assembler.finish()

    def test_finish_twice_after_failure(self) -> None:
        assembler = _assemble(encode_error("x"))
        with pytest.raises(UpstreamError):
            assembler.finish()
        with pytest.raises(InvalidState):
            assembler.finish()

    def test_feed_after_finish(self) -> None:
        assembler = _assemble(encode_delta("{}"), encode_done())
        assembler.finish()
        with pytest.raises(InvalidState):
            assembler.feed(b"data: [DONE]\n\n")
        assert assembler.raw_text == ""
