"""Error taxonomy for the blueprint generation pipeline.

Every failure carries a human readable ``message`` that is shown to the user
verbatim, and a stable ``error_code`` for logs and metrics tagging.

* ``AttemptFailure`` subclasses end a single generation attempt. The
  controller records ``status = error`` and surfaces the message; nothing is
  retried automatically.
* ``InvalidState`` signals misuse of the pipeline API (e.g. finishing an
  assembler twice). It is a programming error and is never converted into a
  record status.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class GenerationError(Exception):
    """Base class for generation pipeline errors."""

    message: str
    error_code: str

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.error_code}: {self.message}"


class AttemptFailure(GenerationError):
    """A terminal, user-visible failure of one generation attempt."""


class TransportError(AttemptFailure):
    def __init__(self, message: str = "Connection to the generation stream failed") -> None:
        super().__init__(message=message, error_code="transport_error")


class UpstreamError(AttemptFailure):
    def __init__(self, message: str = "The model provider reported an error") -> None:
        super().__init__(message=message, error_code="upstream_error")


class UpstreamTimeout(UpstreamError):
    def __init__(self, message: str = "Timed out waiting for the model provider") -> None:
        AttemptFailure.__init__(self, message=message, error_code="upstream_timeout")


class NoArtifactFound(AttemptFailure):
    def __init__(
        self, message: str = "No architectural blueprint found in AI response"
    ) -> None:
        super().__init__(message=message, error_code="no_artifact")


class MalformedArtifact(AttemptFailure):
    def __init__(self, message: str = "Failed to parse AI response") -> None:
        super().__init__(message=message, error_code="malformed_artifact")


class InvalidState(GenerationError):
    def __init__(self, message: str = "Invalid pipeline state") -> None:
        super().__init__(message=message, error_code="invalid_state")
