"""Generation lifecycle: controller, stores and pipelines."""

from .controller import GenerationController
from .models import (
    GenerationOutcome,
    GenerationRecord,
    GenerationStatus,
    GenerationUpdate,
)
from .pipelines import AssemblerSink, RelayPipeline


__all__ = [
    "AssemblerSink",
    "GenerationController",
    "GenerationOutcome",
    "GenerationRecord",
    "GenerationStatus",
    "GenerationUpdate",
    "RelayPipeline",
]
