"""Tracing helpers built on the OpenTelemetry API.

Generation attempts are wrapped in spans so a slow or failing upstream call
can be located in a trace. Without a configured SDK the API hands out
non-recording spans, so instrumented code runs unchanged in tests.

PII guidance:
- NEVER put the user's project idea or the generated blueprint in span
  attributes or span names
- Use record ids and statuses instead
"""

from __future__ import annotations

from opentelemetry import trace


def get_tracer(name: str) -> trace.Tracer:
    """Get an OpenTelemetry tracer for custom instrumentation.

    Args:
        name: The name of the tracer, typically __name__ of the calling module.

    Example:
        tracer = get_tracer(__name__)

        with tracer.start_as_current_span("generation.attempt") as span:
            span.set_attribute("project.id", str(record_id))
    """
    return trace.get_tracer(name)
