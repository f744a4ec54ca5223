"""GenAI span helpers for chatflow predictions.

Spans follow the GenAI semantic conventions plus a few ``flowise.*``
attributes describing the chatflow call.
"""

from opentelemetry import trace
from typing import Optional
import time

_tracer = trace.get_tracer("chatflow")


class ChatflowSpanContext:
    """Context manager for one chatflow prediction span with timing."""

    def __init__(
        self,
        chatflow_id: str,
        streaming: bool = False,
        span_name: Optional[str] = None,
        tracer=None,
    ):
        self.chatflow_id = chatflow_id
        self.streaming = streaming
        self.span_name = span_name or (
            "chatflow.predict_streaming" if streaming else "chatflow.predict"
        )
        self._tracer = tracer or _tracer
        self.span = None
        self.start_time = None
        self.latency_ms: Optional[float] = None

    def __enter__(self):
        self.span = self._tracer.start_span(self.span_name)
        self.start_time = time.perf_counter()

        self.span.set_attribute("genai.system", "flowise")
        self.span.set_attribute("genai.operation.name", "prediction")
        self.span.set_attribute("flowise.chatflow.id", self.chatflow_id)
        self.span.set_attribute("flowise.streaming", self.streaming)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.latency_ms = (time.perf_counter() - self.start_time) * 1000
        self.span.set_attribute("flowise.latency_ms", round(self.latency_ms, 1))
        if exc_type:
            self.span.set_attribute("error.type", exc_type.__name__)
            self.span.set_attribute("error.message", str(exc_val)[:200])
            kind = getattr(exc_val, "kind", None)
            if kind is not None:
                self.span.set_attribute("flowise.error.kind", kind.value)
        self.span.end()

    def set_endpoint(self, url: str):
        self.span.set_attribute("flowise.endpoint", url)

    def record_answer(self, text: str):
        self.span.set_attribute("flowise.answer.chars", len(text))
