"""Tests for JSON logging and chatflow spans."""

import json
import logging
import sys

import pytest

from chatflow.errors import NotFoundError
from chatflow.logging_config import OTelJSONFormatter
from chatflow.spans import ChatflowSpanContext


def make_record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("chatflow.executor", logging.INFO, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_emits_json():
    formatter = OTelJSONFormatter("formula-api", "chatflow")
    line = formatter.format(
        make_record("answered", chatflow_attributes={"flowise.chatflow.id": "flow-1"})
    )
    data = json.loads(line)

    assert data["message"] == "answered"
    assert data["severity"] == "INFO"
    assert data["service.name"] == "formula-api"
    assert data["lab.team"] == "chatflow"
    assert data["flowise.chatflow.id"] == "flow-1"
    assert data["timestamp"].endswith("Z")


def test_formatter_includes_exception_info():
    formatter = OTelJSONFormatter("formula-api", "chatflow")
    try:
        raise NotFoundError()
    except NotFoundError:
        record = make_record("failed")
        record.exc_info = sys.exc_info()

    data = json.loads(formatter.format(record))
    assert data["error.type"] == "NotFoundError"
    assert data["error.message"] == "Chatflow not found. Please check your chatflow ID."


class RecordingSpan:
    def __init__(self, name):
        self.name = name
        self.attributes = {}
        self.ended = False

    def set_attribute(self, key, value):
        self.attributes[key] = value

    def end(self):
        self.ended = True


class RecordingTracer:
    def __init__(self):
        self.spans = []

    def start_span(self, name):
        span = RecordingSpan(name)
        self.spans.append(span)
        return span


def test_span_records_success():
    tracer = RecordingTracer()

    with ChatflowSpanContext("flow-1", streaming=True, tracer=tracer) as ctx:
        ctx.set_endpoint("https://api.flowiseai.com/api/v1/prediction/flow-1/stream")
        ctx.record_answer("42")

    span = tracer.spans[0]
    assert span.name == "chatflow.predict_streaming"
    assert span.ended
    assert span.attributes["genai.system"] == "flowise"
    assert span.attributes["flowise.streaming"] is True
    assert span.attributes["flowise.answer.chars"] == 2
    assert ctx.latency_ms is not None


def test_span_records_error_kind():
    tracer = RecordingTracer()

    with pytest.raises(NotFoundError):
        with ChatflowSpanContext("flow-1", tracer=tracer):
            raise NotFoundError()

    span = tracer.spans[0]
    assert span.name == "chatflow.predict"
    assert span.attributes["error.type"] == "NotFoundError"
    assert span.attributes["flowise.error.kind"] == "not_found"
    assert span.ended


def test_span_uses_module_tracer_by_default():
    with ChatflowSpanContext("flow-1") as ctx:
        ctx.record_answer("42")

    assert ctx.span is not None
    assert ctx.latency_ms is not None
