"""Tests for prediction request construction."""

from chatflow.endpoint import Endpoint
from chatflow.request_builder import (
    PredictionRequest,
    ResponseFormat,
    StreamMode,
    build_request,
)

ENDPOINT = Endpoint("https://flowise.example.com")


def test_sync_request():
    request = build_request(ENDPOINT, PredictionRequest("flow-1", "What is 6 x 7?"))

    assert request.method == "POST"
    assert request.url == "https://flowise.example.com/api/v1/prediction/flow-1"
    assert request.headers == {"Content-Type": "application/json"}
    assert request.json == {"question": "What is 6 x 7?"}


def test_streaming_uses_stream_path_by_default():
    request = build_request(
        ENDPOINT, PredictionRequest("flow-1", "hi", streaming=True)
    )

    assert request.url == "https://flowise.example.com/api/v1/prediction/flow-1/stream"
    assert "streaming" not in request.json


def test_streaming_with_body_flag():
    request = build_request(
        ENDPOINT,
        PredictionRequest("flow-1", "hi", streaming=True),
        stream_mode=StreamMode.FLAG,
    )

    assert request.url == "https://flowise.example.com/api/v1/prediction/flow-1"
    assert request.json == {"question": "hi", "streaming": True}


def test_flag_mode_does_not_affect_sync_requests():
    request = build_request(
        ENDPOINT, PredictionRequest("flow-1", "hi"), stream_mode=StreamMode.FLAG
    )
    assert request.json == {"question": "hi"}


def test_markdown_response_format():
    request = build_request(
        ENDPOINT,
        PredictionRequest("flow-1", "hi", response_format=ResponseFormat.MARKDOWN),
    )
    assert request.json == {"question": "hi", "responseFormat": "markdown"}


def test_values_are_passed_through_verbatim():
    """Empty and unusual values are not validated or escaped."""
    request = build_request(ENDPOINT, PredictionRequest("a b/{c}", ""))

    assert request.url == "https://flowise.example.com/api/v1/prediction/a b/{c}"
    assert request.json == {"question": ""}
