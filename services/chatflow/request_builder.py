"""Builds the HTTP request for a chatflow prediction."""

from dataclasses import dataclass
from enum import Enum

from chatflow.endpoint import Endpoint
from chatflow.transport import HttpRequest

PREDICTION_PATH = "/api/v1/prediction/{chatflow_id}"
STREAM_SUFFIX = "/stream"


class ResponseFormat(Enum):
    PLAIN = "plain"
    MARKDOWN = "markdown"


class StreamMode(Enum):
    """How the streaming variant is signalled to the server."""
    PATH = "path"  # POST .../prediction/{id}/stream
    FLAG = "flag"  # POST .../prediction/{id} with {"streaming": true}


@dataclass(frozen=True)
class PredictionRequest:
    """One question for one chatflow."""
    chatflow_id: str
    question: str
    streaming: bool = False
    response_format: ResponseFormat = ResponseFormat.PLAIN


def build_request(
    endpoint: Endpoint,
    prediction: PredictionRequest,
    stream_mode: StreamMode = StreamMode.PATH,
) -> HttpRequest:
    """
    Assemble the POST for a prediction.

    The chatflow ID and question are used verbatim; callers own their
    validity.
    """
    path = PREDICTION_PATH.format(chatflow_id=prediction.chatflow_id)
    body = {"question": prediction.question}

    if prediction.response_format is ResponseFormat.MARKDOWN:
        body["responseFormat"] = ResponseFormat.MARKDOWN.value

    if prediction.streaming:
        if stream_mode is StreamMode.FLAG:
            body["streaming"] = True
        else:
            path += STREAM_SUFFIX

    return HttpRequest(
        method="POST",
        url=endpoint.url(path),
        headers={"Content-Type": "application/json"},
        json=body,
    )
