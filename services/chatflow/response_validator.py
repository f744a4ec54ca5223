"""Success checks for a decoded prediction body."""

from typing import Any

from chatflow.errors import MalformedResponseError, UpstreamError


def extract_text(body: Any) -> str:
    """
    Return the answer text from a 2xx prediction body.

    An embedded ``error`` wins over any ``text`` that came with it.

    Raises:
        UpstreamError: If the body carries a non-empty ``error``
        MalformedResponseError: If ``text`` is missing, empty or not a string
    """
    if not isinstance(body, dict):
        raise MalformedResponseError()

    error = body.get("error")
    if error:
        raise UpstreamError(str(error))

    text = body.get("text")
    if not text or not isinstance(text, str):
        raise MalformedResponseError()

    return text
