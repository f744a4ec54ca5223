"""Flowise chatflow client.

Usage:
    from chatflow import ChatflowExecutor, ChatflowSettings, HttpxTransport

    settings = ChatflowSettings.from_env()
    async with HttpxTransport(api_key=settings.api_key) as transport:
        executor = ChatflowExecutor(transport, settings)
        answer = await executor.predict("<chatflow-id>", "What is Flowise?")
"""

from chatflow.config import ChatflowSettings
from chatflow.errors import ApiError, ApiErrorKind, classify_error
from chatflow.executor import ChatflowExecutor
from chatflow.transport import HttpRequest, HttpxTransport, Transport, TransportError

__all__ = [
    "ApiError",
    "ApiErrorKind",
    "ChatflowExecutor",
    "ChatflowSettings",
    "HttpRequest",
    "HttpxTransport",
    "Transport",
    "TransportError",
    "classify_error",
]
