"""Chatflow prediction executor.

    resolve endpoint -> build request -> dispatch -> validate body

Any failure along the way is classified into an ``ApiError`` and raised.
Nothing is retried here; retry policy belongs to the caller.
"""

import logging
from typing import Optional

from chatflow.config import ChatflowSettings
from chatflow.endpoint import resolve_endpoint
from chatflow.errors import classify_error
from chatflow.request_builder import PredictionRequest, ResponseFormat, build_request
from chatflow.response_validator import extract_text
from chatflow.spans import ChatflowSpanContext
from chatflow.transport import Transport

logger = logging.getLogger(__name__)


class ChatflowExecutor:
    """Runs chatflow predictions over an injected transport."""

    def __init__(self, transport: Transport, settings: Optional[ChatflowSettings] = None):
        self.transport = transport
        self.settings = settings or ChatflowSettings()

    async def predict(
        self,
        chatflow_id: str,
        question: str,
        endpoint_override: Optional[str] = None,
        response_format: Optional[ResponseFormat] = None,
    ) -> str:
        """
        Ask *question* to a chatflow and return the answer text.

        Args:
            chatflow_id: Chatflow ID, used verbatim in the URL
            question: Question text, used verbatim in the body
            endpoint_override: Base URL replacing the configured endpoint
            response_format: Overrides the configured response format

        Raises:
            ApiError: On any failure, already classified for display
        """
        return await self._execute(
            PredictionRequest(
                chatflow_id=chatflow_id,
                question=question,
                streaming=False,
                response_format=response_format or self.settings.response_format,
            ),
            endpoint_override,
        )

    async def predict_streaming(
        self,
        chatflow_id: str,
        question: str,
        endpoint_override: Optional[str] = None,
        response_format: Optional[ResponseFormat] = None,
    ) -> str:
        """Streaming variant of ``predict``; the answer is returned whole."""
        return await self._execute(
            PredictionRequest(
                chatflow_id=chatflow_id,
                question=question,
                streaming=True,
                response_format=response_format or self.settings.response_format,
            ),
            endpoint_override,
        )

    async def _execute(
        self,
        prediction: PredictionRequest,
        endpoint_override: Optional[str],
    ) -> str:
        # An empty per-call override counts as unset
        endpoint_override = endpoint_override or self.settings.endpoint_override

        with ChatflowSpanContext(prediction.chatflow_id, prediction.streaming) as span:
            try:
                endpoint = resolve_endpoint(endpoint_override, self.settings.default_endpoint)
                request = build_request(endpoint, prediction, self.settings.stream_mode)
                span.set_endpoint(request.url)

                body = await self.transport.fetch(request)
                text = extract_text(body)
            except Exception as e:
                error = classify_error(e)
                logger.warning(
                    "Chatflow %s prediction failed: %s (%s)",
                    prediction.chatflow_id,
                    error.kind.value,
                    error.message,
                    extra={"chatflow_attributes": {
                        "flowise.chatflow.id": prediction.chatflow_id,
                        "flowise.streaming": prediction.streaming,
                        "flowise.error.kind": error.kind.value,
                    }},
                )
                if error is e:
                    raise
                raise error from e

            span.record_answer(text)

        logger.info(
            "Chatflow %s answered in %.1f ms (streaming=%s)",
            prediction.chatflow_id,
            span.latency_ms,
            prediction.streaming,
            extra={"chatflow_attributes": {
                "flowise.chatflow.id": prediction.chatflow_id,
                "flowise.streaming": prediction.streaming,
                "flowise.endpoint": endpoint.base_url,
                "flowise.latency_ms": round(span.latency_ms, 1),
            }},
        )
        return text
