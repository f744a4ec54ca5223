"""Display name for a Flowise connection."""

import logging
from typing import Optional

from chatflow.endpoint import resolve_endpoint
from chatflow.transport import HttpRequest, Transport

logger = logging.getLogger(__name__)

DEFAULT_CONNECTION_NAME = "Flowise Connection"
PING_PATH = "/api/v1/ping"


async def get_connection_name(
    transport: Transport,
    endpoint: Optional[str],
    default_endpoint: str,
) -> str:
    """
    Ping the deployment and return its message as a label.

    Purely cosmetic: every failure, including a bad endpoint, falls back to
    ``DEFAULT_CONNECTION_NAME``.
    """
    try:
        resolved = resolve_endpoint(endpoint, default_endpoint)
        body = await transport.fetch(
            HttpRequest(method="GET", url=resolved.url(PING_PATH))
        )
    except Exception as exc:
        logger.debug("Connection ping to %s failed: %s", endpoint or default_endpoint, exc)
        return DEFAULT_CONNECTION_NAME

    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return DEFAULT_CONNECTION_NAME
