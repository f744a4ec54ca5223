"""Deployment configuration for the chatflow client."""

import json
import os
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from chatflow.request_builder import ResponseFormat, StreamMode

DEFAULT_DEPLOYMENTS = {
    "public": "https://api.flowiseai.com",
    "self-hosted": "https://flowise.revou.tech",
}
DEFAULT_ALLOWED_DOMAINS = ("flowiseai.com", "flowise.revou.tech")


@dataclass
class ChatflowSettings:
    """Settings for one deployment of the chatflow client."""
    default_endpoint: str = DEFAULT_DEPLOYMENTS["public"]
    endpoint_override: Optional[str] = None
    api_key: Optional[str] = None
    timeout_ms: int = 60000
    stream_mode: StreamMode = StreamMode.PATH
    response_format: ResponseFormat = ResponseFormat.PLAIN
    allowed_domains: Tuple[str, ...] = field(default=DEFAULT_ALLOWED_DOMAINS)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "ChatflowSettings":
        """
        Build settings from ``FLOWISE_*`` environment variables.

        Raises:
            ValueError: On an unknown deployment name, a malformed deployment
                table, or an unknown stream mode / response format
        """
        env = os.environ if environ is None else environ

        deployments = _parse_deployments(env.get("FLOWISE_DEPLOYMENTS"))
        deployment = env.get("FLOWISE_DEPLOYMENT", "public")
        if deployment not in deployments:
            raise ValueError(
                f"Unknown FLOWISE_DEPLOYMENT {deployment!r}; "
                f"expected one of {sorted(deployments)}"
            )

        domains = env.get("FLOWISE_ALLOWED_DOMAINS")
        allowed = (
            tuple(d.strip() for d in domains.split(",") if d.strip())
            if domains is not None
            else DEFAULT_ALLOWED_DOMAINS
        )

        return cls(
            default_endpoint=deployments[deployment],
            endpoint_override=env.get("FLOWISE_ENDPOINT") or None,
            api_key=env.get("FLOWISE_API_KEY") or None,
            timeout_ms=int(env.get("FLOWISE_TIMEOUT_MS", "60000")),
            stream_mode=StreamMode(env.get("FLOWISE_STREAM_MODE", "path").lower()),
            response_format=ResponseFormat(env.get("FLOWISE_RESPONSE_FORMAT", "plain").lower()),
            allowed_domains=allowed,
        )


def _parse_deployments(raw: Optional[str]) -> Dict[str, str]:
    """Parse the deployment table: {"name": "https://base-url", ...}."""
    if not raw:
        return dict(DEFAULT_DEPLOYMENTS)

    try:
        table = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"FLOWISE_DEPLOYMENTS is not valid JSON: {e}") from e

    if not isinstance(table, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in table.items()
    ):
        raise ValueError("FLOWISE_DEPLOYMENTS must map deployment names to base URLs")
    return table
