"""Endpoint resolution for the Flowise deployment serving a chatflow."""

from dataclasses import dataclass
from typing import Optional

from chatflow.errors import InvalidEndpointError

ALLOWED_SCHEMES = ("http://", "https://")


@dataclass(frozen=True)
class Endpoint:
    """Validated base URL: http(s) scheme, no trailing slash."""
    base_url: str

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def __str__(self) -> str:
        return self.base_url


def resolve_endpoint(override: Optional[str], default: str) -> Endpoint:
    """
    Pick the override when it is set, otherwise the deployment default.

    Exactly one trailing ``/`` is stripped; the rest of the string is kept
    byte for byte.

    Raises:
        InvalidEndpointError: If the result is not an http(s) URL
    """
    base_url = override or default
    if base_url.endswith("/"):
        base_url = base_url[:-1]

    if not base_url.startswith(ALLOWED_SCHEMES):
        raise InvalidEndpointError()

    return Endpoint(base_url)
