"""Network domains the transport is permitted to reach."""

from typing import Iterable
from urllib.parse import urlparse


class NetworkAllowList:
    """A host is allowed when it equals a listed domain or is a subdomain of one."""

    def __init__(self, domains: Iterable[str]):
        self.domains = tuple(d.strip().lower().lstrip(".") for d in domains if d.strip())

    def allows_host(self, host: str) -> bool:
        host = host.lower().rstrip(".")
        return any(host == d or host.endswith("." + d) for d in self.domains)

    def allows_url(self, url: str) -> bool:
        host = urlparse(url).hostname
        return bool(host) and self.allows_host(host)

    def __bool__(self) -> bool:
        return bool(self.domains)
