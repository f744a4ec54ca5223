"""Health checks for the formula host."""

from enum import Enum
import asyncio
import time
from typing import Optional

from chatflow.config import ChatflowSettings
from chatflow.connection import PING_PATH
from chatflow.endpoint import resolve_endpoint
from chatflow.transport import HttpRequest, Transport


class ServiceState(Enum):
    STARTING = "starting"
    READY = "ready"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class HealthChecker:
    """Manages service health state."""

    PING_INTERVAL_SECONDS = 30

    def __init__(self, transport: Optional[Transport], settings: ChatflowSettings):
        self.state = ServiceState.STARTING
        self.transport = transport
        self.settings = settings
        self.last_ping: Optional[float] = None
        self.flowise_reachable: bool = False

    async def ping(self) -> bool:
        """Return True when the configured deployment answers its ping."""
        try:
            endpoint = resolve_endpoint(
                self.settings.endpoint_override, self.settings.default_endpoint
            )
            await self.transport.fetch(
                HttpRequest(method="GET", url=endpoint.url(PING_PATH))
            )
            return True
        except Exception:
            return False

    async def startup_check(self) -> bool:
        """
        Check if service startup is complete.
        Returns True when:
        - Configuration loaded
        - Transport initialized
        """
        if self.state == ServiceState.STARTING and self.transport is not None:
            self.state = ServiceState.READY
        return self.state != ServiceState.STARTING

    async def readiness_check(self) -> bool:
        """
        Check if service is ready to handle traffic.
        Returns True when:
        - Startup complete
        - Flowise deployment answered a ping in the last interval
        """
        if self.state in (ServiceState.STARTING, ServiceState.UNHEALTHY):
            return False

        now = time.time()
        if self.last_ping is None or (now - self.last_ping) > self.PING_INTERVAL_SECONDS:
            self.flowise_reachable = await self.ping()
            self.last_ping = now
            self.state = ServiceState.READY if self.flowise_reachable else ServiceState.DEGRADED

        return self.flowise_reachable

    async def liveness_check(self) -> bool:
        """Check if the event loop is responsive."""
        try:
            await asyncio.sleep(0)  # Yield to event loop
            return True
        except Exception:
            return False
