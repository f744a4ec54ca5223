"""Shared fixtures for the chatflow test suite."""

import os
import sys
from pathlib import Path
from typing import Any, List, Optional

import pytest

# Add services/ to sys.path so imports work like they do in Docker
SERVICES_DIR = Path(__file__).resolve().parent.parent
if str(SERVICES_DIR) not in sys.path:
    sys.path.insert(0, str(SERVICES_DIR))

# No OTLP collector in tests
os.environ.setdefault("TELEMETRY_ENABLED", "false")

from chatflow.config import ChatflowSettings  # noqa: E402
from chatflow.transport import HttpRequest  # noqa: E402


class FakeTransport:
    """Records requests and replays a canned body or raises a canned error."""

    def __init__(self, body: Any = None, error: Optional[BaseException] = None):
        self.body = body
        self.error = error
        self.requests: List[HttpRequest] = []

    async def fetch(self, request: HttpRequest) -> Any:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.body

    @property
    def last_request(self) -> HttpRequest:
        return self.requests[-1]


@pytest.fixture
def settings() -> ChatflowSettings:
    return ChatflowSettings(default_endpoint="https://api.flowiseai.com")


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport(body={"text": "42"})
