"""Structured JSON logging with trace correlation.

Every record is emitted as one JSON object carrying the current
OpenTelemetry ``trace_id``/``span_id``, so formula calls can be followed
from the host log into the chatflow spans. Chatflow fields travel as
``extra={"chatflow_attributes": {...}}`` and are merged into the line.
"""

import logging
import json
from opentelemetry import trace
from datetime import datetime, timezone
from typing import Any, Dict

ATTRIBUTES_KEY = "chatflow_attributes"


def _trace_fields() -> Dict[str, str]:
    ctx = trace.get_current_span().get_span_context()
    if not ctx.is_valid:
        return {}
    return {
        "trace_id": format(ctx.trace_id, "032x"),
        "span_id": format(ctx.span_id, "016x"),
    }


class OTelJSONFormatter(logging.Formatter):
    """One JSON object per record, tagged with service and team."""

    def __init__(self, service_name: str, team: str):
        super().__init__()
        self.service_name = service_name
        self.team = team

    def format(self, record: logging.LogRecord) -> str:
        line: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "severity": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "service.name": self.service_name,
            "lab.team": self.team,
            **_trace_fields(),
        }
        line.update(getattr(record, ATTRIBUTES_KEY, None) or {})

        if record.exc_info and record.exc_info[0] is not None:
            line["error.type"] = record.exc_info[0].__name__
            line["error.message"] = str(record.exc_info[1])

        return json.dumps(line, default=str)


def configure_logging(service_name: str, team: str, level: str = "INFO"):
    """Install the JSON handler as the root logger's only handler."""
    handler = logging.StreamHandler()
    handler.setFormatter(OTelJSONFormatter(service_name, team))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    return root
