"""Pydantic models for the formula host's request/response bodies."""

from pydantic import BaseModel, Field
from typing import Optional

from chatflow.request_builder import ResponseFormat


class FormulaRequest(BaseModel):
    """Parameters of AskFlowise / AskFlowiseStream."""
    chatflow_id: str = Field(alias="chatflowId")
    question: str
    endpoint: Optional[str] = None
    response_format: Optional[ResponseFormat] = Field(default=None, alias="responseFormat")

    model_config = {"populate_by_name": True}


class FormulaResponse(BaseModel):
    """Formula result."""
    result: str
    latency_ms: float
    correlation_id: str


class FormulaError(BaseModel):
    """Error body; ``error`` is shown to the user as-is."""
    error: str
    kind: str
    correlation_id: str


class ConnectionName(BaseModel):
    name: str
