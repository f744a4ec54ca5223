"""Formula API - hosts the AskFlowise / AskFlowiseStream formulas."""

import logging
import os
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, HTTPException, Header
from fastapi.responses import JSONResponse

from chatflow.allowlist import NetworkAllowList
from chatflow.config import ChatflowSettings
from chatflow.connection import get_connection_name
from chatflow.errors import ApiError, ApiErrorKind
from chatflow.executor import ChatflowExecutor
from chatflow.health import HealthChecker
from chatflow.models import ConnectionName, FormulaError, FormulaRequest, FormulaResponse
from chatflow.telemetry import create_span, setup_telemetry
from chatflow.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)

SERVICE_NAME = "formula-api"

ERROR_STATUS = {
    ApiErrorKind.INVALID_ENDPOINT: 400,
    ApiErrorKind.AUTHENTICATION_FAILED: 401,
    ApiErrorKind.FORBIDDEN: 403,
    ApiErrorKind.NOT_FOUND: 404,
    ApiErrorKind.RATE_LIMITED: 429,
    ApiErrorKind.SERVER_ERROR: 502,
    ApiErrorKind.UPSTREAM_ERROR: 502,
    ApiErrorKind.MALFORMED_RESPONSE: 502,
    ApiErrorKind.CONNECTION_REFUSED: 503,
    ApiErrorKind.UNREACHABLE: 503,
}


def create_app(
    transport: Optional[Transport] = None,
    settings: Optional[ChatflowSettings] = None,
) -> FastAPI:
    """
    Build the formula host.

    Args:
        transport: Transport to Flowise; an ``HttpxTransport`` is created
            from the settings when omitted
        settings: Deployment settings; read from ``FLOWISE_*`` env vars when
            omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize and cleanup the Flowise transport."""
        app_settings = settings or ChatflowSettings.from_env()
        owned = transport is None
        app_transport = transport or HttpxTransport(
            api_key=app_settings.api_key,
            timeout_ms=app_settings.timeout_ms,
            allowlist=NetworkAllowList(app_settings.allowed_domains),
        )

        app.state.settings = app_settings
        app.state.transport = app_transport
        app.state.executor = ChatflowExecutor(app_transport, app_settings)
        app.state.health = HealthChecker(app_transport, app_settings)

        yield

        if owned:
            await app_transport.aclose()

    app = FastAPI(
        title="Formula API",
        description="Flowise chatflow formulas",
        lifespan=lifespan,
    )

    tracer, meter = setup_telemetry(app, SERVICE_NAME, "chatflow")

    formula_counter = meter.create_counter("lab_formula_requests_total")
    formula_latency = meter.create_histogram("lab_formula_duration_ms")

    # --------------- Health endpoints ---------------
    @app.get("/startup")
    async def startup():
        """Startup probe - returns 200 when initialization complete."""
        if await app.state.health.startup_check():
            return {"status": "started", "service": SERVICE_NAME}
        raise HTTPException(status_code=503, detail="Service starting")

    @app.get("/health")
    async def health():
        """Liveness probe - returns 200 if process is alive."""
        if await app.state.health.liveness_check():
            return {
                "status": "healthy",
                "service": SERVICE_NAME,
                "version": os.getenv("SERVICE_VERSION", "0.1.0"),
            }
        raise HTTPException(status_code=500, detail="Service unhealthy")

    @app.get("/ready")
    async def ready():
        """Readiness probe - returns 200 if Flowise answers its ping."""
        if await app.state.health.readiness_check():
            return {"status": "ready", "service": SERVICE_NAME}
        raise HTTPException(status_code=503, detail="Flowise not reachable")

    # --------------- Formulas ---------------
    async def run_formula(
        formula: str,
        request: FormulaRequest,
        correlation_id: Optional[str],
    ):
        start_time = time.time()
        correlation_id = correlation_id or str(uuid.uuid4())
        executor: ChatflowExecutor = app.state.executor

        if formula == "AskFlowiseStream":
            call = executor.predict_streaming
        else:
            call = executor.predict

        try:
            result = await call(
                request.chatflow_id,
                request.question,
                endpoint_override=request.endpoint,
                response_format=request.response_format,
            )
        except ApiError as e:
            formula_counter.add(1, {"formula": formula, "status": e.kind.value})
            return JSONResponse(
                status_code=ERROR_STATUS.get(e.kind, 502),
                content=FormulaError(
                    error=e.message,
                    kind=e.kind.value,
                    correlation_id=correlation_id,
                ).model_dump(),
                headers={"X-Correlation-ID": correlation_id},
            )

        latency_ms = (time.time() - start_time) * 1000
        formula_counter.add(1, {"formula": formula, "status": "success"})
        formula_latency.record(latency_ms, {"formula": formula})

        return JSONResponse(
            content=FormulaResponse(
                result=result,
                latency_ms=latency_ms,
                correlation_id=correlation_id,
            ).model_dump(),
            headers={"X-Correlation-ID": correlation_id},
        )

    @app.post("/formulas/AskFlowise", response_model=FormulaResponse)
    async def ask_flowise(
        request: FormulaRequest,
        x_correlation_id: Optional[str] = Header(None, alias="X-Correlation-ID"),
    ):
        """Ask a question to a Flowise chatflow."""
        return await run_formula("AskFlowise", request, x_correlation_id)

    @app.post("/formulas/AskFlowiseStream", response_model=FormulaResponse)
    async def ask_flowise_stream(
        request: FormulaRequest,
        x_correlation_id: Optional[str] = Header(None, alias="X-Correlation-ID"),
    ):
        """Ask a question to a Flowise chatflow through the streaming route."""
        return await run_formula("AskFlowiseStream", request, x_correlation_id)

    @app.get("/connection", response_model=ConnectionName)
    async def connection(endpoint: Optional[str] = None):
        """Display name of the configured Flowise connection."""
        app_settings: ChatflowSettings = app.state.settings
        with create_span(tracer, "chatflow.connection_name"):
            name = await get_connection_name(
                app.state.transport,
                endpoint or app_settings.endpoint_override,
                app_settings.default_endpoint,
            )
        return ConnectionName(name=name)

    # Error handlers
    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Global exception handler for unhandled errors."""
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_error",
                "message": "Unexpected error while running the formula",
                "service": SERVICE_NAME,
            }
        )

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
