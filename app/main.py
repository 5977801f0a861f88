from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.exception_handlers import register_exception_handlers
from app.api.schemas import HealthOut
from app.chat.router import router as chat_router
from app.chat.throttle import Throttler
from app.core.logging import setup_logging
from app.core.metrics import PrometheusMetricsMiddleware, metrics_router
from app.core.middleware.http_logging import HttpLoggingMiddleware
from app.core.settings import get_settings

setup_logging()


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Defer settings/env access until application startup so tests can set env first.
        settings = get_settings()
        # One cooldown gate for the whole process; every request shares it.
        app.state.chat_throttler = Throttler(cooldown_seconds=settings.chat_cooldown_seconds)
        yield

    app = FastAPI(
        title="Annoyed Chat API",
        description=(
            "Single-endpoint chat API backed by a hosted language model that plays a "
            "disinterested, increasingly annoyed persona.\n\n"
            "Design principles:\n"
            "- Stateless: no conversation memory between requests.\n"
            "- Outbound calls are paced by a process-wide cooldown and retried with "
            "exponential backoff when the provider rate limits.\n"
            "- Every failure still returns an in-character `message`."
        ),
        lifespan=lifespan,
        docs_url="/swagger",
        openapi_tags=[
            {
                "name": "health",
                "description": "Basic uptime check for load balancers and monitoring.",
            },
            {
                "name": "chat",
                "description": "Send a message, get a brief and grudging reply.",
            },
            {
                "name": "metrics",
                "description": "Prometheus-compatible metrics endpoint.",
            },
        ],
    )

    app.add_middleware(PrometheusMetricsMiddleware)
    app.add_middleware(HttpLoggingMiddleware)

    register_exception_handlers(app)

    @app.get(
        "/health",
        response_model=HealthOut,
        tags=["health"],
        summary="Health check",
        description=(
            "Lightweight endpoint to verify the API process is running.\n\n"
            "This endpoint does not call the inference provider, so it never consumes "
            "rate-limit budget."
        ),
    )
    async def health() -> HealthOut:
        return HealthOut(status="ok")

    app.include_router(metrics_router)
    app.include_router(chat_router)
    return app


app = create_app()
