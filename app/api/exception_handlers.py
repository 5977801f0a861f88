from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.domain.exceptions import BusinessValidationError

logger = logging.getLogger("app.validation")


def register_exception_handlers(app: FastAPI) -> None:
    """Register application exception handlers."""

    @app.exception_handler(BusinessValidationError)
    async def handle_business_validation_error(
        request: Request,
        exc: BusinessValidationError,
    ) -> JSONResponse:
        # Do not log request bodies; the message text is user content.
        request_id = getattr(request.state, "request_id", None) or request.headers.get(
            "X-Request-ID"
        )
        logger.info(
            "Request validation failed",
            extra={
                "request_id": request_id,
                "http_method": request.method,
                "request_path": request.url.path,  # no query string
                "status_code": 400,
                "error": "business_validation",
            },
        )
        return JSONResponse(status_code=400, content={"error": exc.message, "success": False})
