from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from app.chat.deps import get_chat_service, read_chat_request
from app.chat.retry import Exhausted
from app.chat.schemas import ChatErrorOut, ChatReplyOut, ChatRequest
from app.chat.service import AnnoyedChatService
from app.core.llm.hf_client import InferenceError, InferenceUnavailableError

router = APIRouter(prefix="/api", tags=["chat"])
logger = logging.getLogger("app.chat")

RATE_LIMITED_FILLER = "Ugh, you're talking too fast. Give me a break."
FAILED_FILLER = "I can't even right now... try again later."
UNKNOWN_FAILURE_FILLER = "Something's wrong, but I don't care enough to explain."


def _failure(*, status_code: int, error: str, filler: str) -> JSONResponse:
    payload = ChatErrorOut(error=error, message=filler)
    return JSONResponse(status_code=status_code, content=payload.model_dump())


@router.post(
    "/chat",
    response_model=ChatReplyOut,
    summary="Send a message to the annoyed assistant",
    description=(
        "Forwards the message to the hosted model and returns a short, sanitized reply.\n\n"
        "Rate-limited upstream calls are retried with exponential backoff before the "
        "request fails with 429. Failures still carry an in-character `message`."
    ),
    responses={
        400: {"model": ChatErrorOut, "description": "Message missing or empty."},
        429: {"model": ChatErrorOut, "description": "Upstream rate limit persisted."},
        500: {"model": ChatErrorOut, "description": "Inference failed."},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": ChatRequest.model_json_schema()}},
        }
    },
)
async def chat(
    request: Request,
    payload: ChatRequest = Depends(read_chat_request),
    service: AnnoyedChatService | None = Depends(get_chat_service),
) -> ChatReplyOut | JSONResponse:
    request_id = getattr(request.state, "request_id", None)

    try:
        if service is None:
            raise InferenceUnavailableError("Inference service is not configured")
        result = await service.generate_reply(message=payload.message, request_id=request_id)
    except InferenceError as exc:
        error = str(exc) or type(exc).__name__
        logger.error(
            "Inference failed: %s",
            error,
            extra={"request_id": request_id, "status_code": 500},
        )
        return _failure(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, error=error, filler=FAILED_FILLER
        )
    except Exception as exc:  # noqa: BLE001
        logger.exception(
            "Unexpected failure while generating reply",
            extra={"request_id": request_id, "status_code": 500},
        )
        error = str(exc)
        if not error:
            return _failure(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                error="Unknown error occurred",
                filler=UNKNOWN_FAILURE_FILLER,
            )
        return _failure(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, error=error, filler=FAILED_FILLER
        )

    if isinstance(result, Exhausted):
        return _failure(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error="Rate limit exceeded",
            filler=RATE_LIMITED_FILLER,
        )

    return ChatReplyOut(message=result.value)
