from __future__ import annotations

from fastapi import Depends, Request
from pydantic import ValidationError

from app.chat.retry import BackoffPolicy
from app.chat.schemas import ChatRequest
from app.chat.service import AnnoyedChatService
from app.chat.throttle import Throttler
from app.core.llm.deps import get_inference_client
from app.core.llm.hf_client import HuggingFaceClient
from app.core.settings import get_settings
from app.domain.exceptions import MessageRequiredError


def get_throttler(request: Request) -> Throttler:
    # Built once in the app lifespan and shared by every request.
    return request.app.state.chat_throttler


def get_chat_service(
    throttler: Throttler = Depends(get_throttler),
    llm_client: HuggingFaceClient | None = Depends(get_inference_client),
) -> AnnoyedChatService | None:
    """Return None when inference is not configured; the route maps that to a 500."""

    if llm_client is None:
        return None

    settings = get_settings()
    policy = BackoffPolicy(
        max_retries=settings.chat_max_retries,
        base_delay_seconds=settings.chat_backoff_base_seconds,
    )
    return AnnoyedChatService(llm_client=llm_client, throttler=throttler, policy=policy)


async def read_chat_request(request: Request) -> ChatRequest:
    """
    Parse the body by hand so every malformed request gets the same 400 payload.

    FastAPI's default body validation would answer 422 with its own error shape.
    """

    try:
        body = await request.json()
    except ValueError as exc:
        raise MessageRequiredError() from exc

    try:
        return ChatRequest.model_validate(body)
    except ValidationError as exc:
        raise MessageRequiredError() from exc
