from __future__ import annotations

import asyncio
import logging
import random
from typing import Protocol

from app.chat.prompt import GENERATION_PARAMS, build_annoyed_prompt
from app.chat.retry import BackoffPolicy, RetryResult, Success, call_with_backoff
from app.chat.sanitizer import sanitize_reply
from app.chat.throttle import Sleep, Throttler
from app.core.llm.hf_client import TextGenerationParams

logger = logging.getLogger("app.chat")


class TextGenerator(Protocol):
    async def text_generation(self, *, prompt: str, params: TextGenerationParams) -> str: ...


class AnnoyedChatService:
    def __init__(
        self,
        *,
        llm_client: TextGenerator,
        throttler: Throttler,
        policy: BackoffPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
        rng: random.Random | None = None,
    ):
        self._llm = llm_client
        self._throttler = throttler
        self._policy = policy or BackoffPolicy()
        self._sleep = sleep
        self._rng = rng

    async def generate_reply(
        self, *, message: str, request_id: str | None = None
    ) -> RetryResult[str]:
        """
        Generate an annoyed reply for `message`.

        Returns `Success` with the sanitized reply, or `Exhausted` when the API kept
        rate limiting past the retry budget. Any other inference error is raised.
        """

        prompt = build_annoyed_prompt(message=message)

        async def call() -> str:
            return await self._llm.text_generation(prompt=prompt, params=GENERATION_PARAMS)

        result = await call_with_backoff(
            call,
            throttler=self._throttler,
            policy=self._policy,
            sleep=self._sleep,
            request_id=request_id,
        )
        if not isinstance(result, Success):
            return result

        reply = sanitize_reply(result.value, rng=self._rng)
        logger.info(
            "Chat reply generated",
            extra={"request_id": request_id, "attempt": result.attempts},
        )
        logger.debug("User message: %s", message, extra={"request_id": request_id})
        logger.debug("Assistant response: %s", reply, extra={"request_id": request_id})
        return Success(value=reply, attempts=result.attempts)
