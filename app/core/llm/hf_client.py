from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import httpx


class InferenceError(Exception):
    """Base error for inference client failures."""


class InferenceUnavailableError(InferenceError):
    """Raised when inference is not configured (e.g., missing API key)."""


class InferenceUpstreamError(InferenceError):
    """Raised when the inference API fails or returns an unexpected response."""


class InferenceRateLimitedError(InferenceError):
    """Raised when the inference API rejects a call with HTTP 429."""

    def __init__(
        self, message: str = "Rate limit exceeded", *, retry_after_seconds: float | None = None
    ):
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


@dataclass(frozen=True)
class HuggingFaceConfig:
    api_key: str
    base_url: str
    model: str
    timeout_seconds: float | None = None


@dataclass(frozen=True)
class TextGenerationParams:
    max_new_tokens: int = 50
    temperature: float = 0.7
    top_p: float = 0.95
    return_full_text: bool = False
    stop: tuple[str, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["stop"] = list(self.stop)
        return payload


def _parse_retry_after(resp: httpx.Response) -> float | None:
    raw = resp.headers.get("Retry-After")
    if raw is None:
        return None
    try:
        value = float(raw)
    except ValueError:
        # HTTP-date form; not worth resolving for a hint.
        return None
    return value if value >= 0 else None


def _upstream_error_detail(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and isinstance(data.get("error"), str) and data["error"]:
        return data["error"]
    return f"Inference API returned status {resp.status_code}"


class HuggingFaceClient:
    """
    Minimal client for the Hugging Face text generation API.

    - One POST per call; no retries here (see `app.chat.retry`).
    - HTTP 429 is raised as `InferenceRateLimitedError`, everything else as
      `InferenceUpstreamError`.
    - Returns the raw generated text; cleanup is the caller's job.
    """

    def __init__(
        self,
        *,
        config: HuggingFaceConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        self._transport = transport

    @property
    def model(self) -> str:
        return self._config.model

    async def text_generation(self, *, prompt: str, params: TextGenerationParams) -> str:
        url = f"{self._config.base_url.rstrip('/')}/{self._config.model}"
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }
        payload: dict[str, Any] = {
            "inputs": prompt,
            "parameters": params.to_payload(),
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.post(url, headers=headers, json=payload)
        except httpx.TimeoutException as exc:
            raise InferenceUpstreamError("Inference request timed out") from exc
        except httpx.HTTPError as exc:
            raise InferenceUpstreamError("Inference request failed") from exc

        if resp.status_code == 429:
            raise InferenceRateLimitedError(retry_after_seconds=_parse_retry_after(resp))
        if resp.status_code != 200:
            raise InferenceUpstreamError(_upstream_error_detail(resp))

        try:
            data = resp.json()
        except ValueError as exc:
            raise InferenceUpstreamError("Inference response was not valid JSON") from exc

        # The API answers with a one-element list; some deployments return the bare object.
        item = data[0] if isinstance(data, list) and data else data
        text = item.get("generated_text") if isinstance(item, dict) else None
        if not isinstance(text, str):
            raise InferenceUpstreamError("No response generated")
        return text
