from __future__ import annotations

from app.core.llm.hf_client import HuggingFaceClient, HuggingFaceConfig
from app.core.settings import get_settings


def get_inference_client() -> HuggingFaceClient | None:
    """
    Dependency provider for HuggingFaceClient.

    Returns None when not configured so the chat route can answer with an
    in-character 500 instead of failing during dependency resolution.
    """

    settings = get_settings()
    if not settings.huggingface_api_key:
        return None

    config = HuggingFaceConfig(
        api_key=settings.huggingface_api_key,
        base_url=settings.huggingface_base_url,
        model=settings.huggingface_model,
        timeout_seconds=settings.huggingface_timeout_seconds,
    )
    return HuggingFaceClient(config=config)
