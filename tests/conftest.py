from __future__ import annotations

from collections.abc import Iterator

import pytest


@pytest.fixture(autouse=True)
def _set_test_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("HUGGINGFACE_API_KEY", "hf_test_key")
    # No real waiting in HTTP-level tests; timing is covered with a fake clock.
    monkeypatch.setenv("CHAT_COOLDOWN_SECONDS", "0")
    monkeypatch.setenv("CHAT_BACKOFF_BASE_SECONDS", "0")
    # Settings are cached via @lru_cache; clear so each test sees its own env.
    from app.core.settings import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from app.main import create_app

    app = create_app()
    with TestClient(app) as c:
        yield c
