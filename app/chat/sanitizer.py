"""Cleanup of raw generated text.

Models tend to echo role labels ("Assistant: ...") or spill onto several lines even
with stop sequences set. The sanitizer strips those and guarantees a non-empty reply
by falling back to a canned in-character phrase.
"""

from __future__ import annotations

import random
import re

FALLBACK_PHRASES: tuple[str, ...] = (
    "Whatever... *sigh*",
    "Do I really have to answer this?",
    "Can't you figure this out yourself?",
    "Ugh, fine...",
    "I guess I have to respond...",
)

_ROLE_LABEL_PATTERN = re.compile(
    r"^(?:(?:user|assistant|human|ai)\b|your annoyed response:)\s*:?\s*",
    re.IGNORECASE,
)
_NEWLINE_PATTERN = re.compile(r"\r?\n")


def strip_role_labels(text: str) -> str:
    # Labels can stack ("Assistant: AI: ..."); strip until none is left.
    while True:
        stripped = _ROLE_LABEL_PATTERN.sub("", text, count=1)
        if stripped == text:
            return text
        text = stripped


def pick_fallback(rng: random.Random | None = None) -> str:
    return (rng or random).choice(FALLBACK_PHRASES)


def sanitize_reply(text: str, *, rng: random.Random | None = None) -> str:
    """Return a single-line reply without leading role labels; never empty."""

    cleaned = strip_role_labels(text.strip())
    cleaned = _NEWLINE_PATTERN.sub(" ", cleaned).strip()
    if not cleaned:
        return pick_fallback(rng)
    return cleaned
