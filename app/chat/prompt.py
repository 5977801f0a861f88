from __future__ import annotations

from app.core.llm.hf_client import TextGenerationParams

RESPONSE_CUE = "Your annoyed response:"

# Generation stops at any role label or line break so the reply stays one short line.
GENERATION_PARAMS = TextGenerationParams(
    max_new_tokens=50,
    temperature=0.7,
    top_p=0.95,
    return_full_text=False,
    stop=("User:", "Assistant:", "\n", RESPONSE_CUE),
)


def build_annoyed_prompt(*, message: str) -> str:
    """Embed the user message verbatim in the fixed persona instruction."""

    return (
        "Instructions: You are a disinterested person who responds briefly and gets "
        "increasingly annoyed.\n"
        f'User\'s message: "{message}"\n'
        f"{RESPONSE_CUE}"
    )
