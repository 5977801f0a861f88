from __future__ import annotations

from pydantic import BaseModel, Field, StrictStr


class ChatRequest(BaseModel):
    """Inbound chat message. Unknown fields are ignored."""

    message: StrictStr = Field(
        min_length=1,
        description="What the user says to the (reluctant) assistant.",
        examples=["Hi"],
    )


class ChatReplyOut(BaseModel):
    message: str = Field(description="Sanitized in-character reply.", examples=["Leave me alone."])
    success: bool = True


class ChatErrorOut(BaseModel):
    """
    Failure payload.

    `message` carries an in-character filler so clients can render something in persona;
    it is omitted only for request validation failures.
    """

    error: str = Field(examples=["Rate limit exceeded"])
    message: str | None = Field(
        default=None, examples=["Ugh, you're talking too fast. Give me a break."]
    )
    success: bool = False
