from __future__ import annotations


class BusinessValidationError(Exception):
    """Raised when a request violates a domain rule (client fault, never retried)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MessageRequiredError(BusinessValidationError):
    """Raised when a chat request carries no usable message."""

    def __init__(self, message: str = "Message is required"):
        super().__init__(message)
