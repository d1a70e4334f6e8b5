from typing import Optional


class LLMError(Exception):
    """Base class for completion-service failures."""

    def __init__(self, message: str, status: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class TransientLLMError(LLMError):
    """Overload, rate limit or timeout. Worth retrying after a pause."""


class LLMServiceError(LLMError):
    """The service rejected the request. Retrying will not help."""


class LLMProtocolError(LLMError):
    """The service answered with a body that is not a valid completion."""
