"""Errors raised while talking to the chat-completion service."""

from typing import Any


class AIServiceError(Exception):
    """Raised when the chat-completion service call fails."""

    def __init__(self, message: str, status_code: int | None = None, data: Any = None) -> None:
        self.status_code = status_code
        self.data = data
        super().__init__(message)


class AuthenticationError(AIServiceError):
    """Raised when the service rejects the API key (401)."""

    def __init__(self, message: str = "Unauthorized", data: Any = None) -> None:
        super().__init__(message, status_code=401, data=data)


class RateLimitError(AIServiceError):
    """Raised when the service returns a 429 rate limit response."""

    def __init__(self, message: str = "Rate limit exceeded", data: Any = None) -> None:
        super().__init__(message, status_code=429, data=data)
