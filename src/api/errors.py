# src/api/errors.py
"""
Exception hierarchy for calls made to the prediction backend.

Every failure that can happen between issuing an HTTP request and holding a
validated response model is mapped onto one of these classes. The dispatcher
only catches ``ApiError``; anything else is a programming error and propagates.
"""

from typing import Optional


class ApiError(Exception):
    """Base class for prediction backend failures."""

    def __init__(self, message: str, kind: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"[{self.kind}] HTTP {self.status_code}: {self.message}"
        return f"[{self.kind}] {self.message}"


class ApiConnectionError(ApiError):
    """Raised when the request never produced a response (refused, timeout)."""


class ApiStatusError(ApiError):
    """Raised for non-2xx responses."""


class ApiDecodeError(ApiError):
    """Raised when a 2xx response body is not valid JSON."""


class ResponseValidationError(ApiError):
    """Raised when a JSON body does not match the expected schema."""

    def __init__(self, message: str, kind: str, errors: Optional[list] = None):
        super().__init__(message, kind)
        self.errors = errors or []
