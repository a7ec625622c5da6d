import traceback
from typing import Optional


class OcrServiceError(Exception):
    """Base error rendered as ``{"error": ..., "success": false}``."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(OcrServiceError):
    """The request did not carry a usable image."""

    status_code = 400


class UpstreamError(OcrServiceError):
    """Google Vision failed or answered with something we can't read."""


class ConfigurationError(OcrServiceError):
    """A required setting such as the Vision API key is missing."""


class InternalError(OcrServiceError):
    """Unexpected failure while building the response."""

    def __init__(self, message: str, stack: Optional[str] = None) -> None:
        super().__init__(message)
        self.stack = stack

    @classmethod
    def wrap(cls, exc: BaseException) -> "InternalError":
        stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return cls(str(exc) or exc.__class__.__name__, stack=stack)
