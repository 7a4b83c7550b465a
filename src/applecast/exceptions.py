"""Custom exceptions for applecast.

Every failure the pipeline can report is one of these types, so the CLI can
print a human-readable message and choose an exit code without inspecting
third-party exceptions.

Exception Hierarchy:
    ApplecastError (base)
    ├── InvalidUrlError - Input URL is not a well-formed absolute http(s) URL
    ├── FetchError - Network, DNS, timeout or redirect-limit failures
    │   └── HTTPStatusError - Non-2xx HTTP response
    ├── StorageError - Filesystem read/write failures
    ├── ParseError - Malformed document or JSON payload
    └── ExtractionError - No metadata strategy could run
"""

from typing import Optional


class ApplecastError(Exception):
    """Base exception for all applecast errors.

    Attributes:
        message: Human-readable error message
        suggestion: Optional hint for resolving the error
    """

    def __init__(self, message: str, suggestion: Optional[str] = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message with the optional suggestion."""
        if self.suggestion:
            return f"{self.message} Suggestion: {self.suggestion}"
        return self.message


class InvalidUrlError(ApplecastError):
    """Raised when the input URL fails syntactic validation.

    The original string is kept verbatim in both ``url`` and the message.

    Example:
        >>> raise InvalidUrlError("not-a-url")
    """

    def __init__(self, url: str, suggestion: Optional[str] = None) -> None:
        self.url = url
        super().__init__(message=f"Invalid URL format: '{url}'", suggestion=suggestion)


class FetchError(ApplecastError):
    """Raised when a URL cannot be fetched (network, DNS, timeout, redirects)."""

    def __init__(self, message: str, url: str, suggestion: Optional[str] = None) -> None:
        self.url = url
        super().__init__(message=message, suggestion=suggestion)


class HTTPStatusError(FetchError):
    """Raised when a response carries a non-2xx status code.

    Example:
        >>> raise HTTPStatusError("https://example.com/missing", 404)
    """

    def __init__(self, url: str, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(
            message=f"HTTP request failed with status: {status_code} ({url})",
            url=url,
        )


class StorageError(ApplecastError):
    """Raised when an output file or directory cannot be written."""

    def __init__(self, message: str, path: str) -> None:
        self.path = path
        super().__init__(message=message)


class ParseError(ApplecastError):
    """Raised when a document or embedded JSON payload is malformed or missing."""


class ExtractionError(ApplecastError):
    """Raised when neither metadata strategy could be executed."""
