"""
Custom exceptions for the Veracode API client library.
"""

from typing import List, Optional


class VeracodeClientError(Exception):
    """Base exception for Veracode client errors."""
    pass


class ConfigurationError(VeracodeClientError):
    """Raised when client configuration or credentials are invalid."""
    pass


class SigningError(ConfigurationError):
    """Raised when a request cannot be signed (e.g. the secret is not hex)."""
    pass


class RegionResolutionError(ConfigurationError):
    """Raised when an API key id carries a malformed region prefix."""
    pass


class UnknownRegionError(RegionResolutionError):
    """Raised when the region character of an API key id is not known."""
    pass


class RequestCancelled(VeracodeClientError):
    """Raised when the request context is cancelled or its deadline passes."""
    pass


class RateLimitCancelled(RequestCancelled):
    """Raised when the context ends while waiting for a rate-limit token."""
    pass


class TransportError(VeracodeClientError):
    """Raised when the underlying HTTP stack fails."""
    pass


class DecodeError(VeracodeClientError):
    """Raised when a successful response body cannot be decoded."""
    pass


class InvalidSignatureError(VeracodeClientError):
    """Raised when an Authorization header cannot be parsed or verified."""
    pass


class UnsupportedContentTypeError(VeracodeClientError):
    """Raised when a response carries a content type that cannot be decoded."""

    def __init__(self, content_type: Optional[str]):
        self.content_type = content_type
        super().__init__(
            f"response header: 'Content-Type' contains unsupported value: {content_type}"
        )


class ApiError(VeracodeClientError):
    """
    Error returned by the Veracode API.

    All upstream error body dialects (JSON message, errors array, embedded
    api_errors, XML error element) are normalized into this one shape.
    """

    def __init__(self, status_code: int, endpoint: str, messages: Optional[List[str]] = None):
        self.status_code = status_code
        self.endpoint = endpoint
        self.messages = list(messages or [])
        super().__init__(str(self))

    def __str__(self):
        joined = ", ".join(f'"{m}"' for m in self.messages)
        return f'api error returned from {self.endpoint} ({self.status_code}): [{joined}]'

    def __repr__(self):
        return (
            f"ApiError(status_code={self.status_code!r}, "
            f"endpoint={self.endpoint!r}, messages={self.messages!r})"
        )
