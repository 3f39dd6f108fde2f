"""
Veracode API Client Library

A Python client library that signs requests with the Veracode
HMAC-SHA-256 scheme, rate limits them client side and normalizes the
error bodies of the Veracode JSON and XML APIs.

Example usage:
    from veracode_client import VeracodeClient

    client = VeracodeClient("your-api-key-id", "your-api-key-secret")
    response = client.get("/appsec/v1/applications")
"""

from .auth import VeracodeHMACAuth
from .client import VeracodeClient
from .context import Context
from .credentials import Credential, get_profiles, load_credentials
from .exceptions import (
    VeracodeClientError,
    ConfigurationError,
    SigningError,
    RegionResolutionError,
    UnknownRegionError,
    RequestCancelled,
    RateLimitCancelled,
    TransportError,
    DecodeError,
    InvalidSignatureError,
    UnsupportedContentTypeError,
    ApiError
)
from .constants import (
    AUTH_SCHEME,
    DEFAULT_CONFIG,
    REQUEST_VERSION_STRING,
    VERSION
)
from .pagination import CollectionResult, NavLinks, PageMeta, Response
from .query import PageOptions, SortField, query_encode
from .rate_limit import RateLimiter
from .region import REGIONS, Region, get_region, resolve_region
from .signing import (
    calculate_authorization_header,
    parse_authorization_header,
    verify_authorization_header
)
from .transport import VeracodeTransport

__version__ = VERSION
__all__ = [
    "VeracodeClient",
    "VeracodeHMACAuth",
    "VeracodeTransport",
    "Context",
    "Credential",
    "get_profiles",
    "load_credentials",
    "VeracodeClientError",
    "ConfigurationError",
    "SigningError",
    "RegionResolutionError",
    "UnknownRegionError",
    "RequestCancelled",
    "RateLimitCancelled",
    "TransportError",
    "DecodeError",
    "InvalidSignatureError",
    "UnsupportedContentTypeError",
    "ApiError",
    "AUTH_SCHEME",
    "DEFAULT_CONFIG",
    "REQUEST_VERSION_STRING",
    "CollectionResult",
    "NavLinks",
    "PageMeta",
    "Response",
    "PageOptions",
    "SortField",
    "query_encode",
    "RateLimiter",
    "REGIONS",
    "Region",
    "get_region",
    "resolve_region",
    "calculate_authorization_header",
    "parse_authorization_header",
    "verify_authorization_header"
]
