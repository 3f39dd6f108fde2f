"""
Veracode API client.

This module provides the long-lived client that resolves endpoints against
the region of its API key, signs and rate limits every request through
VeracodeTransport and decodes JSON and XML responses.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urljoin, urlsplit

import requests
from requests.adapters import BaseAdapter

from .constants import (
    CONTENT_TYPE_JSON,
    DEFAULT_CONFIG,
    HEADER_CONTENT_TYPE,
    HEADER_USER_AGENT,
)
from .context import Context
from .credentials import Credential, load_credentials
from .decoder import Destination, decode_response
from .exceptions import ConfigurationError
from .pagination import Response
from .query import query_encode
from .rate_limit import RateLimiter
from .region import Region, resolve_region
from .rwlock import ReadWriteLock
from .services import HealthCheckService, IdentityService
from .signing import decode_secret
from .transport import VeracodeTransport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ClientState:
    credential: Credential
    region: Region


class VeracodeClient:
    """
    Client for the Veracode REST (JSON) and legacy XML APIs.

    One instance is meant to be shared by any number of threads. The
    credential and region live in an immutable snapshot guarded by a
    reader-writer lock; update_credentials swaps the snapshot.
    """

    def __init__(
        self,
        api_key_id: str,
        api_key_secret: str,
        transport: Optional[BaseAdapter] = None,
        rate_limiter: Optional[RateLimiter] = None,
        **config
    ):
        """
        Initialize the client.

        Args:
            api_key_id: Veracode API key id (the region is derived from it)
            api_key_secret: Hex encoded API key secret
            transport: requests transport adapter to send through
                (a new HTTPAdapter when omitted)
            rate_limiter: Shared rate limiter (built from config when omitted)
            **config: Configuration options (timeout, rate_interval, rate_burst, user_agent)

        Raises:
            ConfigurationError: If configuration or credentials are invalid
        """
        # Merge default config with user overrides
        self.config = {**DEFAULT_CONFIG, **config}
        self._validate_config()

        credential = Credential(api_key_id, api_key_secret)
        decode_secret(api_key_secret)
        region = resolve_region(api_key_id)

        if rate_limiter is None:
            rate_limiter = RateLimiter(self.config['rate_interval'], self.config['rate_burst'])

        self.transport = VeracodeTransport(credential, transport=transport, rate_limiter=rate_limiter)

        self.session = requests.Session()
        self.session.headers[HEADER_USER_AGENT] = self.config['user_agent']
        self.session.mount("https://", self.transport)
        self.session.mount("http://", self.transport)

        self._lock = ReadWriteLock()
        self._state = _ClientState(credential, region)

        self.healthcheck = HealthCheckService(self)
        self.identity = IdentityService(self)

    @classmethod
    def from_credentials_file(cls, path: Optional[str] = None, profile: Optional[str] = None, **kwargs):
        """Create a client from a profile of the ~/.veracode/credentials file."""
        credential = load_credentials(path, profile)
        return cls(credential.key_id, credential.key_secret, **kwargs)

    def _validate_config(self):
        """Validate client configuration."""
        if self.config['timeout'] <= 0:
            raise ConfigurationError("timeout must be positive")

        if self.config['rate_interval'] <= 0:
            raise ConfigurationError("rate_interval must be positive")

        if self.config['rate_burst'] <= 0:
            raise ConfigurationError("rate_burst must be positive")

    def _snapshot(self) -> _ClientState:
        with self._lock.read_locked():
            return self._state

    @property
    def region(self) -> Region:
        return self._snapshot().region

    @property
    def base_rest_url(self) -> str:
        return self._snapshot().region.rest_url

    @property
    def base_xml_url(self) -> str:
        return self._snapshot().region.xml_url

    @property
    def rate_limiter(self) -> RateLimiter:
        return self.transport.rate_limiter

    def update_credentials(self, api_key_id: str, api_key_secret: str):
        """
        Replace the credentials (and with them the region) of the client.

        Requests built before this call keep the credential and base URL
        they were built with, even when sent afterwards; requests built
        after this call use the new pair.

        Raises:
            ConfigurationError: If the new credentials are invalid; the
                client is left unchanged
        """
        credential = Credential(api_key_id, api_key_secret)
        decode_secret(api_key_secret)
        region = resolve_region(api_key_id)

        with self._lock.write_locked():
            self._state = _ClientState(credential, region)
            self.transport.credential = credential

        logger.info("Updated credentials to key %s in region %s", credential.masked_key_id, region.name)

    def _prepare_request_body(self, json_data=None, data=None) -> Optional[bytes]:
        """Prepare request body."""
        if json_data is not None:
            return json.dumps(json_data, separators=(',', ':')).encode('utf-8')
        elif data is not None:
            if isinstance(data, str):
                return data.encode('utf-8')
            elif isinstance(data, bytes):
                return data
            else:
                return str(data).encode('utf-8')
        else:
            return None

    def new_request(
        self,
        endpoint: str,
        method: str = "GET",
        json_data: Any = None,
        data: Any = None,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
        use_xml: bool = False,
    ) -> requests.PreparedRequest:
        """
        Create a request against the REST base URL of the client's region.

        Args:
            endpoint: Path (or URL) resolved against the base URL
            method: HTTP method
            json_data: Object to send as a JSON body
            data: Raw body
            params: Query parameters, encoded with query_encode
            headers: Extra headers (e.g. a different Content-Type)
            use_xml: Resolve against the XML API base URL instead

        Returns:
            Prepared request, to be passed to do()
        """
        state = self._snapshot()
        base = state.region.xml_url if use_xml else state.region.rest_url
        url = urljoin(base, endpoint)

        query = query_encode(params)
        if query:
            url += ('&' if urlsplit(url).query else '?') + query

        request_headers = {HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON}
        request_headers.update(headers or {})

        request = requests.Request(
            method.upper(),
            url,
            data=self._prepare_request_body(json_data, data),
            headers=request_headers,
        )
        prepared = self.session.prepare_request(request)
        # signed with the credential of the region the URL points at
        prepared.credential = state.credential
        return prepared

    def do(
        self,
        request: requests.PreparedRequest,
        destination: Optional[Destination] = None,
        context: Optional[Context] = None,
    ) -> Response:
        """
        Send ``request`` and decode the response into ``destination``.

        Args:
            request: Request created by new_request
            destination: Callable turning the parsed body into a result
            context: Cancellation context for the rate-limit wait and the I/O

        Returns:
            Response envelope carrying the result and page metadata

        Raises:
            ApiError: If the API returned an error
            RequestCancelled: If the context ended first
            TransportError: If the request could not be sent
            DecodeError: If a successful body could not be decoded
            UnsupportedContentTypeError: If the body is neither JSON nor XML
        """
        raw = self.session.send(
            request,
            timeout=self.config['timeout'],
            context=context,
            credential=getattr(request, 'credential', None),
        )
        try:
            return decode_response(raw, destination)
        finally:
            raw.close()

    def _call(self, method, path, destination=None, context=None, **kwargs) -> Response:
        return self.do(self.new_request(path, method, **kwargs), destination, context=context)

    def get(self, path: str, destination: Optional[Destination] = None, **kwargs) -> Response:
        """Make authenticated GET request."""
        return self._call('GET', path, destination, **kwargs)

    def post(self, path: str, json=None, data=None, destination: Optional[Destination] = None, **kwargs) -> Response:
        """Make authenticated POST request."""
        return self._call('POST', path, destination, json_data=json, data=data, **kwargs)

    def put(self, path: str, json=None, data=None, destination: Optional[Destination] = None, **kwargs) -> Response:
        """Make authenticated PUT request."""
        return self._call('PUT', path, destination, json_data=json, data=data, **kwargs)

    def delete(self, path: str, destination: Optional[Destination] = None, **kwargs) -> Response:
        """Make authenticated DELETE request."""
        return self._call('DELETE', path, destination, **kwargs)

    def close(self):
        """Close HTTP session."""
        if self.session:
            self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
