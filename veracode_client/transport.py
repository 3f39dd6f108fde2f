"""
Transport adapter that signs and rate limits every outbound request.

VeracodeTransport wraps another requests transport adapter (an
HTTPAdapter by default) and is mounted on the client's session.
"""

import logging
from typing import Optional

import requests
from requests.adapters import BaseAdapter, HTTPAdapter

from .auth import VeracodeHMACAuth
from .context import Context
from .credentials import Credential
from .exceptions import RequestCancelled, TransportError
from .rate_limit import RateLimiter

logger = logging.getLogger(__name__)


def _bounded_timeout(timeout, remaining: Optional[float]):
    """Cap a requests timeout (number, tuple or None) by the context deadline."""
    if remaining is None:
        return timeout
    if timeout is None:
        return remaining
    if isinstance(timeout, tuple):
        return tuple(remaining if t is None else min(t, remaining) for t in timeout)
    return min(timeout, remaining)


class VeracodeTransport(BaseAdapter):
    """
    Signs, rate limits and then delegates to the wrapped transport.

    The default signing credential is held in an immutable VeracodeHMACAuth.
    It is read once per send, so replacing it never affects requests that
    are already being sent.
    """

    def __init__(
        self,
        credential: Credential,
        transport: Optional[BaseAdapter] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        super().__init__()
        self.transport = transport if transport is not None else HTTPAdapter()
        self.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()
        self.auth = VeracodeHMACAuth(credential)

    @property
    def credential(self) -> Credential:
        return self.auth.credential

    @credential.setter
    def credential(self, credential: Credential):
        self.auth = VeracodeHMACAuth(credential)

    def send(self, request, stream=False, timeout=None, verify=True, cert=None,
             proxies=None, context: Optional[Context] = None,
             credential: Optional[Credential] = None):
        """
        Sign ``request``, wait for a rate-limit token and send it.

        ``credential`` is the one captured together with the request's base
        URL; it is passed again for every redirect hop. Requests without
        one are signed with the transport's current credential.

        Raises:
            SigningError: If the credential cannot sign the request
            RateLimitCancelled: If the context ends while waiting for a token
            RequestCancelled: If the context ends before or during dispatch
            TransportError: If the wrapped transport fails
        """
        auth = self.auth if credential is None else VeracodeHMACAuth(credential)
        auth(request)

        self.rate_limiter.acquire(context)

        if context is not None:
            context.raise_if_done()
            timeout = _bounded_timeout(timeout, context.remaining())

        try:
            return self.transport.send(
                request, stream=stream, timeout=timeout, verify=verify, cert=cert, proxies=proxies
            )
        except requests.RequestException as e:
            if context is not None and context.done():
                raise RequestCancelled(f"{context.reason()}: {e}") from e
            raise TransportError(f"HTTP request failed: {e}") from e

    def close(self):
        self.transport.close()
