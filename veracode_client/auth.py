"""requests authentication plugin for the Veracode HMAC scheme."""

import logging

from requests.auth import AuthBase

from .constants import CONTENT_TYPE_JSON, HEADER_AUTHORIZATION, HEADER_CONTENT_TYPE
from .credentials import Credential
from .signing import calculate_authorization_header

logger = logging.getLogger(__name__)


class VeracodeHMACAuth(AuthBase):
    """
    Signs a prepared request with a fresh nonce and timestamp.

    Can be used on its own with plain requests:
        requests.get(url, auth=VeracodeHMACAuth(Credential(key_id, secret)))
    """

    def __init__(self, credential: Credential):
        self.credential = credential

    def __call__(self, r):
        r.headers[HEADER_AUTHORIZATION] = calculate_authorization_header(
            r.url, r.method, self.credential.key_id, self.credential.key_secret
        )
        if HEADER_CONTENT_TYPE not in r.headers:
            r.headers[HEADER_CONTENT_TYPE] = CONTENT_TYPE_JSON

        logger.debug("Signed %s %s with key %s", r.method, r.url, self.credential.masked_key_id)
        return r

    def __eq__(self, other):
        return isinstance(other, VeracodeHMACAuth) and other.credential == self.credential

    def __ne__(self, other):
        return not self == other
