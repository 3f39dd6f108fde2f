"""
Typed REST resources built on top of VeracodeClient.

Each service builds a request, sends it through the client and turns the
decoded body into a DTO.
"""

import datetime
from dataclasses import dataclass
from typing import Optional

from .pagination import NavLinks, Response

API_CREDENTIALS_ENDPOINT = "/api/authn/v2/api_credentials"
HEALTHCHECK_ENDPOINT = "/healthcheck/status"

_API_TIME_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%d %H:%M:%S UTC",
)


def parse_api_time(value: Optional[str]) -> Optional[datetime.datetime]:
    """
    Parse the different timestamp formats returned by the API.

    Accepts RFC 3339, ``2024-01-02T15:04:05.000+0000`` and
    ``2024-01-02 15:04:05 UTC``.
    """
    if not value:
        return None

    try:
        return datetime.datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        pass

    for fmt in _API_TIME_FORMATS:
        try:
            parsed = datetime.datetime.strptime(value, fmt)
        except ValueError:
            continue
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=datetime.timezone.utc)
        return parsed

    raise ValueError(f"unsupported time format: {value}")


@dataclass
class APICredentials:
    api_id: str
    api_secret: Optional[str] = None
    expiration_ts: Optional[datetime.datetime] = None
    revocation_user: Optional[str] = None
    revocation_ts: Optional[datetime.datetime] = None
    links: Optional[NavLinks] = None

    @classmethod
    def from_dict(cls, data: dict) -> "APICredentials":
        return cls(
            api_id=data["api_id"],
            api_secret=data.get("api_secret"),
            expiration_ts=parse_api_time(data.get("expiration_ts")),
            revocation_user=data.get("revocation_user"),
            revocation_ts=parse_api_time(data.get("revocation_ts")),
            links=NavLinks.from_dict(data.get("_links")),
        )


class Service:
    """Base for a group of API calls bound to one client."""

    def __init__(self, client):
        self.client = client


class HealthCheckService(Service):

    def get_status(self, context=None) -> Response:
        """
        Lightweight check that the authentication services are operational.

        Returns normally when everything is operational; raises otherwise.
        """
        request = self.client.new_request(HEALTHCHECK_ENDPOINT, "GET")
        return self.client.do(request, context=context)


class IdentityService(Service):
    """API credential calls of the Identity API (v2)."""

    def get_self_credentials(self, context=None) -> APICredentials:
        request = self.client.new_request(API_CREDENTIALS_ENDPOINT, "GET")
        return self.client.do(request, APICredentials.from_dict, context=context).result

    def generate_self_credentials(self, context=None) -> APICredentials:
        """Generate new API credentials for the current user."""
        request = self.client.new_request(API_CREDENTIALS_ENDPOINT, "POST")
        return self.client.do(request, APICredentials.from_dict, context=context).result

    def revoke_self_credentials(self, context=None) -> Response:
        request = self.client.new_request(API_CREDENTIALS_ENDPOINT, "DELETE")
        return self.client.do(request, context=context)
