"""
Shared fixtures: a fake transport adapter standing in for the network.
"""

import json

import pytest
import requests
from requests.adapters import BaseAdapter

KEY_ID = "abcdefgh-11112222333344445555"
SECRET = "aa" * 32
EU_KEY_ID = "vera01ei-99998888777766665555"
EU_SECRET = "bb" * 32


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeAdapter(BaseAdapter):
    """
    Records every request it is asked to send and answers from ``handler``.

    ``handler(request)`` returns (status, body, content_type[, headers]).
    """

    def __init__(self, handler=None):
        super().__init__()
        self.handler = handler or (lambda request: (200, {}, "application/json"))
        self.requests = []
        self.headers = []
        self.timeouts = []
        self.closed = False

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.requests.append(request)
        self.headers.append(dict(request.headers))
        self.timeouts.append(timeout)

        result = self.handler(request)
        status, body, content_type = result[:3]
        extra_headers = result[3] if len(result) > 3 else {}

        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode("utf-8")

        response = requests.Response()
        response.status_code = status
        response._content = body
        response._content_consumed = True
        if content_type is not None:
            response.headers["Content-Type"] = content_type
        response.headers.update(extra_headers)
        response.url = request.url
        response.request = request
        response.connection = self
        return response

    def close(self):
        self.closed = True


@pytest.fixture
def fake_adapter():
    return FakeAdapter()


@pytest.fixture
def clock():
    return FakeClock()
