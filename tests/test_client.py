"""
Unit tests for the Veracode API client.
"""

import datetime
import threading

import pytest

from veracode_client import (
    ApiError,
    ConfigurationError,
    DecodeError,
    Context,
    RateLimitCancelled,
    RegionResolutionError,
    SigningError,
    UnknownRegionError,
    VeracodeClient,
)
from veracode_client.rate_limit import RateLimiter
from veracode_client.signing import parse_authorization_header, verify_authorization_header

from conftest import EU_KEY_ID, EU_SECRET, KEY_ID, SECRET


class TestVeracodeClient:
    """Test client functionality."""

    @pytest.fixture
    def client(self, fake_adapter):
        """Create test client."""
        return VeracodeClient(KEY_ID, SECRET, transport=fake_adapter)

    def test_init_default_config(self, client):
        """Test client initialization with default config."""
        assert client.config['timeout'] == 30
        assert client.config['rate_interval'] == 0.12
        assert client.config['rate_burst'] == 500
        assert client.base_rest_url == "https://api.veracode.com/"
        assert client.base_xml_url == "https://analysiscenter.veracode.com/"
        assert client.region.name == "commercial"

    def test_init_custom_config(self, fake_adapter):
        """Test client initialization with custom config."""
        client = VeracodeClient(
            EU_KEY_ID, EU_SECRET, transport=fake_adapter, timeout=60, rate_interval=1, rate_burst=10
        )

        assert client.config['timeout'] == 60
        assert client.rate_limiter.interval == 1
        assert client.rate_limiter.burst == 10
        assert client.base_rest_url == "https://api.veracode.eu/"

    def test_init_invalid_config(self):
        """Test client initialization with invalid config."""
        with pytest.raises(ConfigurationError):
            VeracodeClient(KEY_ID, SECRET, timeout=0)

        with pytest.raises(ConfigurationError):
            VeracodeClient(KEY_ID, SECRET, rate_interval=-1)

        with pytest.raises(ConfigurationError):
            VeracodeClient(KEY_ID, SECRET, rate_burst=0)

    def test_init_invalid_credentials(self):
        with pytest.raises(ConfigurationError):
            VeracodeClient("", SECRET)

        with pytest.raises(SigningError):
            VeracodeClient(KEY_ID, "xyz")

        with pytest.raises(RegionResolutionError):
            VeracodeClient("abc-123", SECRET)

        with pytest.raises(UnknownRegionError):
            VeracodeClient("abcdefzh-123", SECRET)

    def test_new_request_rest(self, client):
        request = client.new_request("/appsec/v1/applications")

        assert request.method == "GET"
        assert request.url == "https://api.veracode.com/appsec/v1/applications"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["User-Agent"].startswith("veracode-client/")

    def test_new_request_xml(self, client):
        request = client.new_request("/api/5.0/getapplist.do", use_xml=True, headers={"Content-Type": "text/xml"})

        assert request.url == "https://analysiscenter.veracode.com/api/5.0/getapplist.do"
        assert request.headers["Content-Type"] == "text/xml"

    def test_new_request_params(self, client):
        request = client.new_request("/appsec/v1/applications", params={"name": "foo bar", "page": 0})
        assert request.url == "https://api.veracode.com/appsec/v1/applications?name=foo%20bar&page=0"

    def test_new_request_json_body(self, client):
        request = client.new_request("/api/authn/v2/teams", "post", json_data={"team_name": "Test Team"})

        assert request.method == "POST"
        assert request.body == b'{"team_name":"Test Team"}'

    def test_prepare_request_body(self, client):
        assert client._prepare_request_body(data="test string") == b"test string"
        assert client._prepare_request_body(data=b"test bytes") == b"test bytes"
        assert client._prepare_request_body() is None

    def test_do_signs_and_decodes(self, client, fake_adapter):
        fake_adapter.handler = lambda request: (200, {"guid": "abcd"}, "application/json")

        response = client.do(client.new_request("/appsec/v1/applications/abcd"), lambda body: body["guid"])

        assert response.result == "abcd"
        headers = fake_adapter.headers[0]
        assert verify_authorization_header(
            headers["Authorization"], "https://api.veracode.com/appsec/v1/applications/abcd", "GET", SECRET
        ) is True
        assert fake_adapter.timeouts == [30]

    def test_api_error(self, client, fake_adapter):
        fake_adapter.handler = lambda request: (
            404,
            {"http_code": 404, "http_status": "Not Found", "message": "Invalid UUID string: abcd"},
            "application/json",
        )

        with pytest.raises(ApiError) as exc_info:
            client.get("/appsec/v1/applications/abcd", lambda body: body)

        assert exc_info.value.status_code == 404
        assert exc_info.value.endpoint == "/appsec/v1/applications/abcd"
        assert exc_info.value.messages == ["Invalid UUID string: abcd"]

    def test_xml_error(self, client, fake_adapter):
        fake_adapter.handler = lambda request: (200, "<error>Build not found</error>", "text/xml")

        with pytest.raises(ApiError) as exc_info:
            client.get("/api/5.0/getbuildinfo.do", lambda root: root, use_xml=True, params={"app_id": 1})

        assert exc_info.value.status_code == 200
        assert exc_info.value.messages == ["Build not found"]
        assert exc_info.value.endpoint == "/api/5.0/getbuildinfo.do"

    def test_http_methods(self, client, fake_adapter):
        """Test all HTTP method shortcuts."""
        client.get('/test')
        client.post('/test', json={"data": "test"})
        client.put('/test', data="test")
        client.delete('/test')

        methods = [r.method for r in fake_adapter.requests]
        assert methods == ['GET', 'POST', 'PUT', 'DELETE']

        for request, headers in zip(fake_adapter.requests, fake_adapter.headers):
            assert verify_authorization_header(headers["Authorization"], request.url, request.method, SECRET)

    def test_cancelled_context(self, client, fake_adapter):
        ctx = Context()
        ctx.cancel()

        with pytest.raises(RateLimitCancelled):
            client.get('/test', context=ctx)

        assert fake_adapter.requests == []

    def test_redirect_is_signed_again(self, client, fake_adapter):
        def handler(request):
            if request.url.endswith("/old"):
                return 302, b"", None, {"Location": "https://api.veracode.com/new"}
            return 200, {"ok": True}, "application/json"

        fake_adapter.handler = handler

        response = client.get("/old", lambda body: body["ok"])

        assert response.result is True
        assert [r.url for r in fake_adapter.requests] == [
            "https://api.veracode.com/old", "https://api.veracode.com/new"
        ]
        nonces = {parse_authorization_header(h["Authorization"])["nonce"] for h in fake_adapter.headers}
        assert len(nonces) == 2
        assert verify_authorization_header(
            fake_adapter.headers[1]["Authorization"], "https://api.veracode.com/new", "GET", SECRET
        )

    def test_shared_rate_limiter(self, fake_adapter, clock):
        sleeps = []
        limiter = RateLimiter(interval=1, burst=2, clock=clock, sleep=sleeps.append)
        client = VeracodeClient(KEY_ID, SECRET, transport=fake_adapter, rate_limiter=limiter)

        for _ in range(3):
            client.get('/test')

        assert sleeps == [1]

    def test_context_manager(self, fake_adapter):
        """Test client as context manager."""
        with VeracodeClient(KEY_ID, SECRET, transport=fake_adapter) as client:
            assert client.session is not None

        assert fake_adapter.closed is True


class TestCredentialRotation:

    @pytest.fixture
    def client(self, fake_adapter):
        return VeracodeClient(KEY_ID, SECRET, transport=fake_adapter)

    def test_update_credentials(self, client, fake_adapter):
        client.update_credentials(EU_KEY_ID, EU_SECRET)

        assert client.region.name == "europe"
        assert client.base_rest_url == "https://api.veracode.eu/"
        assert client.base_xml_url == "https://analysiscenter.veracode.eu/"

        client.get("/appsec/v1/applications")

        headers = fake_adapter.headers[0]
        url = fake_adapter.requests[0].url
        assert url == "https://api.veracode.eu/appsec/v1/applications"
        assert parse_authorization_header(headers["Authorization"])["id"] == "99998888777766665555"
        assert verify_authorization_header(headers["Authorization"], url, "GET", EU_SECRET)

    def test_request_built_before_rotation_keeps_its_region(self, client, fake_adapter):
        request = client.new_request("/appsec/v1/applications")
        client.update_credentials(EU_KEY_ID, EU_SECRET)

        client.do(request)

        url = fake_adapter.requests[0].url
        header = fake_adapter.headers[0]["Authorization"]
        assert url == "https://api.veracode.com/appsec/v1/applications"
        assert parse_authorization_header(header)["id"] == "11112222333344445555"
        assert verify_authorization_header(header, url, "GET", SECRET)

        # the next request picks up the new pair
        client.get("/appsec/v1/applications")

        url = fake_adapter.requests[1].url
        header = fake_adapter.headers[1]["Authorization"]
        assert url == "https://api.veracode.eu/appsec/v1/applications"
        assert parse_authorization_header(header)["id"] == "99998888777766665555"

    def test_redirect_after_rotation_keeps_captured_credential(self, client, fake_adapter):
        def handler(request):
            if request.url.endswith("/old"):
                return 302, b"", None, {"Location": "https://api.veracode.com/new"}
            return 200, {}, "application/json"

        fake_adapter.handler = handler
        request = client.new_request("/old")
        client.update_credentials(EU_KEY_ID, EU_SECRET)

        client.do(request)

        ids = [parse_authorization_header(h["Authorization"])["id"] for h in fake_adapter.headers]
        assert ids == ["11112222333344445555", "11112222333344445555"]
        assert verify_authorization_header(
            fake_adapter.headers[1]["Authorization"], "https://api.veracode.com/new", "GET", SECRET
        )

    @pytest.mark.parametrize("key_id, secret", [
        ("abcdefzh-123", SECRET),
        ("abc-123", SECRET),
        (EU_KEY_ID, "not hex"),
        ("", SECRET),
    ])
    def test_invalid_update_leaves_client_unchanged(self, client, key_id, secret):
        with pytest.raises(ConfigurationError):
            client.update_credentials(key_id, secret)

        assert client.region.name == "commercial"
        assert client.transport.credential.key_id == KEY_ID

    def test_concurrent_rotation(self, client):
        """Readers never observe a base URL pair from two different regions."""
        valid_pairs = {
            ("https://api.veracode.com/", "https://analysiscenter.veracode.com/"),
            ("https://api.veracode.eu/", "https://analysiscenter.veracode.eu/"),
        }
        observed = []
        errors = []
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                region = client.region
                request = client.new_request("/appsec/v1/applications")
                observed.append((region.rest_url, region.xml_url))
                if not request.url.startswith(("https://api.veracode.com/", "https://api.veracode.eu/")):
                    errors.append(request.url)

        def writer():
            for i in range(200):
                if i % 2:
                    client.update_credentials(KEY_ID, SECRET)
                else:
                    client.update_credentials(EU_KEY_ID, EU_SECRET)

        readers = [threading.Thread(target=reader) for _ in range(4)]
        for t in readers:
            t.start()
        w = threading.Thread(target=writer)
        w.start()
        w.join(timeout=30)
        stop.set()
        for t in readers:
            t.join(timeout=30)

        assert errors == []
        assert set(observed) <= valid_pairs

        # last rotation (i == 199) went back to the commercial key
        assert client.new_request("/x").url == "https://api.veracode.com/x"
        assert client.transport.credential.key_id == KEY_ID


class TestFromCredentialsFile:

    def test_from_credentials_file(self, tmp_path, fake_adapter):
        path = tmp_path / "credentials"
        path.write_text(
            "[default]\n"
            f"veracode_api_key_id = {EU_KEY_ID}\n"
            f"veracode_api_key_secret = {EU_SECRET}\n"
        )

        client = VeracodeClient.from_credentials_file(str(path), transport=fake_adapter)

        assert client.region.name == "europe"


class TestServices:

    @pytest.fixture
    def client(self, fake_adapter):
        return VeracodeClient(KEY_ID, SECRET, transport=fake_adapter)

    def test_healthcheck(self, client, fake_adapter):
        fake_adapter.handler = lambda request: (200, b"", None)

        response = client.healthcheck.get_status()

        assert response.status_code == 200
        assert fake_adapter.requests[0].url == "https://api.veracode.com/healthcheck/status"

    def test_healthcheck_unauthorized(self, client, fake_adapter):
        fake_adapter.handler = lambda request: (401, b"", None)

        with pytest.raises(ApiError) as exc_info:
            client.healthcheck.get_status()

        assert exc_info.value.status_code == 401

    def test_get_self_credentials(self, client, fake_adapter):
        fake_adapter.handler = lambda request: (200, {
            "api_id": "11112222333344445555",
            "expiration_ts": "2025-03-01T10:20:30.000+0000",
            "revocation_ts": "2024-01-02 15:04:05 UTC",
            "_links": {"self": {"href": "https://api.veracode.com/api/authn/v2/api_credentials"}},
        }, "application/json")

        creds = client.identity.get_self_credentials()

        assert creds.api_id == "11112222333344445555"
        assert creds.expiration_ts == datetime.datetime(2025, 3, 1, 10, 20, 30, tzinfo=datetime.timezone.utc)
        assert creds.revocation_ts == datetime.datetime(2024, 1, 2, 15, 4, 5, tzinfo=datetime.timezone.utc)
        assert creds.links.self == "https://api.veracode.com/api/authn/v2/api_credentials"

    def test_generate_self_credentials(self, client, fake_adapter):
        fake_adapter.handler = lambda request: (200, {
            "api_id": "new-id",
            "api_secret": "cc" * 32,
            "expiration_ts": "2025-03-01T10:20:30Z",
        }, "application/json")

        creds = client.identity.generate_self_credentials()

        assert fake_adapter.requests[0].method == "POST"
        assert creds.api_secret == "cc" * 32

    def test_revoke_self_credentials(self, client, fake_adapter):
        fake_adapter.handler = lambda request: (204, b"", None)

        assert client.identity.revoke_self_credentials().status_code == 204
        assert fake_adapter.requests[0].method == "DELETE"

    def test_bad_timestamp_is_decode_error(self, client, fake_adapter):
        fake_adapter.handler = lambda request: (200, {"api_id": "x", "expiration_ts": "yesterday"}, "application/json")

        with pytest.raises(DecodeError):
            client.identity.get_self_credentials()

    @pytest.mark.parametrize("body", [
        {"api_id": "x", "_links": ["not-a-dict"]},
        {"api_id": "x", "expiration_ts": 1700000000},
    ])
    def test_malformed_credentials_body_is_decode_error(self, client, fake_adapter, body):
        fake_adapter.handler = lambda request: (200, body, "application/json")

        with pytest.raises(DecodeError):
            client.identity.get_self_credentials()
