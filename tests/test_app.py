"""End-to-end tests for the HTTP surface in proxy/app.py"""
import json
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
from fastapi.testclient import TestClient

from oauth import StateCodec
from proxy import create_app

from conftest import CLIENT_SECRET, ENCRYPTION_SECRET, RETURN_URL, make_config, target_response


def _query(url: str) -> dict:
    return {k: v[0] for k, v in parse_qs(urlsplit(url).query).items()}


@pytest.fixture
def client(config, github):
    app = create_app(config, transport=github.transport())
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client


@pytest.fixture
def state(client):
    response = client.get("/authorize", params={"redirect_uri": RETURN_URL})
    return _query(response.headers["location"])["state"]


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_error_body_documented(self, client):
        schema = client.get("/openapi.json").json()
        assert set(schema["components"]["schemas"]["ErrorResponse"]["properties"]) == {"error", "kind"}
        proxy_responses = schema["paths"]["/proxy"]["get"]["responses"]
        assert proxy_responses["502"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
        refresh_responses = schema["paths"]["/refresh-token"]["post"]["responses"]
        assert "400" in refresh_responses


class TestAuthorizeEndpoint:
    def test_redirects_to_github(self, client):
        response = client.get("/authorize", params={"redirect_uri": RETURN_URL})
        assert response.status_code == 302
        location = response.headers["location"]
        assert location.startswith("https://github.com/login/oauth/authorize?")
        assert StateCodec(ENCRYPTION_SECRET).decode(_query(location)["state"]) == RETURN_URL

    def test_missing_redirect_uri(self, client):
        response = client.get("/authorize")
        assert response.status_code == 400
        assert response.json() == {"error": "`redirect_uri` is required.", "kind": "validation"}

    def test_disallowed_redirect_uri(self, client):
        response = client.get("/authorize", params={"redirect_uri": "https://evil.example.org/"})
        assert response.status_code == 400
        assert "location" not in response.headers
        assert response.json()["kind"] == "validation"


class TestAuthorizedEndpoint:
    def test_returning_user(self, client, github, state):
        response = client.get("/authorized", params={"code": "abc", "state": state})
        assert response.status_code == 302
        location = response.headers["location"]
        assert location.startswith(RETURN_URL)
        assert json.loads(_query(location)["github_authorized"])["access_token"] == "ghu_access"

    def test_new_user_forwards_identical_state(self, client, github, state):
        github.installations_body = {"total_count": 0, "installations": []}
        response = client.get("/authorized", params={"code": "abc", "state": state})
        assert response.status_code == 302
        location = response.headers["location"]
        assert location.startswith("https://github.com/apps/cent-accounting/installations/new")
        assert _query(location)["state"] == state

    def test_missing_code(self, client, state):
        response = client.get("/authorized", params={"state": state})
        assert response.status_code == 400
        assert response.json()["kind"] == "validation"

    def test_tampered_state(self, client):
        foreign = StateCodec("other-secret").encode(RETURN_URL)
        response = client.get("/authorized", params={"code": "abc", "state": foreign})
        assert response.status_code == 400
        assert response.json()["kind"] == "state_tampered"

    def test_expired_state(self, client):
        expired = StateCodec(ENCRYPTION_SECRET).encode(RETURN_URL, expires_at=1.0)
        response = client.get("/authorized", params={"code": "abc", "state": expired})
        assert response.status_code == 400
        assert response.json()["kind"] == "state_expired"

    def test_provider_error_redirects_back(self, client, github, state):
        response = client.get("/authorized", params={"state": state, "error": "access_denied"})
        assert response.status_code == 302
        assert _query(response.headers["location"])["error"] == "access_denied"
        assert github.requests == []

    def test_upstream_failure_never_leaks_secret(self, client, github, state):
        github.token_status = 500
        github.token_body = {"message": f"echo {CLIENT_SECRET}"}
        response = client.get("/authorized", params={"code": "abc", "state": state})
        assert response.status_code == 500
        assert response.json()["kind"] == "upstream"
        assert CLIENT_SECRET not in response.text


class TestInstalledEndpoint:
    def test_resumes_authorize(self, client, state):
        response = client.get("/installed", params={"state": state, "installation_id": "1", "setup_action": "install"})
        assert response.status_code == 302
        assert response.headers["location"].startswith("https://github.com/login/oauth/authorize?")


class TestRefreshEndpoint:
    def test_returns_bundle(self, client, github):
        response = client.post("/refresh-token", json={"refreshToken": "ghr_old"})
        assert response.status_code == 200
        assert response.json()["access_token"] == "ghu_access"

    def test_missing_refresh_token(self, client):
        response = client.post("/refresh-token", json={})
        assert response.status_code == 400
        assert response.json()["kind"] == "validation"

    def test_non_json_body(self, client):
        response = client.post("/refresh-token", content=b"nope", headers={"Content-Type": "application/json"})
        assert response.status_code == 400

    def test_provider_error(self, client, github):
        github.token_body = {"error": "bad_refresh_token"}
        response = client.post("/refresh-token", json={"refreshToken": "ghr_old"})
        assert response.status_code == 502
        assert "bad_refresh_token" in response.json()["error"]


class TestTokenEndpoint:
    def test_unwraps_session(self, client):
        session = StateCodec(ENCRYPTION_SECRET).encode("ghu_access")
        response = client.post("/token", json={"session": session})
        assert response.status_code == 200
        assert response.json() == {"token": "ghu_access"}

    def test_invalid_session(self, client):
        response = client.post("/token", json={"session": "garbage"})
        assert response.status_code == 400
        assert response.json()["kind"].startswith("state_")

    def test_missing_session(self, client):
        response = client.post("/token", json={})
        assert response.status_code == 400


class TestSessionFlow:
    def test_session_artifacts_round_trip_through_token_endpoint(self, github):
        app = create_app(make_config(credential_delivery="session"), transport=github.transport())
        with TestClient(app, follow_redirects=False) as client:
            location = client.get("/authorize", params={"redirect_uri": RETURN_URL}).headers["location"]
            state = _query(location)["state"]
            location = client.get("/authorized", params={"code": "abc", "state": state}).headers["location"]
            session = _query(location)["github_session"]

            response = client.post("/token", json={"session": session})

        assert response.json() == {"token": "ghu_access"}


class TestPathPrefix:
    def test_routes_mounted_under_prefix(self, github):
        app = create_app(make_config(oauth_path_prefix="api/github-oauth/"), transport=github.transport())
        with TestClient(app, follow_redirects=False) as client:
            response = client.get("/api/github-oauth/authorize", params={"redirect_uri": RETURN_URL})
            assert response.status_code == 302
            assert client.get("/authorize", params={"redirect_uri": RETURN_URL}).status_code == 404


class TestProxyEndpoint:
    def test_method_override_forwards_body(self, client, github):
        seen = []

        def target(request):
            seen.append(request)
            return target_response(207, b"<multistatus/>", headers={"Content-Type": "application/xml"})

        github.proxy_handler = target
        body = b"<propfind/>"
        response = client.post(
            "/proxy",
            params={"url": "https://dav.example.com/files/", "method": "PROPFIND"},
            content=body,
            headers={"Depth": "1", "Origin": "https://app.example.com"},
        )

        assert response.status_code == 207
        assert response.content == b"<multistatus/>"
        assert seen[0].method == "PROPFIND"
        assert seen[0].content == body
        assert seen[0].headers["depth"] == "1"
        assert "origin" not in seen[0].headers

    def test_get_body_is_not_forwarded(self, client, github):
        seen = []

        def target(request):
            seen.append(request)
            return target_response(200, b"ok")

        github.proxy_handler = target
        response = client.request("GET", "/proxy", params={"url": "https://example.com/x"}, content=b"ignored")

        assert response.status_code == 200
        assert seen[0].method == "GET"
        assert seen[0].content == b""

    def test_get_override_on_post_drops_body(self, client, github):
        seen = []

        def target(request):
            seen.append(request)
            return target_response(200, b"ok")

        github.proxy_handler = target
        client.post("/proxy", params={"url": "https://example.com/x", "method": "GET"}, content=b"ignored")
        assert seen[0].method == "GET"
        assert seen[0].content == b""

    def test_security_headers_scrubbed(self, client, github):
        github.proxy_handler = lambda request: target_response(
            200,
            b"ok",
            headers={
                "Content-Security-Policy": "default-src 'none'",
                "X-Frame-Options": "DENY",
                "Access-Control-Allow-Origin": "https://target.example.com",
                "X-Custom": "kept",
            },
        )
        response = client.get("/proxy", params={"url": "https://target.example.com/"})

        assert response.status_code == 200
        assert "content-security-policy" not in response.headers
        assert "x-frame-options" not in response.headers
        assert "access-control-allow-origin" not in response.headers
        assert response.headers["x-custom"] == "kept"

    def test_gateway_cors_replaces_upstream_origin(self, client, github):
        github.proxy_handler = lambda request: target_response(
            200, b"ok", headers={"Access-Control-Allow-Origin": "https://target.example.com"}
        )
        response = client.get(
            "/proxy",
            params={"url": "https://target.example.com/"},
            headers={"Origin": "https://app.example.com"},
        )
        assert response.headers["access-control-allow-origin"] == "https://app.example.com"

    @pytest.mark.asyncio
    async def test_utf8_response_header_relayed(self, config, github):
        # TestClient re-encodes response headers as ASCII; ASGITransport keeps the raw bytes
        disposition = 'attachment; filename="数据.txt"'.encode("utf-8")
        github.proxy_handler = lambda request: target_response(
            200, b"data", headers=[(b"Content-Disposition", disposition)]
        )
        app = create_app(config, transport=github.transport())
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://gateway") as client:
            response = await client.get("/proxy", params={"url": "https://dav.example.com/f"})

        assert response.status_code == 200
        assert response.content == b"data"
        assert dict(response.headers.raw)[b"content-disposition"] == disposition

    def test_utf8_request_header_forwarded(self, client, github):
        seen = []

        def target(request):
            seen.append(request)
            return target_response(201)

        github.proxy_handler = target
        file_name = "数据.txt".encode("utf-8")
        response = client.put(
            "/proxy",
            params={"url": "https://dav.example.com/f"},
            content=b"data",
            headers=[(b"X-File-Name", file_name)],
        )

        assert response.status_code == 201
        assert len(seen) == 1
        assert dict(seen[0].headers.raw)[b"x-file-name"] == file_name

    def test_caldav_report_verb_accepted(self, client, github):
        seen = []

        def target(request):
            seen.append(request)
            return target_response(207, b"<multistatus/>")

        github.proxy_handler = target
        response = client.request(
            "REPORT", "/proxy", params={"url": "https://cal.example.com/cal/"}, content=b"<calendar-query/>"
        )

        assert response.status_code == 207
        assert seen[0].method == "REPORT"
        assert seen[0].content == b"<calendar-query/>"

    def test_missing_url(self, client):
        response = client.get("/proxy")
        assert response.status_code == 400
        assert response.json()["kind"] == "proxy_target"

    def test_invalid_url(self, client):
        response = client.get("/proxy", params={"url": "not a url"})
        assert response.status_code == 400

    def test_network_failure(self, client, github):
        def target(request):
            raise httpx.ConnectError("connection refused", request=request)

        github.proxy_handler = target
        response = client.get("/proxy", params={"url": "https://down.example.com/"})
        assert response.status_code == 502
        assert response.json()["kind"] == "proxy_network"


class TestCors:
    def test_preflight_from_allowed_origin(self, client):
        response = client.options(
            "/proxy",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "PROPFIND",
                "Access-Control-Request-Headers": "Depth",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "https://app.example.com"
        assert response.headers["access-control-max-age"] == "86400"

    def test_preflight_from_unknown_origin(self, client):
        response = client.options(
            "/proxy",
            headers={"Origin": "https://evil.example.org", "Access-Control-Request-Method": "GET"},
        )
        assert response.status_code == 400
