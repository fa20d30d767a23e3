"""Shared fixtures: gateway configuration and a fake GitHub"""
import json

import httpx
import pytest

from config import GatewayConfig

CLIENT_ID = "Iv1.testclient"
CLIENT_SECRET = "super-secret-client-value"
ENCRYPTION_SECRET = "test-encryption-secret"
RETURN_URL = "https://app.example.com/dashboard"


def target_response(status_code: int = 200, body: bytes = b"", headers=None) -> httpx.Response:
    """Response whose body is still unread, like one coming off a real connection"""
    return httpx.Response(status_code, headers=headers, stream=httpx.ByteStream(body))


def make_config(**overrides) -> GatewayConfig:
    values = dict(
        client_id=CLIENT_ID,
        client_secret=CLIENT_SECRET,
        encryption_secret=ENCRYPTION_SECRET,
        app_slug="cent-accounting",
        redirect_allowlist=["https://app.example.com", "http://localhost:5173/"],
    )
    values.update(overrides)
    return GatewayConfig(**values)


class FakeGitHub:
    """Stands in for github.com and api.github.com behind an httpx.MockTransport"""

    def __init__(self):
        self.requests = []
        self.token_status = 200
        self.token_body = {
            "access_token": "ghu_access",
            "refresh_token": "ghr_refresh",
            "expires_in": 28800,
            "token_type": "bearer",
            "scope": "",
        }
        self.installations_status = 200
        self.installations_body = {"total_count": 1, "installations": [{"id": 42}]}
        self.proxy_handler = None

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "github.com" and request.url.path == "/login/oauth/access_token":
            return httpx.Response(self.token_status, json=self.token_body)
        if request.url.host == "api.github.com" and request.url.path == "/user/installations":
            return httpx.Response(self.installations_status, json=self.installations_body)
        if self.proxy_handler is not None:
            return self.proxy_handler(request)
        return target_response(404, b"not found")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def token_requests(self):
        return [r for r in self.requests if r.url.path == "/login/oauth/access_token"]

    def token_request_body(self, index: int = 0) -> dict:
        return json.loads(self.token_requests()[index].content)

    def paths(self):
        return [f"{r.url.host}{r.url.path}" for r in self.requests]


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def github():
    return FakeGitHub()
