"""Pytest configuration - loads .env for live tests and stubs the HTTP layer."""

import io
import json
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from email.message import Message
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv

from rocketchat_cli.core.client import APIClient
from rocketchat_cli.core.types import CHANNELS, DIRECT_MESSAGES, GROUPS, RoomKind, Token

# Load .env from project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

SERVER_URL = "https://chat.example.com"
AUTH_TOKEN = "valid-auth-token"
USER_ID = "valid-user-id"

UNAUTHED_BODY = {"status": "error", "message": "You must be logged in to do this."}


# =============================================================================
# Stub HTTP server
# =============================================================================


@dataclass
class StubbedRoute:
    method: str
    path: str
    status: int
    body: Any
    query: dict[str, str]
    json_body: Any = None

    def matches(self, request: "RecordedRequest") -> bool:
        if self.method != request.method or self.path != request.path:
            return False
        if self.query != request.query:
            return False
        return self.json_body is None or self.json_body == request.json_body


@dataclass
class RecordedRequest:
    method: str
    path: str
    query: dict[str, str]
    json_body: Any
    headers: dict[str, str] = field(default_factory=dict)


class FakeResponse:
    def __init__(self, body: bytes, status: int = 200):
        self._body = body
        self.status = status

    def read(self) -> bytes:
        return self._body

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        return None


class StubServer:
    """
    Stands in for ``urllib.request.urlopen``.

    Routes registered later win, so register catch-alls first. Requests that
    do not carry the valid auth token get the server's login-required answer.
    """

    def __init__(self) -> None:
        self.routes: list[StubbedRoute] = []
        self.requests: list[RecordedRequest] = []

    def stub(
        self,
        method: str,
        path: str,
        body: Any = None,
        status: int = 200,
        query: dict[str, str] | None = None,
        json_body: Any = None,
    ) -> None:
        self.routes.append(
            StubbedRoute(
                method=method,
                path=f"/api/v1/{path}",
                status=status,
                body={"success": True} if body is None else body,
                query=query or {},
                json_body=json_body,
            )
        )

    def __call__(self, req: urllib.request.Request, timeout: float | None = None) -> FakeResponse:
        parts = urllib.parse.urlsplit(req.full_url)
        query = {k: v[0] for k, v in urllib.parse.parse_qs(parts.query).items()}
        recorded = RecordedRequest(
            method=req.get_method(),
            path=parts.path,
            query=query,
            json_body=json.loads(req.data) if req.data else None,
            headers=dict(req.header_items()),
        )
        self.requests.append(recorded)

        if req.get_header("X-auth-token") != AUTH_TOKEN or req.get_header("X-user-id") != USER_ID:
            return self._respond(req, 401, UNAUTHED_BODY)

        for route in reversed(self.routes):
            if route.matches(recorded):
                return self._respond(req, route.status, route.body)
        raise AssertionError(f"Unstubbed request: {recorded}")

    @staticmethod
    def _respond(req: urllib.request.Request, status: int, body: Any) -> FakeResponse:
        raw = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
        if status >= 400:
            raise urllib.error.HTTPError(req.full_url, status, "Error", Message(), io.BytesIO(raw))
        return FakeResponse(raw, status)


@pytest.fixture
def server(monkeypatch: pytest.MonkeyPatch) -> StubServer:
    stub = StubServer()
    monkeypatch.setattr(urllib.request, "urlopen", stub)
    return stub


@pytest.fixture
def token() -> Token:
    return Token(auth_token=AUTH_TOKEN, user_id=USER_ID)


@pytest.fixture
def api(token: Token) -> APIClient:
    return APIClient(base_url=SERVER_URL, token=token, timeout=60)


@pytest.fixture(params=[CHANNELS, GROUPS, DIRECT_MESSAGES], ids=lambda kind: kind.name)
def kind(request: pytest.FixtureRequest) -> RoomKind:
    return request.param
