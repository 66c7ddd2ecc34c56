"""
Shared pytest fixtures for the credential helper tests.

This module provides:
- TokenEndpoint: a local HTTP server standing in for the Actions token endpoint
- Environment isolation for the ACTIONS_ID_TOKEN_* and proxy variables
- An in-memory audit sink and a helper wired to it
"""

import io
import json
import os
import socket
import sys
import threading
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import List
from urllib.parse import parse_qs, urlsplit

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from oidc_helper.config import AUDIENCE_VAR, REQUEST_TOKEN_VAR, REQUEST_URL_VAR
from oidc_helper.creds import GitHubActionsOidcHelper
from oidc_helper.loggingx import AuditLog


MOCK_TOKEN = "eyJhbGciOiJSUzI1NiIsInR5cCI6IkpXVCJ9.test.token"
REQUEST_TOKEN = "test-token"
REGISTRY_URL = "https://registry.example.com"

PROXY_VARS = [
    "HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY",
    "http_proxy", "https_proxy", "all_proxy",
]


# =============================================================================
# Token endpoint
# =============================================================================

@dataclass
class RecordedRequest:
    """A request received by the mock token endpoint."""
    path: str
    query: str
    headers: dict

    @property
    def params(self) -> dict:
        return {k: v[0] for k, v in parse_qs(self.query).items()}


@dataclass
class TokenEndpoint:
    """Configurable reply plus a record of every request received."""
    base_url: str = ""
    status: int = 200
    body: str = field(default_factory=lambda: json.dumps({"value": MOCK_TOKEN}))
    content_type: str = "application/json"
    requests: List[RecordedRequest] = field(default_factory=list)

    @property
    def url(self) -> str:
        return f"{self.base_url}/token"

    def reply(self, status: int = 200, body: str = "", content_type: str = "text/plain") -> None:
        self.status = status
        self.body = body
        self.content_type = content_type


class _TokenHandler(BaseHTTPRequestHandler):

    def do_GET(self):
        endpoint = self.server.endpoint
        parsed = urlsplit(self.path)
        endpoint.requests.append(RecordedRequest(
            path=parsed.path,
            query=parsed.query,
            headers={k.lower(): v for k, v in self.headers.items()},
        ))

        body = endpoint.body.encode("utf-8")
        self.send_response(endpoint.status)
        self.send_header("Content-Type", endpoint.content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def token_endpoint():
    """Run a token endpoint on a free local port for the duration of a test."""
    endpoint = TokenEndpoint()
    server = ThreadingHTTPServer(("127.0.0.1", 0), _TokenHandler)
    server.endpoint = endpoint
    endpoint.base_url = f"http://127.0.0.1:{server.server_address[1]}"

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield endpoint
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)


@pytest.fixture
def closed_port_url():
    """URL of a local port nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}/token"


# =============================================================================
# Environment
# =============================================================================

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without token request settings or proxies."""
    for name in [REQUEST_URL_VAR, REQUEST_TOKEN_VAR, AUDIENCE_VAR] + PROXY_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    return monkeypatch


@pytest.fixture
def oidc_env(monkeypatch):
    """Return a function setting the token request variables."""
    def _set(url=None, token=None, audience=None):
        for name, value in ((REQUEST_URL_VAR, url), (REQUEST_TOKEN_VAR, token),
                            (AUDIENCE_VAR, audience)):
            if value is None:
                monkeypatch.delenv(name, raising=False)
            else:
                monkeypatch.setenv(name, value)
    return _set


# =============================================================================
# Helper
# =============================================================================

@pytest.fixture
def audit_sink():
    return io.StringIO()


@pytest.fixture
def helper(audit_sink):
    return GitHubActionsOidcHelper(AuditLog(audit_sink))


def audit_lines(sink: io.StringIO) -> List[str]:
    return sink.getvalue().splitlines()


def audit_messages(sink: io.StringIO) -> List[str]:
    """Audit entries with the timestamp prefix removed."""
    return [line.split(": ", 1)[1] for line in audit_lines(sink)]
