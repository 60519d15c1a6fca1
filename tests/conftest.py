"""
Pytest configuration and fixtures for restbridge tests.
"""

import json
import sys
from pathlib import Path

import httpx
import pytest

# Add the repository root to path for imports
# This allows `from restbridge.catalog import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from restbridge.catalog import ToolCatalog  # noqa: E402
from restbridge.dispatcher import OperationDispatcher  # noqa: E402
from restbridge.profiles import ApiProfileRegistry  # noqa: E402
from restbridge.resources import DEFAULT_SCHEMAS  # noqa: E402
from restbridge.session import SessionStore  # noqa: E402


class RecordingBackend:
    """
    Fake REST backend for httpx.MockTransport.

    Every request is recorded; responses come from a queue or, when the
    queue is empty, from a default 200 with an empty JSON list.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._responses: list = []

    def respond(self, status_code: int = 200, **kwargs) -> "RecordingBackend":
        self._responses.append(httpx.Response(status_code, **kwargs))
        return self

    def fail_with(self, error: Exception) -> "RecordingBackend":
        self._responses.append(error)
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            return httpx.Response(200, json=[])
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)


@pytest.fixture
def backend():
    """Recording fake backend."""
    return RecordingBackend()


@pytest.fixture
def dispatcher(backend):
    """Dispatcher whose shared client talks to the fake backend."""
    client = httpx.AsyncClient(transport=httpx.MockTransport(backend))
    return OperationDispatcher(timeout=5.0, http_client=client)


@pytest.fixture
def profile_registry():
    """Registry with the built-in profiles (FakeRESTApi first)."""
    return ApiProfileRegistry.default()


@pytest.fixture
def session_store(profile_registry):
    return SessionStore(profile_registry)


@pytest.fixture
def session(session_store):
    """A fresh session on the default profile."""
    return session_store.create()


@pytest.fixture
def catalog():
    return ToolCatalog(DEFAULT_SCHEMAS)
