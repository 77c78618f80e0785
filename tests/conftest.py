"""
Pytest configuration and fixtures
"""
import json
from typing import Any, Callable, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from nexis.server.app import app, get_http_client
from nexis.server.config import Settings, get_settings


class FakeGroq:
    """Records outbound requests and answers with a canned response."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.body: Any = completion_body("{}")
        self.raise_exc = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_exc is not None:
            raise self.raise_exc
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status_code, json=self.body)
        return httpx.Response(self.status_code, text=self.body)

    def reply(self, content: str) -> None:
        self.status_code = 200
        self.body = completion_body(content)

    @property
    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)


def completion_body(content: str) -> Dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def groq() -> FakeGroq:
    return FakeGroq()


@pytest.fixture
def settings() -> Settings:
    return Settings(groq_api_key="gsk_test_key_123", groq_model="test-model")


@pytest.fixture
def make_client(groq: FakeGroq) -> Callable[[Settings], TestClient]:
    def _make(s: Settings) -> TestClient:
        def _http_client():
            client = httpx.Client(transport=httpx.MockTransport(groq.handler))
            try:
                yield client
            finally:
                client.close()

        app.dependency_overrides[get_settings] = lambda: s
        app.dependency_overrides[get_http_client] = _http_client
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, settings) -> TestClient:
    return make_client(settings)
