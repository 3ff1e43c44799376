import json

import httpx
import pytest
from fastapi.testclient import TestClient

from compliance_coach.core.config import Settings
from compliance_coach.main import create_app

ENV_VARS = (
    "AZURE_OPENAI_KEY", "AZURE_OPENAI_ENDPOINT", "ENVIRONMENT", "NODE_ENV",
    "PORT", "HOST", "ALLOWED_ORIGINS", "RATE_LIMIT", "RATE_LIMIT_WINDOW_SECONDS",
    "LOG_LEVEL", "UPSTREAM_TIMEOUT", "UPSTREAM_MAX_ATTEMPTS", "FAIL_FAST",
)

FAKE_ENDPOINT = "https://fake-azure.test/openai/deployments/gpt/chat/completions"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_settings():
    def factory(**overrides) -> Settings:
        values = {
            "AZURE_OPENAI_KEY": "test-secret-key",
            "AZURE_OPENAI_ENDPOINT": FAKE_ENDPOINT,
            "ENVIRONMENT": "development",
            "FAIL_FAST": False,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return factory


@pytest.fixture
def valid_body():
    return {
        "industry": "Healthcare",
        "region": "European Union",
        "fileContent": "Project plan: migrate patient records to SharePoint Online.",
    }


def completion(content):
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


class FakeUpstream:
    """Records calls and answers with a configurable handler"""

    def __init__(self):
        self.requests = []
        self.handler = lambda request: httpx.Response(200, json=completion("X"))

    def respond_with(self, status_code=200, json_body=None, content=None):
        def handler(request):
            if content is not None:
                return httpx.Response(status_code, content=content)
            return httpx.Response(status_code, json=json_body)

        self.handler = handler

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        return self.handler(request)

    @property
    def last_json(self):
        return json.loads(self.requests[-1].content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def make_client(make_settings, upstream):
    clients = []

    def factory(**overrides) -> TestClient:
        app = create_app(make_settings(**overrides), transport=upstream.transport)
        client = TestClient(app, raise_server_exceptions=False)
        client.__enter__()
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client):
    return make_client()


@pytest.fixture
def completion_payload():
    return completion
