"""Pytest configuration and shared fixtures."""

import json

import httpx
import pytest
from pathlib import Path
from filecontext.config import Config


@pytest.fixture
def storage(tmp_path: Path) -> Path:
    """Create a storage root with a couple of files."""
    root = tmp_path / "storage"
    root.mkdir()

    (root / "notes.txt").write_text("hello")
    (root / "src").mkdir()
    (root / "src" / "app.ts").write_text("code")

    return root


@pytest.fixture
def config(storage: Path) -> Config:
    """Provide a test configuration bound to the storage fixture."""
    return Config(
        storage_root=storage,
        llamacpp_base_url="http://llama.test",
        ollama_base_url="http://ollama.test",
        together_base_url="https://together.test",
        together_api_key="test-key",
        model_name="llama2",
        default_backend="llamacpp",
        request_timeout=5,
    )


class RecordingBackend:
    """httpx handler that records requests and answers like all three backends."""

    def __init__(self, fail_with: Exception | None = None):
        self.requests: list[httpx.Request] = []
        self.fail_with = fail_with

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with

        path = request.url.path
        if path == "/completion":
            return httpx.Response(200, json={"content": "llama answer"})
        if path == "/api/generate":
            return httpx.Response(200, json={"response": "ollama answer"})
        if path == "/inference":
            return httpx.Response(200, json={"output": {"text": "together answer"}})
        return httpx.Response(404, json={"error": "unknown endpoint"})

    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def http_client(backend: RecordingBackend) -> httpx.Client:
    client = httpx.Client(transport=httpx.MockTransport(backend))
    yield client
    client.close()
