"""Ollama backend (``/api/generate`` endpoint, non-streaming)."""

from typing import Any

import httpx

from ..errors import BackendFailure
from .base import BackendId, ModelBackend


class OllamaBackend(ModelBackend):
    """Local Ollama model server."""

    backend_id = BackendId.OLLAMA

    def __init__(self, client: httpx.Client, base_url: str, model_name: str, timeout: float = 60):
        super().__init__(client, base_url, timeout)
        self.model_name = model_name

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/api/generate"

    def build_request(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model_name,
            "prompt": prompt,
            "stream": False,
        }

    def parse_response(self, data: Any) -> str:
        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str) or not text:
            raise BackendFailure("Invalid response from Ollama")
        return text
