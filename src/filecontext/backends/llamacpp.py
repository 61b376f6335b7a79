"""llama.cpp server backend (``/completion`` endpoint)."""

from typing import Any

from ..errors import BackendFailure
from .base import BackendId, ModelBackend


TEMPERATURE = 0.7
N_PREDICT = 800
STOP_SEQUENCES = ["###", "### User:", "### System:"]


class LlamaCppBackend(ModelBackend):
    """Local llama.cpp completion server."""

    backend_id = BackendId.LLAMACPP

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/completion"

    def build_request(self, prompt: str) -> dict[str, Any]:
        return {
            "prompt": prompt,
            "temperature": TEMPERATURE,
            "n_predict": N_PREDICT,
            "stop": list(STOP_SEQUENCES),
            "stream": False,
        }

    def parse_response(self, data: Any) -> str:
        content = data.get("content") if isinstance(data, dict) else None
        if not isinstance(content, str) or not content:
            raise BackendFailure("Invalid response from llama.cpp server")
        return content
