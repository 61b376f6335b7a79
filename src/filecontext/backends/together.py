"""Together hosted inference API backend."""

from typing import Any, Optional

import httpx

from ..errors import BackendFailure
from .base import BackendId, ModelBackend


MAX_TOKENS = 512


class TogetherBackend(ModelBackend):
    """Hosted inference API authenticated with a bearer token."""

    backend_id = BackendId.TOGETHER

    def __init__(
        self,
        client: httpx.Client,
        base_url: str,
        model_name: str,
        api_key: Optional[str] = None,
        timeout: float = 60,
    ):
        super().__init__(client, base_url, timeout)
        self.model_name = model_name
        self.api_key = api_key

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/inference"

    def headers(self) -> Optional[dict[str, str]]:
        if not self.api_key:
            raise BackendFailure("TOGETHER_API_KEY not configured")
        return {"Authorization": f"Bearer {self.api_key}"}

    def build_request(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model_name,
            "prompt": prompt,
            "max_tokens": MAX_TOKENS,
        }

    def parse_response(self, data: Any) -> str:
        output = data.get("output") if isinstance(data, dict) else None
        text = output.get("text") if isinstance(output, dict) else None
        if not isinstance(text, str) or not text:
            raise BackendFailure("Invalid response from Together: missing output.text")
        return text
