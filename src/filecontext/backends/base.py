"""Abstract model backend interface."""

import logging
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional

import httpx

from ..errors import BackendFailure
from ..models import QueryResponse

logger = logging.getLogger(__name__)


class BackendId(str, Enum):
    """The model-serving protocols a query can be routed to."""

    LLAMACPP = "llamacpp"
    OLLAMA = "ollama"
    TOGETHER = "together"


class ModelBackend(ABC):
    """Base class for backend adapters.

    Subclasses describe their protocol (URL, body, headers, answer field);
    :meth:`query` performs exactly one HTTP call and turns every failure
    into an in-band :class:`QueryResponse` error.
    """

    backend_id: BackendId

    def __init__(self, client: httpx.Client, base_url: str, timeout: float = 60):
        """Initialize the adapter.

        Args:
            client: Shared HTTP client
            base_url: Backend root URL, without trailing slash
            timeout: Per-request timeout in seconds
        """
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    @abstractmethod
    def endpoint(self) -> str:
        """Full URL the prompt is posted to."""
        pass

    @abstractmethod
    def build_request(self, prompt: str) -> dict[str, Any]:
        """Build the backend-specific JSON body for an already formatted prompt."""
        pass

    @abstractmethod
    def parse_response(self, data: Any) -> str:
        """Extract the answer text.

        Raises:
            BackendFailure: If the body lacks the expected field
        """
        pass

    def headers(self) -> Optional[dict[str, str]]:
        return None

    def query(self, prompt: str, context: str = "") -> QueryResponse:
        """Send a prompt to the backend.

        Args:
            prompt: Fully formatted prompt
            context: Raw context the prompt was built from (logged only)

        Returns:
            QueryResponse; on any failure ``text`` is empty and ``error`` set
        """
        model = self.backend_id.value
        payload = self.build_request(prompt)
        logger.debug(
            "Sending request to %s at %s (prompt=%d chars, context=%d chars)",
            model,
            self.endpoint,
            len(prompt),
            len(context),
        )

        start = time.monotonic()
        try:
            response = self.client.post(
                self.endpoint, json=payload, headers=self.headers(), timeout=self.timeout
            )
            response.raise_for_status()
            try:
                data = response.json()
            except ValueError as e:
                raise BackendFailure(f"Invalid response from {model}: body is not JSON") from e
            text = self.parse_response(data)
        except httpx.HTTPStatusError as e:
            logger.error(
                "%s returned HTTP %d: %s", model, e.response.status_code, e.response.text[:500]
            )
            return QueryResponse(text="", model=model, error=str(e))
        except httpx.HTTPError as e:
            logger.error("%s network error: %s", model, e)
            return QueryResponse(text="", model=model, error=str(e) or type(e).__name__)
        except BackendFailure as e:
            logger.error("%s error: %s", model, e)
            return QueryResponse(text="", model=model, error=str(e))

        logger.debug(
            "Received %s response in %.2fs (%d chars)", model, time.monotonic() - start, len(text)
        )
        return QueryResponse(text=text, model=model)
