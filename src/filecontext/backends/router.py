"""Routes formatted prompts to the selected model backend."""

import logging
from typing import Mapping, Optional

import httpx

from ..config import Config
from ..models import QueryResponse
from .base import BackendId, ModelBackend
from .llamacpp import LlamaCppBackend
from .ollama import OllamaBackend
from .together import TogetherBackend

logger = logging.getLogger(__name__)

INVALID_MODEL_ERROR = "Invalid model specified"


def create_backends(config: Config, client: httpx.Client) -> dict[BackendId, ModelBackend]:
    """Build one adapter per backend from configuration."""
    timeout = config.request_timeout
    return {
        BackendId.LLAMACPP: LlamaCppBackend(client, config.llamacpp_base_url, timeout=timeout),
        BackendId.OLLAMA: OllamaBackend(
            client, config.ollama_base_url, config.model_name, timeout=timeout
        ),
        BackendId.TOGETHER: TogetherBackend(
            client,
            config.together_base_url,
            config.model_name,
            api_key=config.together_api_key,
            timeout=timeout,
        ),
    }


class ModelRouter:
    """Dispatches prompts by backend id.

    Holds a fixed mapping from :class:`BackendId` to adapter. Unknown ids are
    answered in-band without any network call; backend failures are already
    in-band by the time they reach the router.

    Usage:
        with ModelRouter(config) as router:
            response = router.query(prompt, context, "ollama")
    """

    def __init__(
        self,
        config: Config,
        client: Optional[httpx.Client] = None,
        backends: Optional[Mapping[BackendId, ModelBackend]] = None,
    ):
        """Initialize the router.

        Args:
            config: Backend URLs, API key, model name and timeout
            client: HTTP client to share between adapters (one is created if omitted)
            backends: Explicit adapter mapping, mostly for tests
        """
        self.config = config
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=config.request_timeout)
        self._backends = dict(backends) if backends is not None else create_backends(
            config, self.client
        )

    def available(self) -> list[str]:
        return [backend_id.value for backend_id in self._backends]

    def get(self, selector: str) -> Optional[ModelBackend]:
        try:
            return self._backends.get(BackendId(selector))
        except ValueError:
            return None

    def query(self, prompt: str, context: str, backend: str) -> QueryResponse:
        """Send a formatted prompt to the selected backend.

        Args:
            prompt: Fully formatted prompt
            context: Raw context text, passed through for logging
            backend: Backend selector, e.g. ``"llamacpp"``

        Returns:
            QueryResponse; never raises for backend-level failures
        """
        adapter = self.get(backend)
        if adapter is None:
            logger.warning("Query for unknown model %r", backend)
            return QueryResponse(text="", model=backend, error=INVALID_MODEL_ERROR)

        logger.debug("Routing query to %s", backend)
        return adapter.query(prompt, context)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "ModelRouter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
