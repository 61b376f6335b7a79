"""Model backend adapters and the router that selects between them."""

from .base import BackendId, ModelBackend
from .llamacpp import LlamaCppBackend
from .ollama import OllamaBackend
from .together import TogetherBackend
from .router import INVALID_MODEL_ERROR, ModelRouter, create_backends

__all__ = [
    "BackendId",
    "ModelBackend",
    "LlamaCppBackend",
    "OllamaBackend",
    "TogetherBackend",
    "ModelRouter",
    "create_backends",
    "INVALID_MODEL_ERROR",
]
