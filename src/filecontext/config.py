"""Configuration management for file-context."""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


load_dotenv()


DEFAULT_STORAGE_ROOT = Path("storage")
DEFAULT_BACKEND = "llamacpp"
MAX_UPLOAD_SIZE = 10 * 1024 * 1024  # 10MB


class Config(BaseModel):
    """Application configuration.

    Built once at startup and handed to the components that need it. Nothing
    below the CLI/server entry points reads the process environment.
    """

    model_config = ConfigDict(frozen=True)

    # Storage
    storage_root: Path = Field(default=DEFAULT_STORAGE_ROOT)

    # Backend Settings
    llamacpp_base_url: str = Field(default="http://localhost:8080")
    ollama_base_url: str = Field(default="http://localhost:11434")
    together_base_url: str = Field(default="https://api.together.xyz")
    together_api_key: Optional[str] = Field(default=None)
    model_name: str = Field(default="llama2")
    default_backend: str = Field(default=DEFAULT_BACKEND)
    request_timeout: int = Field(default=60)

    # Context Settings
    per_file_limit: int = Field(default=1000)
    total_context_limit: int = Field(default=4000)
    read_workers: int = Field(default=8)

    # Server Settings
    max_upload_size: int = Field(default=MAX_UPLOAD_SIZE)
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3001)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        def _parse_int(value: Optional[str], fallback: int) -> int:
            try:
                return int(value) if value is not None else fallback
            except ValueError:
                return fallback

        storage_root_env = os.getenv("STORAGE_ROOT")

        return cls(
            storage_root=Path(storage_root_env) if storage_root_env else DEFAULT_STORAGE_ROOT,
            llamacpp_base_url=os.getenv("LLAMA_CPP_BASE_URL", "http://localhost:8080"),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434"),
            together_base_url=os.getenv("TOGETHER_BASE_URL", "https://api.together.xyz"),
            together_api_key=os.getenv("TOGETHER_API_KEY"),
            model_name=os.getenv("MODEL_NAME", "llama2"),
            default_backend=os.getenv("DEFAULT_MODEL", DEFAULT_BACKEND),
            request_timeout=_parse_int(os.getenv("LLM_TIMEOUT"), 60),
            per_file_limit=_parse_int(os.getenv("PER_FILE_LIMIT"), 1000),
            total_context_limit=_parse_int(os.getenv("TOTAL_CONTEXT_LIMIT"), 4000),
            read_workers=_parse_int(os.getenv("READ_WORKERS"), 8),
            max_upload_size=_parse_int(os.getenv("MAX_UPLOAD_SIZE"), MAX_UPLOAD_SIZE),
            host=os.getenv("HOST", "127.0.0.1"),
            port=_parse_int(os.getenv("PORT"), 3001),
        )
