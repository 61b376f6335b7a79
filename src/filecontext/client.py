"""HTTP client for the file-context API, as used by a browsing UI."""

import logging
import re
import time
from pathlib import Path
from typing import Any, Callable, Optional, Sequence

import httpx

from .models import QueryResponse

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "http://localhost:3001/api"


def normalize_path(path: Optional[str]) -> str:
    """Make a UI path relative to the storage root, with forward slashes."""
    if not path:
        return ""
    clean = re.sub(r"^[/\\]|^storage[/\\]", "", path)
    clean = clean.replace("\\", "/")
    clean = re.sub(r"/+", "/", clean)
    return re.sub(r"^\./", "", clean)


class APIError(Exception):
    """The API answered with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class FileContextClient:
    """Client for the file-context HTTP API.

    Transient connection failures are retried a fixed number of times with
    a fixed delay. ``list_files`` never raises: a failing listing degrades to
    an empty tree so a UI can keep rendering.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE,
        retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 120.0,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.retries = max(1, retries)
        self.retry_delay = retry_delay
        self._client = client or httpx.Client(timeout=timeout)
        self._sleep = sleep

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        """Send a request, retrying only on transport errors."""
        url = f"{self.base_url}{endpoint}"
        for attempt in range(self.retries):
            try:
                return self._client.request(method, url, **kwargs)
            except httpx.TransportError as e:
                if attempt + 1 >= self.retries:
                    raise
                logger.warning(
                    "Request to %s failed (%s). Retry %d/%d in %.1fs",
                    url,
                    e,
                    attempt + 1,
                    self.retries - 1,
                    self.retry_delay,
                )
                self._sleep(self.retry_delay)
        raise RuntimeError("unreachable")

    def _json(self, response: httpx.Response) -> Any:
        if response.is_error:
            try:
                message = response.json().get("error") or response.text
            except ValueError:
                message = response.text
            raise APIError(message, status_code=response.status_code)
        return response.json()

    def list_files(self, path: str = ".", recursive: bool = False) -> list[dict[str, Any]]:
        """List a folder; returns ``[]`` when the server is unreachable or errors."""
        params = {"path": normalize_path(path), "recursive": str(recursive).lower()}
        try:
            return self._json(self._request("GET", "/files", params=params))
        except (httpx.HTTPError, APIError, ValueError) as e:
            logger.error("List files error: %s", e)
            return []

    def create_folder(self, path: str) -> dict[str, Any]:
        response = self._request("POST", "/folders", json={"path": normalize_path(path)})
        return self._json(response)

    def upload_files(self, files: Sequence[Path], folder_path: str = "") -> dict[str, Any]:
        payload = [("files", (p.name, p.read_bytes())) for p in map(Path, files)]
        response = self._request(
            "POST",
            "/folders/upload",
            files=payload,
            data={"folderPath": normalize_path(folder_path)},
        )
        return self._json(response)

    def upload_file(self, file: Path) -> dict[str, Any]:
        file = Path(file)
        response = self._request(
            "POST", "/files/upload", files={"file": (file.name, file.read_bytes())}
        )
        return self._json(response)

    def delete_file(self, filename: str) -> dict[str, Any]:
        return self._json(self._request("DELETE", f"/files/{normalize_path(filename)}"))

    def query(self, query: str, paths: Sequence[str] = (), model: Optional[str] = None) -> QueryResponse:
        body: dict[str, Any] = {"paths": [normalize_path(p) for p in paths], "query": query}
        if model:
            body["model"] = model
        return QueryResponse.model_validate(self._json(self._request("POST", "/query", json=body)))

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "FileContextClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
