"""Tests for the HTTP API."""

import httpx
import pytest
from fastapi.testclient import TestClient

from filecontext.backends import ModelRouter
from filecontext.server import create_app
from filecontext.service import QueryService


@pytest.fixture
def api(config, http_client):
    service = QueryService(config, router=ModelRouter(config, client=http_client))
    return TestClient(create_app(config, service))


class TestFilesEndpoint:
    """GET /api/files"""

    def test_list_root(self, api, storage):
        (storage / "image.png").write_bytes(b"\x89PNG\xff\xfe")

        response = api.get("/api/files")

        assert response.status_code == 200
        nodes = {n["name"]: n for n in response.json()}
        assert nodes["notes.txt"] == {"name": "notes.txt", "path": "notes.txt", "type": "file", "content": "hello"}
        assert nodes["src"] == {"name": "src", "path": "src", "type": "directory"}
        assert "content" not in nodes["image.png"]

    def test_list_recursive(self, api):
        response = api.get("/api/files", params={"path": "", "recursive": "true"})

        src = [n for n in response.json() if n["name"] == "src"][0]
        assert src["children"] == [{"name": "app.ts", "path": "src/app.ts", "type": "file", "content": "code"}]

    def test_traversal_is_forbidden(self, api):
        response = api.get("/api/files", params={"path": "../../etc"})

        assert response.status_code == 403
        assert "error" in response.json()

    def test_missing_directory(self, api):
        response = api.get("/api/files", params={"path": "nope"})
        assert response.status_code == 404


class TestFolders:
    """POST /api/folders and folder uploads."""

    def test_create_then_list(self, api):
        created = api.post("/api/folders", json={"path": "docs"})

        assert created.status_code == 200
        assert created.json() == {
            "message": "Folder created successfully",
            "folder": {"name": "docs", "path": "docs", "type": "directory"},
        }

        listing = api.get("/api/files").json()
        docs = [n for n in listing if n["name"] == "docs"][0]
        assert docs["type"] == "directory"
        assert "children" not in docs

    def test_create_outside_root(self, api, tmp_path):
        response = api.post("/api/folders", json={"path": "../escape"})

        assert response.status_code == 403
        assert not (tmp_path / "escape").exists()

    def test_upload_to_folder(self, api, storage):
        response = api.post(
            "/api/folders/upload",
            files=[("files", ("a.txt", b"aaa", "text/plain")), ("files", ("b.py", b"print(1)", "text/x-python"))],
            data={"folderPath": "incoming"},
        )

        assert response.status_code == 200
        files = response.json()["files"]
        assert [f["path"] for f in files] == ["incoming/a.txt", "incoming/b.py"]
        assert files[0]["size"] == "3.00 B"
        assert (storage / "incoming" / "b.py").read_bytes() == b"print(1)"

    def test_upload_rejects_unsupported_type_before_writing(self, api, storage):
        response = api.post(
            "/api/folders/upload",
            files=[("files", ("ok.txt", b"ok")), ("files", ("run.exe", b"MZ"))],
            data={"folderPath": "incoming"},
        )

        assert response.status_code == 400
        assert "Unsupported file type" in response.json()["error"]
        assert not (storage / "incoming").exists()

    def test_upload_to_folder_outside_root(self, api):
        response = api.post(
            "/api/folders/upload",
            files=[("files", ("a.txt", b"a"))],
            data={"folderPath": "../../tmp"},
        )
        assert response.status_code == 403


class TestFileUpload:
    """POST /api/files/upload"""

    def test_upload_single_file(self, api, storage):
        response = api.post("/api/files/upload", files={"file": ("readme.md", b"# hi", "text/markdown")})

        assert response.status_code == 200
        stored = response.json()["file"]
        assert stored["name"] == "readme.md"
        assert stored["size"] == "4.00 B"
        assert stored["path"].startswith("readme-") and stored["path"].endswith(".md")
        assert (storage / stored["path"]).read_bytes() == b"# hi"

    def test_upload_without_file(self, api):
        response = api.post("/api/files/upload")
        assert response.status_code == 400

    def test_upload_too_large(self, config, http_client, storage):
        small = config.model_copy(update={"max_upload_size": 8})
        service = QueryService(small, router=ModelRouter(small, client=http_client))
        api = TestClient(create_app(small, service))

        response = api.post("/api/files/upload", files={"file": ("big.txt", b"x" * 9)})

        assert response.status_code == 413
        assert [p.name for p in storage.iterdir() if p.name.startswith("big")] == []


class TestDelete:
    """DELETE /api/files/{filename}"""

    def test_delete(self, api, storage):
        response = api.delete("/api/files/src/app.ts")

        assert response.status_code == 200
        assert response.json() == {"message": "File deleted successfully"}
        assert not (storage / "src" / "app.ts").exists()

    def test_delete_missing(self, api):
        assert api.delete("/api/files/ghost.txt").status_code == 404

    def test_delete_outside_root(self, api, tmp_path):
        secret = tmp_path / "secret.txt"
        secret.write_text("keep")

        response = api.delete("/api/files/..%2Fsecret.txt")

        assert response.status_code == 403
        assert secret.exists()


class TestQueryEndpoint:
    """POST /api/query"""

    def test_query(self, api, backend):
        response = api.post(
            "/api/query",
            json={"paths": ["notes.txt", "src/app.ts"], "query": "what is here?", "model": "ollama"},
        )

        assert response.status_code == 200
        assert response.json() == {"text": "ollama answer", "model": "ollama"}
        assert len(backend.requests) == 1

    def test_backend_failure_is_200_with_error(self, api, backend):
        backend.fail_with = httpx.ConnectError("connection refused")

        response = api.post("/api/query", json={"paths": ["notes.txt"], "query": "q", "model": "together"})

        assert response.status_code == 200
        assert response.json() == {"text": "", "model": "together", "error": "connection refused"}

    def test_unknown_model(self, api, backend):
        response = api.post("/api/query", json={"query": "q", "model": "unknown"})

        assert response.status_code == 200
        assert response.json() == {"text": "", "model": "unknown", "error": "Invalid model specified"}
        assert backend.requests == []

    def test_blank_query(self, api, backend):
        response = api.post("/api/query", json={"paths": ["notes.txt"], "query": "  "})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid query parameter"}
        assert backend.requests == []

    def test_traversal(self, api, backend):
        response = api.post("/api/query", json={"paths": ["../../etc/passwd"], "query": "q"})

        assert response.status_code == 403
        assert backend.requests == []


def test_models_endpoint(api):
    response = api.get("/api/models")

    assert response.json() == {"models": ["llamacpp", "ollama", "together"], "default": "llamacpp"}
