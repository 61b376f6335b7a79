"""Tests for the API client used by a browsing UI."""

import json

import httpx
import pytest

from filecontext.client import APIError, FileContextClient, normalize_path


def _make(handler, sleeps=None, retries=3):
    return FileContextClient(
        "http://api.test/api",
        retries=retries,
        retry_delay=1.0,
        client=httpx.Client(transport=httpx.MockTransport(handler)),
        sleep=(sleeps.append if sleeps is not None else lambda _: None),
    )


@pytest.mark.parametrize(
    "raw,expected",
    [
        (None, ""),
        ("", ""),
        ("/docs/a.txt", "docs/a.txt"),
        ("storage/docs/a.txt", "docs/a.txt"),
        ("storage\\docs\\a.txt", "docs/a.txt"),
        ("docs//a.txt", "docs/a.txt"),
        ("./docs/a.txt", "docs/a.txt"),
    ],
)
def test_normalize_path(raw, expected):
    assert normalize_path(raw) == expected


class TestListFiles:
    """Listing with retry and graceful degradation."""

    def test_retries_transient_connection_failures(self):
        calls = []
        sleeps = []

        def handler(request):
            calls.append(request)
            if len(calls) < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, json=[{"name": "a.txt", "path": "a.txt", "type": "file"}])

        nodes = _make(handler, sleeps).list_files("storage/docs", recursive=True)

        assert nodes == [{"name": "a.txt", "path": "a.txt", "type": "file"}]
        assert len(calls) == 3
        assert sleeps == [1.0, 1.0]
        assert calls[0].url.params["path"] == "docs"
        assert calls[0].url.params["recursive"] == "true"

    def test_gives_up_after_fixed_attempts(self):
        calls = []
        sleeps = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        assert _make(handler, sleeps).list_files() == []
        assert len(calls) == 3
        assert sleeps == [1.0, 1.0]

    def test_server_error_degrades_to_empty_without_retry(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, json={"error": "boom"})

        assert _make(handler).list_files("docs") == []
        assert len(calls) == 1

    def test_non_json_body_degrades_to_empty(self):
        def handler(request):
            return httpx.Response(200, text="<html>proxy</html>")

        assert _make(handler).list_files("") == []


class TestMutatingCalls:
    """Folder, upload, delete and query calls."""

    def test_create_folder(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"message": "Folder created successfully", "folder": {}})

        result = _make(handler).create_folder("/new\\folder")

        assert result["message"] == "Folder created successfully"
        assert json.loads(seen[0].content) == {"path": "new/folder"}

    def test_error_status_raises_api_error(self):
        def handler(request):
            return httpx.Response(403, json={"error": "Path escapes storage root: ../x"})

        with pytest.raises(APIError) as excinfo:
            _make(handler).create_folder("../x")

        assert excinfo.value.status_code == 403
        assert "escapes" in str(excinfo.value)

    def test_connection_failure_raises_after_retries(self):
        sleeps = []

        def handler(request):
            raise httpx.ConnectError("down", request=request)

        with pytest.raises(httpx.ConnectError):
            _make(handler, sleeps).delete_file("a.txt")
        assert len(sleeps) == 2

    def test_upload_files(self, tmp_path):
        (tmp_path / "a.txt").write_text("alpha")
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"message": "Files uploaded successfully", "files": []})

        _make(handler).upload_files([tmp_path / "a.txt"], "storage/inbox")

        body = seen[0].read()
        assert seen[0].url.path == "/api/folders/upload"
        assert b'name="files"; filename="a.txt"' in body
        assert b"alpha" in body
        assert b'name="folderPath"' in body
        assert b"inbox" in body

    def test_delete_file(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"message": "File deleted successfully"})

        _make(handler).delete_file("docs/a.txt")

        assert seen[0].method == "DELETE"
        assert seen[0].url.path == "/api/files/docs/a.txt"

    def test_query(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"text": "", "model": "ollama", "error": "connection refused"})

        response = _make(handler).query("q", ["storage/notes.txt"], model="ollama")

        assert json.loads(seen[0].content) == {"paths": ["notes.txt"], "query": "q", "model": "ollama"}
        assert response.error == "connection refused"
        assert not response.ok
