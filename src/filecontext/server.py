"""FastAPI application exposing the file browser and query API."""

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import FastAPI, File, Form, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import __version__
from .config import Config
from .errors import FileContextError, InvalidRequest
from .filetypes import is_upload_allowed, mime_type
from .models import FileNode, QueryRequest, QueryResponse, UploadedFile
from .service import QueryService

logger = logging.getLogger(__name__)


class FolderRequest(BaseModel):
    path: str = ""


class UploadTooLarge(FileContextError):
    status_code = 413


def _read_upload(upload: UploadFile, max_size: int) -> bytes:
    """Read an upload fully, refusing anything over ``max_size`` bytes."""
    name = upload.filename or ""
    if not is_upload_allowed(name):
        raise InvalidRequest(f"Unsupported file type: {name}")

    data = upload.file.read(max_size + 1)
    if len(data) > max_size:
        raise UploadTooLarge(f"File too large: {name} exceeds {max_size} bytes")

    logger.debug("Accepted upload %s (%s, %d bytes)", name, mime_type(name), len(data))
    return data


def create_app(config: Optional[Config] = None, service: Optional[QueryService] = None) -> FastAPI:
    """Build the API application.

    Args:
        config: Application configuration (read from the environment if omitted)
        service: Pre-built query service, mostly for tests

    Returns:
        Configured FastAPI app; handlers are sync and run in the worker pool
    """
    config = config or Config.from_env()
    service = service or QueryService(config)
    reader = service.reader
    reader.sandbox.root.mkdir(parents=True, exist_ok=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Serving storage root %s", reader.sandbox.root)
        yield
        service.close()

    app = FastAPI(title="file-context", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(FileContextError)
    async def handle_file_context_error(request: Request, exc: FileContextError) -> JSONResponse:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    @app.get("/api/files", response_model=List[FileNode], response_model_exclude_none=True)
    def list_files(path: str = Query(""), recursive: bool = Query(False)):
        return reader.list(path, recursive=recursive)

    @app.post("/api/folders")
    def create_folder(body: FolderRequest):
        folder = reader.create_folder(body.path)
        return {
            "message": "Folder created successfully",
            "folder": folder.model_dump(exclude_none=True),
        }

    @app.post("/api/folders/upload")
    def upload_to_folder(
        files: Optional[List[UploadFile]] = File(None),
        folderPath: str = Form(""),
    ):
        # Sandbox and admission checks happen before anything is written
        reader.sandbox.resolve(folderPath)
        payloads = [
            (upload.filename or "", _read_upload(upload, config.max_upload_size))
            for upload in files or []
        ]

        uploaded: List[UploadedFile] = [
            reader.save_upload(folderPath, name, data) for name, data in payloads
        ]
        logger.info("Uploaded %d files to %r", len(uploaded), folderPath)
        return {
            "message": "Files uploaded successfully",
            "files": [f.model_dump() for f in uploaded],
        }

    @app.post("/api/files/upload")
    def upload_file(file: Optional[UploadFile] = File(None)):
        if file is None:
            raise InvalidRequest("No file uploaded")

        data = _read_upload(file, config.max_upload_size)
        stored = reader.save_upload("", file.filename or "", data, unique=True)
        return {"message": "File uploaded successfully", "file": stored.model_dump()}

    @app.delete("/api/files/{filename:path}")
    def delete_file(filename: str):
        reader.delete_file(filename)
        return {"message": "File deleted successfully"}

    @app.post("/api/query", response_model=QueryResponse, response_model_exclude_none=True)
    def query(body: QueryRequest):
        logger.debug("Received query request: paths=%s model=%s", body.targets(), body.model)
        return service.answer(body)

    @app.get("/api/models")
    def list_models():
        return {"models": service.router.available(), "default": config.default_backend}

    return app
