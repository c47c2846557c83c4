"""FastAPI application exposing the persona chat REST API and static UI."""
from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, FastAPI, File, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import load_config
from .errors import ChatError, StorageError, ValidationError
from .models import Health, dump
from .service import ChatService, Clock
from .store import DocumentStore, JsonFileStore

logger = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parents[2]  # repo root (src/ layout)


# -----------------------------
# Utilities
# -----------------------------
def _make_store(cfg: Dict[str, Any]) -> JsonFileStore:
    storage = cfg.get("storage", {})
    return JsonFileStore(storage.get("data_file") or "data/data.json")


def _ui_dir(cfg: Dict[str, Any]) -> Path:
    """Resolve ``ui.dir``: absolute as given, else the working directory, else the repo root."""
    ui_dir = Path(cfg.get("ui", {}).get("dir") or "docs")
    if ui_dir.is_absolute():
        return ui_dir
    cwd_dir = Path.cwd() / ui_dir
    if cwd_dir.is_dir():
        return cwd_dir
    return ROOT / ui_dir


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ChatError)
    async def chat_error(request: Request, exc: ChatError) -> JSONResponse:
        if isinstance(exc, StorageError):
            logger.error(
                "Storage failure on %s %s: %s",
                request.method,
                request.url.path,
                exc.message,
                exc_info=exc,
            )
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # Unknown paths and unsupported methods are both "no such route".
        if exc.status_code in (404, 405):
            return _error(404, "Not found")
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def body_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, "Invalid request body")

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return _error(500, "Internal server error")


def _build_router(service: ChatService, uploads_dir: Path) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    def health() -> Dict[str, Any]:
        return dump(Health())

    @router.get("/personas")
    def list_personas() -> List[Dict[str, Any]]:
        return service.list_personas()

    @router.post("/personas", status_code=201)
    def create_persona(body: Any = Body(None)) -> Dict[str, Any]:
        return service.create_persona(body)

    @router.get("/messages")
    def list_messages(q: Optional[str] = Query(None, description="Case-insensitive text filter.")):
        return service.list_messages(q)

    @router.post("/messages", status_code=201)
    def send_message(body: Any = Body(None)) -> Dict[str, Any]:
        return service.send_message(body)

    @router.put("/messages/{message_id}")
    def edit_message(message_id: str, body: Any = Body(None)) -> Dict[str, Any]:
        return service.edit_message(message_id, body)

    @router.delete("/messages/{message_id}")
    def delete_message(message_id: str) -> Dict[str, Any]:
        return service.delete_message(message_id)

    @router.get("/export")
    def export_document() -> Dict[str, Any]:
        return service.export_document()

    @router.post("/import")
    def import_document(file: Optional[UploadFile] = File(None)) -> Dict[str, Any]:
        if file is None:
            raise ValidationError("No file uploaded")

        # Spool the upload to disk like a multipart temp dir, and always remove it.
        tmp_path: Optional[Path] = None
        try:
            uploads_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile("wb", delete=False, dir=str(uploads_dir), suffix=".upload") as tmp:
                tmp_path = Path(tmp.name)
                shutil.copyfileobj(file.file, tmp)
            return service.import_document(tmp_path.read_bytes())
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            file.file.close()

    return router


# -----------------------------
# App factory
# -----------------------------
def create_app(
    config_path: Optional[str] = None,
    store: Optional[DocumentStore] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    cfg = load_config(config_path)
    server_cfg = cfg.get("server", {})

    cors_origins = server_cfg.get("cors_origins", ["*"])
    api_prefix = (server_cfg.get("api_prefix") or "").rstrip("/")
    uploads_dir = Path(cfg.get("storage", {}).get("uploads_dir") or "uploads")

    store = store or _make_store(cfg)
    service = ChatService(store, clock=clock)

    app = FastAPI(title="Persona Chat", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _install_error_handlers(app)
    app.include_router(_build_router(service, uploads_dir), prefix=api_prefix)
    app.state.service = service
    app.state.config = cfg

    ui_dir = _ui_dir(cfg)
    index_file = ui_dir / "index.html"
    if ui_dir.is_dir():
        app.mount("/static", StaticFiles(directory=str(ui_dir)), name="static")
    else:
        logger.warning("UI directory not found: %s", ui_dir)

    @app.get("/", include_in_schema=False)
    def root():
        if index_file.exists():
            return FileResponse(str(index_file))
        return JSONResponse({"status": "OK", "msg": "Persona Chat API is running. No UI found."})

    return app
