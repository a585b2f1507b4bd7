"""FastMCP server exposing the document store to the editor."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar, cast

from dotenv import load_dotenv
from fastmcp import FastMCP
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from .errors import DocumentStoreError, InvalidSearchRequest
from .middleware import build_cors_middleware
from .models import SearchRequest, Session
from .paths import PathResolver, parse_root
from .search import SearchEngine
from .session import SessionStore
from .store import DocumentStore

TToolFunc = TypeVar("TToolFunc", bound=Callable[..., Any])
Handler = Callable[[Request], Awaitable[Response]]

load_dotenv()

STATUS_BY_KIND = {
    "invalid_request": 400,
    "path_outside_root": 400,
    "not_found": 404,
    "folder_not_found": 404,
    "already_exists": 409,
    "io_error": 500,
}


@dataclass(slots=True)
class Settings:
    userdata_dir: Path
    appdata_dir: Path
    host: str
    port: int
    log_level: str


def _failure(exc: DocumentStoreError) -> dict[str, Any]:
    return {"ok": False, "error": str(exc), "kind": exc.kind}


def _invalid(message: str) -> dict[str, Any]:
    return {"ok": False, "error": message, "kind": InvalidSearchRequest.kind}


@dataclass(slots=True)
class DocumentService:
    """Translate core operations into JSON-ready result dicts."""

    store: DocumentStore
    engine: SearchEngine
    sessions: SessionStore

    @classmethod
    def from_settings(cls, settings: Settings) -> DocumentService:
        resolver = PathResolver(settings.userdata_dir)
        store = DocumentStore(resolver)
        return cls(
            store=store,
            engine=SearchEngine(resolver),
            sessions=SessionStore(settings.appdata_dir, store),
        )

    def get_document(self, path: str) -> dict[str, Any]:
        try:
            document = self.store.read(path)
        except DocumentStoreError as exc:
            return _failure(exc)
        return {"ok": True, **document.to_dict()}

    def create_document(self, path: str, content: str | None = "") -> dict[str, Any]:
        if not path:
            return _invalid("filePath is required")
        return self.update_document(path, content)

    def update_document(self, path: str, content: str | None = "") -> dict[str, Any]:
        if content is not None and not isinstance(content, str):
            return _invalid("content must be a string")
        try:
            document = self.store.write(path, content or "")
        except DocumentStoreError as exc:
            return _failure(exc)
        return {"ok": True, **document.to_dict()}

    def delete_document(self, path: str) -> dict[str, Any]:
        try:
            self.store.delete(path)
        except DocumentStoreError as exc:
            return _failure(exc)
        return {"ok": True}

    def list_documents(self, parent: str | None = None) -> dict[str, Any]:
        try:
            entries = self.store.list(parent or "")
        except DocumentStoreError as exc:
            return _failure(exc)
        return {"ok": True, "documents": [entry.to_dict() for entry in entries]}

    def rename_document(self, old_path: str, new_path: str) -> dict[str, Any]:
        if not old_path or not new_path:
            return _invalid("oldPath and newPath are required")
        try:
            self.store.rename(old_path, new_path)
        except DocumentStoreError as exc:
            return _failure(exc)
        return {"ok": True, "filePath": new_path}

    def search_documents(
        self,
        query: str,
        search_mode: str = "plain",
        case_sensitive: bool = False,
        search_folder: str | None = None,
    ) -> dict[str, Any]:
        request = SearchRequest(
            query=query or "",
            mode=search_mode,
            case_sensitive=case_sensitive,
            folder=search_folder or "",
        )
        try:
            request.validate()
            results = self.engine.search(request)
        except DocumentStoreError as exc:
            return _failure(exc)
        return {"ok": True, "results": [result.to_dict() for result in results]}

    def get_session(self) -> dict[str, Any]:
        try:
            session = self.sessions.load()
        except DocumentStoreError as exc:
            return _failure(exc)
        return {"ok": True, **session.to_dict()}

    def save_session(
        self,
        opened_files: list[str] | None = None,
        last_active_file: str | None = "",
        working_folder: str | None = "",
    ) -> dict[str, Any]:
        session = Session(
            opened_files=list(opened_files or []),
            last_active_file=last_active_file or "",
            working_folder=working_folder or "",
        )
        try:
            self.sessions.save(session)
        except DocumentStoreError as exc:
            return _failure(exc)
        return {"ok": True, **session.to_dict()}


def load_settings() -> Settings:
    """Load configuration from environment variables."""

    userdata_dir = parse_root(os.environ.get("VEBITOR_USERDATA_DIR"), "userdata")
    appdata_dir = parse_root(os.environ.get("VEBITOR_APPDATA_DIR"), "appdata")

    host = os.environ.get("VEBITOR_HOST", "0.0.0.0")  # noqa: S104 (intentional bind)
    port = int(os.environ.get("VEBITOR_PORT", "8080"))

    log_level = os.environ.get("LOG_LEVEL", "info").upper()
    logging.basicConfig(level=getattr(logging, log_level, logging.INFO))

    return Settings(
        userdata_dir=userdata_dir,
        appdata_dir=appdata_dir,
        host=host,
        port=port,
        log_level=log_level,
    )


def to_response(result: dict[str, Any], status: int = 200, key: str | None = None) -> Response:
    """Render a service result as an HTTP response."""

    if not result["ok"]:
        kind = result.get("kind", "")
        return JSONResponse(
            {"error": result["error"], "kind": kind},
            status_code=STATUS_BY_KIND.get(kind, 500),
        )
    if status == 204:
        return Response(status_code=204)
    if key is not None:
        return JSONResponse(result[key], status_code=status)
    return JSONResponse({k: v for k, v in result.items() if k != "ok"}, status_code=status)


async def _read_body(request: Request) -> dict[str, Any] | None:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None


def _bad_request(message: str) -> Response:
    return to_response(_invalid(message))


def create_server(settings: Settings | None = None) -> tuple[FastMCP, list[Middleware]]:
    """Create a configured :class:`FastMCP` instance and its HTTP middleware."""

    settings = settings or load_settings()
    server = FastMCP(
        "Vebitor Documents",
        instructions="Text documents in a folder tree with full-text search",
    )

    middleware = build_cors_middleware()

    service = DocumentService.from_settings(settings)

    def tool(*args: Any, **kwargs: Any) -> Callable[[TToolFunc], TToolFunc]:
        decorator = server.tool(*args, **kwargs)
        return cast(Callable[[TToolFunc], TToolFunc], decorator)

    def route(path: str, methods: list[str]) -> Callable[[Handler], Handler]:
        decorator = server.custom_route(path, methods=methods)
        return cast(Callable[[Handler], Handler], decorator)

    @tool()
    async def get_document(path: str) -> dict[str, Any]:
        return await asyncio.to_thread(service.get_document, path)

    @tool()
    async def create_document(path: str, content: str | None = "") -> dict[str, Any]:
        return await asyncio.to_thread(service.create_document, path, content)

    @tool()
    async def update_document(path: str, content: str | None = "") -> dict[str, Any]:
        return await asyncio.to_thread(service.update_document, path, content)

    @tool()
    async def delete_document(path: str) -> dict[str, Any]:
        return await asyncio.to_thread(service.delete_document, path)

    @tool()
    async def list_documents(parent: str | None = None) -> dict[str, Any]:
        return await asyncio.to_thread(service.list_documents, parent)

    @tool()
    async def rename_document(old_path: str, new_path: str) -> dict[str, Any]:
        return await asyncio.to_thread(service.rename_document, old_path, new_path)

    @tool()
    async def search_documents(
        query: str,
        search_mode: str = "plain",
        case_sensitive: bool = False,
        search_folder: str | None = None,
    ) -> dict[str, Any]:
        return await asyncio.to_thread(
            service.search_documents, query, search_mode, case_sensitive, search_folder
        )

    @tool()
    async def get_session() -> dict[str, Any]:
        return await asyncio.to_thread(service.get_session)

    @tool()
    async def save_session(
        opened_files: list[str] | None = None,
        last_active_file: str | None = "",
        working_folder: str | None = "",
    ) -> dict[str, Any]:
        return await asyncio.to_thread(
            service.save_session, opened_files, last_active_file, working_folder
        )

    @route("/documents", methods=["GET"])
    async def http_list_documents(request: Request) -> Response:
        result = await asyncio.to_thread(service.list_documents, request.query_params.get("parent"))
        return to_response(result, key="documents")

    @route("/documents", methods=["POST"])
    async def http_create_document(request: Request) -> Response:
        body = await _read_body(request)
        if body is None:
            return _bad_request("Request body must be a JSON object")
        result = await asyncio.to_thread(
            service.create_document, str(body.get("filePath") or ""), body.get("content")
        )
        return to_response(result, status=201)

    @route("/documents/rename", methods=["POST"])
    async def http_rename_document(request: Request) -> Response:
        body = await _read_body(request)
        if body is None:
            return _bad_request("Request body must be a JSON object")
        result = await asyncio.to_thread(
            service.rename_document, str(body.get("oldPath") or ""), str(body.get("newPath") or "")
        )
        return to_response(result)

    @route("/documents/{file_path:path}", methods=["GET"])
    async def http_get_document(request: Request) -> Response:
        result = await asyncio.to_thread(service.get_document, request.path_params["file_path"])
        return to_response(result)

    @route("/documents/{file_path:path}", methods=["PUT"])
    async def http_update_document(request: Request) -> Response:
        body = await _read_body(request)
        if body is None:
            return _bad_request("Request body must be a JSON object")
        result = await asyncio.to_thread(
            service.update_document, request.path_params["file_path"], body.get("content")
        )
        return to_response(result)

    @route("/documents/{file_path:path}", methods=["DELETE"])
    async def http_delete_document(request: Request) -> Response:
        result = await asyncio.to_thread(service.delete_document, request.path_params["file_path"])
        return to_response(result, status=204)

    @route("/search", methods=["POST"])
    async def http_search_documents(request: Request) -> Response:
        body = await _read_body(request)
        if body is None:
            return _bad_request("Request body must be a JSON object")
        try:
            search = SearchRequest.from_dict(body)
        except InvalidSearchRequest as exc:
            return to_response(_failure(exc))
        result = await asyncio.to_thread(
            service.search_documents,
            search.query,
            search.mode,
            search.case_sensitive,
            search.folder,
        )
        return to_response(result, key="results")

    @route("/session", methods=["GET"])
    async def http_get_session(request: Request) -> Response:
        return to_response(await asyncio.to_thread(service.get_session))

    @route("/session", methods=["POST"])
    async def http_save_session(request: Request) -> Response:
        body = await _read_body(request)
        if body is None:
            return _bad_request("Request body must be a JSON object")
        session = Session.from_dict(body)
        result = await asyncio.to_thread(
            service.save_session, session.opened_files, session.last_active_file, session.working_folder
        )
        return to_response(result)

    @route("/health", methods=["GET"])
    async def health(request: Request) -> Response:
        return JSONResponse({"status": "ok"})

    return cast(FastMCP, server), middleware


def main() -> None:
    """Run the FastMCP server."""

    settings = load_settings()
    server, middleware = create_server(settings)
    server.run(
        transport="http",
        host=settings.host,
        port=settings.port,
        middleware=middleware,
    )


if __name__ == "__main__":
    main()
