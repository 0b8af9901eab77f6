"""REST API routes for fs-watch-mcp."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from api.handlers import (
    handle_clear,
    handle_file_create,
    handle_file_delete,
    handle_file_list,
    handle_file_read,
    handle_file_write,
    handle_root_add,
    handle_status,
)

_STATUS_BY_KIND = {
    "not_found": 404,
    "invalid": 400,
    "write_failure": 500,
    "unsupported": 501,
}


# ---------------------------------------------------------------------------
# Request body models
# ---------------------------------------------------------------------------


class FileWriteBody(BaseModel):
    content: str
    create: bool = True
    truncate: bool = False


class FileCreateBody(BaseModel):
    path: str
    content: Optional[str] = None


class RootAddBody(BaseModel):
    path: str


def _raise_on_error(result: dict) -> dict:
    if "error" in result:
        status_code = _STATUS_BY_KIND.get(result.get("kind"), 400)
        raise HTTPException(status_code=status_code, detail=result["error"])
    return result


# ---------------------------------------------------------------------------
# Route registration
# ---------------------------------------------------------------------------


def register_routes(app_router: APIRouter, watcher) -> None:
    """Attach all REST routes that use the shared watcher."""

    # --- File routes ---

    @app_router.get("/files")
    def list_files(
        prefix: Optional[str] = Query(None),
        include_content: bool = Query(False),
    ):
        return _raise_on_error(
            handle_file_list(watcher, prefix=prefix, include_content=include_content)
        )

    @app_router.get("/files/{path:path}")
    def read_file(path: str):
        return _raise_on_error(handle_file_read(watcher, path=path))

    @app_router.put("/files/{path:path}")
    def write_file(path: str, body: FileWriteBody):
        return _raise_on_error(handle_file_write(watcher, path=path, **body.model_dump()))

    @app_router.post("/files", status_code=201)
    def create_file(body: FileCreateBody):
        return _raise_on_error(handle_file_create(watcher, **body.model_dump()))

    @app_router.delete("/files/{path:path}")
    def delete_file(path: str):
        return _raise_on_error(handle_file_delete(watcher, path=path))

    # --- Watch state routes ---

    @app_router.post("/roots", status_code=201)
    def add_root(body: RootAddBody):
        result = handle_root_add(watcher, path=body.path)
        if not result["ok"]:
            status_code = 501 if result["error_kind"] == "UnsupportedPlatformError" else 403
            raise HTTPException(status_code=status_code, detail=result["error"])
        return result

    @app_router.post("/clear")
    def clear():
        return handle_clear(watcher)

    @app_router.get("/status")
    def status():
        return handle_status(watcher)
