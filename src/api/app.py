"""FastAPI application factory for the fs-watch REST API."""

from fastapi import APIRouter, FastAPI

from api.routes import register_routes


def create_app(watcher) -> FastAPI:
    """Build and return a FastAPI app wired to the given FileSystemWatcher."""
    app = FastAPI(title="fs-watch-mcp", docs_url="/api/docs", openapi_url="/api/openapi.json")

    api = APIRouter(prefix="/api")
    register_routes(api, watcher)
    app.include_router(api)

    return app
