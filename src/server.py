"""
fs-watch MCP server entry point.

Startup sequence:
1. Read watcher configuration from environment (see WatcherConfig.from_env)
2. Create the FileSystemWatcher
3. Register every directory in WATCH_ROOTS (starts polling)
4. Register all MCP tools
5. Start REST API server in background thread (if API_ENABLED)
6. Run MCP server (stdio transport)
"""

import logging
import os
import sys
import threading

from mcp.server.fastmcp import FastMCP

from api.tools import register_tools
from handles.fs_handles import PlatformCapabilities, StaticDirectoryPicker
from models.config import WatcherConfig
from watcher.fs_watcher import FileSystemWatcher

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    stream=sys.stderr,
)
log = logging.getLogger(__name__)


def _start_api_server(watcher, port: int) -> None:
    """Run the FastAPI/uvicorn server in a daemon thread."""
    import uvicorn

    from api.app import create_app

    app = create_app(watcher)
    log.info("Starting REST API on port %d", port)
    uvicorn.run(app, host="0.0.0.0", port=port, log_level="warning")


def main() -> None:
    try:
        config = WatcherConfig.from_env()
    except ValueError as e:
        log.error("Invalid configuration: %s", e)
        sys.exit(1)

    watcher = FileSystemWatcher(config, PlatformCapabilities.detect())
    if not watcher.is_supported:
        log.error("Directory access is not supported on this platform")
        sys.exit(1)

    for root in config.roots:
        result = watcher.select_root(StaticDirectoryPicker(root))
        if not result.ok:
            log.error("Cannot watch %s: %s", root, result.error)

    if not watcher.roots:
        log.warning("No directories watched yet; add one with the fs_add_root tool")

    api_enabled = os.environ.get("API_ENABLED", "true").lower() in ("true", "1", "yes")
    if api_enabled:
        api_port = int(os.environ.get("API_PORT", "9410"))
        api_thread = threading.Thread(
            target=_start_api_server, args=(watcher, api_port), daemon=True
        )
        api_thread.start()

    mcp = FastMCP("fs-watch-mcp")
    register_tools(mcp, watcher)

    log.info("Starting fs-watch-mcp server")
    try:
        mcp.run(transport="stdio")
    finally:
        watcher.clear()


if __name__ == "__main__":
    main()
