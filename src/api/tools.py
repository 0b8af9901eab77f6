"""MCP tool registration for fs-watch-mcp."""

import json
import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

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

log = logging.getLogger(__name__)


def register_tools(mcp: FastMCP, watcher) -> None:
    """Register all MCP tools onto the FastMCP instance."""

    # ------------------------------------------------------------------
    # File tools
    # ------------------------------------------------------------------

    @mcp.tool()
    def fs_list(prefix: Optional[str] = None, include_content: bool = False) -> str:
        """
        List watched files.

        Paths are labels rooted at the watched directory's name, e.g.
        "project/src/main.py". Files excluded by ignore rules, build-output
        directories and OS noise are never listed.

        Args:
            prefix: Only list files at or under this label (e.g. "project/src")
            include_content: Also return the current snapshot content of each file

        Returns:
            JSON object with "count", "files" and optionally "contents"
        """
        return json.dumps(
            handle_file_list(watcher, prefix=prefix, include_content=include_content),
            indent=2,
        )

    @mcp.tool()
    def fs_read(path: str) -> str:
        """
        Read a watched file's current content.

        Args:
            path: File label, e.g. "project/README.md"

        Returns:
            JSON object with "path" and "content", or an error
        """
        return json.dumps(handle_file_read(watcher, path=path), indent=2)

    @mcp.tool()
    def fs_write(path: str, content: str, create: bool = True, truncate: bool = True) -> str:
        """
        Write a file. The write is all-or-nothing: on failure the file is left
        as it was.

        Args:
            path: File label. New files must sit directly under a watched root.
            content: Text to write
            create: Create the file if it is not tracked yet
            truncate: Replace the whole file (default). False overwrites from
                the start and keeps any old content past the end of the new text.

        Returns:
            JSON object with the resulting content, or an error
        """
        return json.dumps(
            handle_file_write(watcher, path=path, content=content, create=create, truncate=truncate),
            indent=2,
        )

    @mcp.tool()
    def fs_create(path: str, content: Optional[str] = None) -> str:
        """
        Create a file directly under a watched root.

        Args:
            path: File label, e.g. "project/notes.md"
            content: Optional initial content

        Returns:
            JSON confirmation, or an error
        """
        return json.dumps(handle_file_create(watcher, path=path, content=content), indent=2)

    @mcp.tool()
    def fs_delete(path: str) -> str:
        """
        Delete a watched file.

        Args:
            path: File label

        Returns:
            JSON confirmation, or an error
        """
        return json.dumps(handle_file_delete(watcher, path=path), indent=2)

    # ------------------------------------------------------------------
    # Watch state tools
    # ------------------------------------------------------------------

    @mcp.tool()
    def fs_add_root(path: str) -> str:
        """
        Start watching a directory on disk.

        The directory's name becomes the first segment of every file label
        under it.

        Args:
            path: Absolute or ~-relative directory path

        Returns:
            JSON result with "ok" and the root "label", or an error
        """
        return json.dumps(handle_root_add(watcher, path=path), indent=2)

    @mcp.tool()
    def fs_clear() -> str:
        """Stop watching every directory and drop all cached state."""
        return json.dumps(handle_clear(watcher), indent=2)

    @mcp.tool()
    def fs_status() -> str:
        """
        Return watcher diagnostics: roots, tracked file count, cache size,
        cycle count, and configured intervals.
        """
        return json.dumps(handle_status(watcher), indent=2)
