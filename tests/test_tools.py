"""
Tests for api/tools.py.

Uses a real FileSystemWatcher over a temporary directory.
Exercises the MCP tool functions directly (bypasses transport).
"""

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest

from api.tools import register_tools
from handles.fs_handles import StaticDirectoryPicker
from models.config import WatcherConfig
from watcher.fs_watcher import FileSystemWatcher


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_project(tmp_path: Path) -> Path:
    root = tmp_path / "proj"
    (root / "docs").mkdir(parents=True)
    (root / "readme.md").write_text("# readme")
    (root / "docs" / "guide.md").write_text("guide")
    return root


class _FakeMCP:
    """Minimal fake to capture tool registrations."""

    def __init__(self):
        self._tools = {}

    def tool(self, *args, **kwargs):
        """Decorator that records functions by name."""
        def decorator(fn):
            self._tools[fn.__name__] = fn
            return fn
        return decorator

    def get(self, name: str):
        return self._tools[name]


@pytest.fixture
def project(tmp_path):
    return _make_project(tmp_path)


@pytest.fixture
def watcher(project):
    w = FileSystemWatcher(WatcherConfig(poll_interval=60, debounce_interval=0, file_cache_ttl=0))
    w.select_root(StaticDirectoryPicker(project))
    w.run_cycle()
    yield w
    w.clear()


@pytest.fixture
def mcp(watcher):
    fake = _FakeMCP()
    register_tools(fake, watcher)
    return fake


def _call(mcp, name, **kwargs):
    return json.loads(mcp.get(name)(**kwargs))


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestRegistration:
    def test_all_tools_registered(self, mcp):
        assert set(mcp._tools) == {
            "fs_list",
            "fs_read",
            "fs_write",
            "fs_create",
            "fs_delete",
            "fs_add_root",
            "fs_clear",
            "fs_status",
        }


class TestFileTools:
    def test_list(self, mcp):
        data = _call(mcp, "fs_list")
        assert data == {"count": 2, "files": ["proj/docs/guide.md", "proj/readme.md"]}

    def test_list_prefix_with_content(self, mcp):
        data = _call(mcp, "fs_list", prefix="proj/docs", include_content=True)
        assert data["contents"] == {"proj/docs/guide.md": "guide"}

    def test_list_bad_prefix(self, mcp):
        data = _call(mcp, "fs_list", prefix="proj/../x")
        assert data["kind"] == "invalid"

    def test_read(self, mcp):
        assert _call(mcp, "fs_read", path="proj/readme.md")["content"] == "# readme"

    def test_read_missing(self, mcp):
        data = _call(mcp, "fs_read", path="proj/missing.md")
        assert data["kind"] == "not_found"
        assert "missing.md" in data["error"]

    def test_write_replaces_by_default(self, mcp, project):
        data = _call(mcp, "fs_write", path="proj/readme.md", content="new")
        assert data["content"] == "new"
        assert (project / "readme.md").read_text() == "new"

    def test_write_overlay(self, mcp):
        data = _call(mcp, "fs_write", path="proj/readme.md", content="##", truncate=False)
        assert data["content"] == "##readme"

    def test_write_without_create(self, mcp):
        data = _call(mcp, "fs_write", path="proj/other.md", content="x", create=False)
        assert data["kind"] == "not_found"

    def test_create_and_delete(self, mcp, project):
        created = _call(mcp, "fs_create", path="proj/todo.md", content="- [ ] item")
        assert created == {"path": "proj/todo.md", "created": True}
        assert (project / "todo.md").read_text() == "- [ ] item"

        deleted = _call(mcp, "fs_delete", path="proj/todo.md")
        assert deleted == {"path": "proj/todo.md", "deleted": True}
        assert not (project / "todo.md").exists()

    def test_delete_missing(self, mcp):
        assert _call(mcp, "fs_delete", path="proj/ghost.md")["kind"] == "not_found"


class TestWatchStateTools:
    def test_add_root(self, mcp, tmp_path):
        other = tmp_path / "notes"
        other.mkdir()
        data = _call(mcp, "fs_add_root", path=str(other))
        assert data["ok"] is True
        assert data["label"] == "notes"

    def test_add_root_failure(self, mcp, tmp_path):
        data = _call(mcp, "fs_add_root", path=str(tmp_path / "missing"))
        assert data["ok"] is False
        assert data["error_kind"] == "PermissionDeclinedError"

    def test_status(self, mcp):
        data = _call(mcp, "fs_status")
        assert data["roots"] == ["proj"]
        assert data["files_tracked"] == 2

    def test_clear(self, mcp):
        assert _call(mcp, "fs_clear") == {"cleared": True}
        assert _call(mcp, "fs_list")["count"] == 0
