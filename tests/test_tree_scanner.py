"""
Tests for scanner/tree_scanner.py.

Builds real directory trees under tmp_path and scans them with the default
filters and with recording filters.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from filters import COMMON_FILTERS, dist_filter
from handles.fs_handles import DirectoryHandle
from scanner.tree_scanner import scan_roots


def _make_project(tmp_path: Path) -> Path:
    root = tmp_path / "proj"
    (root / "src").mkdir(parents=True)
    (root / "dist" / "deep").mkdir(parents=True)
    (root / ".git").mkdir()

    (root / "a.txt").write_text("a")
    (root / "src" / "b.py").write_text("b")
    (root / "dist" / "bundle.js").write_text("bundle")
    (root / "dist" / "deep" / "x.js").write_text("x")
    (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    (root / ".gitignore").write_text("*.log\n")
    (root / "debug.log").write_text("noise")
    (root / ".DS_Store").write_text("")
    return root


class _Recorder:
    def __init__(self):
        self.seen = []

    def should_include_file(self, path, handle):
        self.seen.append(path)
        return True

    def should_process_directory(self, path, handle):
        self.seen.append(path)
        return True


class TestScanWithCommonFilters:
    def test_only_surviving_files_are_returned(self, tmp_path):
        root = _make_project(tmp_path)
        result = scan_roots({"proj": DirectoryHandle(root)}, COMMON_FILTERS)

        assert set(result.files) == {"proj/a.txt", "proj/src/b.py"}

    def test_excluded_paths_are_recorded(self, tmp_path):
        root = _make_project(tmp_path)
        result = scan_roots({"proj": DirectoryHandle(root)}, COMMON_FILTERS)

        assert {"proj/dist", "proj/.git", "proj/debug.log", "proj/.DS_Store", "proj/.gitignore"} <= result.excluded
        assert result.excluded.isdisjoint(result.files)

    def test_directories_are_collected(self, tmp_path):
        root = _make_project(tmp_path)
        result = scan_roots({"proj": DirectoryHandle(root)}, COMMON_FILTERS)

        assert set(result.directories) == {"proj", "proj/src"}

    def test_handles_read_their_files(self, tmp_path):
        root = _make_project(tmp_path)
        result = scan_roots({"proj": DirectoryHandle(root)}, COMMON_FILTERS)

        assert result.files["proj/src/b.py"].read_text() == "b"


class TestPruning:
    def test_nothing_under_a_pruned_directory_is_visited(self, tmp_path):
        root = _make_project(tmp_path)
        recorder = _Recorder()
        scan_roots({"proj": DirectoryHandle(root)}, [lambda: recorder, dist_filter])

        assert "proj/dist" in recorder.seen
        assert not [p for p in recorder.seen if p.startswith("proj/dist/")]

    def test_no_filters_includes_everything(self, tmp_path):
        root = _make_project(tmp_path)
        result = scan_roots({"proj": DirectoryHandle(root)}, [])

        assert "proj/.git/HEAD" in result.files
        assert "proj/dist/deep/x.js" in result.files
        assert result.excluded == set()


class TestFreshFiltersPerScan:
    def test_ignore_rule_edits_apply_on_next_scan(self, tmp_path):
        root = _make_project(tmp_path)
        roots = {"proj": DirectoryHandle(root)}

        first = scan_roots(roots, COMMON_FILTERS)
        assert "proj/debug.log" not in first.files

        (root / ".gitignore").write_text("")
        second = scan_roots(roots, COMMON_FILTERS)
        assert "proj/debug.log" in second.files

    def test_new_files_appear_on_next_scan(self, tmp_path):
        root = _make_project(tmp_path)
        roots = {"proj": DirectoryHandle(root)}
        scan_roots(roots, COMMON_FILTERS)

        (root / "src" / "c.py").write_text("c")
        assert "proj/src/c.py" in scan_roots(roots, COMMON_FILTERS).files


class TestMultipleRoots:
    def test_labels_are_rooted_at_each_root(self, tmp_path):
        one = tmp_path / "one"
        two = tmp_path / "two"
        one.mkdir()
        two.mkdir()
        (one / "x.txt").write_text("1")
        (two / "y.txt").write_text("2")

        result = scan_roots(
            {"one": DirectoryHandle(one), "two": DirectoryHandle(two)}, COMMON_FILTERS
        )
        assert set(result.files) == {"one/x.txt", "two/y.txt"}

    def test_missing_root_is_skipped(self, tmp_path):
        present = tmp_path / "present"
        present.mkdir()
        (present / "x.txt").write_text("1")

        result = scan_roots(
            {
                "gone": DirectoryHandle(tmp_path / "gone"),
                "present": DirectoryHandle(present),
            },
            COMMON_FILTERS,
        )
        assert set(result.files) == {"present/x.txt"}
