"""
Ignore-rules filter backed by pathspec (gitwildmatch).

Each processed directory contributes its own ``.gitignore`` with rules scoped
to that directory. Rules accumulate over one scan only; the factory builds an
empty accumulator every cycle so edits to ``.gitignore`` take effect on the
next scan. ``.gitignore`` files themselves are consumed as rules and are not
watched. ``.git`` directories are always skipped.
"""

import logging
from typing import List, Optional, Tuple

from pathspec import PathSpec

from handles.fs_handles import DirectoryHandle, FileHandle

log = logging.getLogger(__name__)

GITIGNORE = ".gitignore"


def _last_match(spec: PathSpec, rel: str) -> Optional[bool]:
    """True/False from the last rule matching ``rel`` (False for ``!`` rules), None if none match."""
    verdict = None
    for pattern in spec.patterns:
        if pattern.include is None:
            continue
        if pattern.match_file(rel) is not None:
            verdict = pattern.include
    return verdict


class GitIgnoreFilter:
    def __init__(self) -> None:
        # (directory path, rules relative to that directory)
        self._scopes: List[Tuple[str, PathSpec]] = []

    def _load_rules(self, dir_path: str, handle: DirectoryHandle) -> None:
        try:
            rules_file = handle.get_file_handle(GITIGNORE)
            text = rules_file.read_text()
        except (FileNotFoundError, IsADirectoryError):
            return
        except (OSError, UnicodeDecodeError):
            log.debug("Unreadable %s in %s", GITIGNORE, dir_path)
            return
        spec = PathSpec.from_lines("gitwildmatch", text.splitlines())
        self._scopes.append((dir_path, spec))
        log.debug("Loaded %d ignore rules from %s/%s", len(spec.patterns), dir_path, GITIGNORE)

    def is_ignored(self, path: str, is_dir: bool = False) -> bool:
        """
        Git precedence: the deepest ``.gitignore`` with a matching rule decides,
        and within one file the last matching rule wins, so ``!pattern`` in a
        nested file re-includes what a parent ignored.
        """
        scopes = [(scope, spec) for scope, spec in self._scopes if path.startswith(scope + "/")]
        for scope, spec in sorted(scopes, key=lambda item: len(item[0]), reverse=True):
            rel = path[len(scope) + 1:]
            if is_dir:
                rel += "/"
            verdict = _last_match(spec, rel)
            if verdict is not None:
                return verdict
        return False

    def should_include_file(self, path: str, handle: FileHandle) -> bool:
        if path.rsplit("/", 1)[-1] == GITIGNORE:
            return False
        return not self.is_ignored(path)

    def should_process_directory(self, path: str, handle: DirectoryHandle) -> bool:
        if path.rsplit("/", 1)[-1] == ".git" or "/.git/" in path:
            return False
        if self.is_ignored(path, is_dir=True):
            return False
        self._load_rules(path, handle)
        return True


def git_filter() -> GitIgnoreFilter:
    return GitIgnoreFilter()
