"""Version-control facts for locality and importance scoring.

Wraps a pygit2 repository and exposes two facts: files changed relative to a
base revision, and per-file commit counts. Without a repository both degrade
to empty results so scoring factors drop to zero.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

import pygit2

from readgate.core.logging import get_logger
from readgate.core.paths import normalize_path

log = get_logger("vcs")


class GitHistory:
    """Read-only access to changed files and commit counts."""

    def __init__(self, repo_root: Path | str) -> None:
        self._root = Path(repo_root)
        self._repo: pygit2.Repository | None
        try:
            self._repo = pygit2.Repository(str(self._root))
        except pygit2.GitError:
            log.debug("no_repository", path=str(self._root))
            self._repo = None

    @property
    def available(self) -> bool:
        return self._repo is not None

    def changed_files(self, base: str = "HEAD") -> list[str]:
        """Tracked files differing from ``base`` in the index or working tree."""
        repo = self._repo
        if repo is None or repo.head_is_unborn:
            return []
        try:
            tree = repo.revparse_single(base).peel(pygit2.Tree)
        except (KeyError, ValueError, pygit2.GitError):
            log.debug("unknown_base", base=base)
            return []

        changed: dict[str, None] = {}
        for diff in (tree.diff_to_index(repo.index), tree.diff_to_workdir()):
            for delta in diff.deltas:
                for path in (delta.old_file.path, delta.new_file.path):
                    if path:
                        changed[normalize_path(path)] = None
        return list(changed)

    def tracked_files(self) -> list[str]:
        """Paths in the index, used when no dependency graph lists the files."""
        if self._repo is None:
            return []
        return [normalize_path(entry.path) for entry in self._repo.index]

    def commit_counts(self, paths: Iterable[str]) -> dict[str, int]:
        """Commits touching each path, following ``git log -- <path>`` semantics."""
        wanted = [normalize_path(p) for p in paths]
        counts = dict.fromkeys(wanted, 0)
        repo = self._repo
        if repo is None or repo.head_is_unborn or not wanted:
            return counts

        for commit in repo.walk(repo.head.target, pygit2.GIT_SORT_TIME):
            parents = commit.parents
            for path in wanted:
                current = _entry_id(commit.tree, path)
                if not parents:
                    touched = current is not None
                else:
                    touched = all(_entry_id(p.tree, path) != current for p in parents)
                if touched:
                    counts[path] += 1
        return counts

    def commit_count(self, path: str) -> int:
        return self.commit_counts([path])[normalize_path(path)]


def _entry_id(tree: pygit2.Tree, path: str) -> pygit2.Oid | None:
    try:
        return tree[path].id
    except KeyError:
        return None
