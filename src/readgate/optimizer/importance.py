"""Task-independent importance ranking of the files in the dependency graph."""

from __future__ import annotations

from pathlib import Path

from readgate.collaborators.graph import DependencyGraph, DependencyNode, load_graph
from readgate.config.constants import DEFAULT_TOP_K
from readgate.core.logging import get_logger
from readgate.core.paths import IMPORTANCE_FILE, RAG_DIR_NAME, normalize_path, paths_match
from readgate.optimizer.models import ImportanceDocument, ImportanceEntry, ImportanceFactors
from readgate.state.store import load_document, write_document
from readgate.vcs import GitHistory

log = get_logger("importance")

# (exclusive upper bound on line count, score)
_SIZE_STEPS = ((10, 5), (50, 15), (100, 20), (200, 10), (500, 5))

ENTRY_SCORE = 15


def size_score(line_count: int | None) -> int:
    """Inverse-U over line count, peaking for 50-99 line files."""
    if line_count is None:
        return 0
    for limit, score in _SIZE_STEPS:
        if line_count < limit:
            return score
    return 0


def churn_score(commit_count: int) -> int:
    return min(15, (commit_count // 5) * 3)


def calculate_importance(
    file_path: str,
    node: DependencyNode | None,
    line_count: int | None,
    commit_count: int,
) -> ImportanceEntry:
    factors = ImportanceFactors(size=size_score(line_count), churn=churn_score(commit_count))
    if node is not None:
        factors.centrality = min(30, len(node.imported_by) * 3 + len(node.imports))
        factors.exports = min(20, len(node.exports) * 4)
        factors.is_entry = ENTRY_SCORE if not node.imported_by else 0
    importance = (
        factors.centrality + factors.churn + factors.size + factors.exports + factors.is_entry
    )
    return ImportanceEntry(file_path=file_path, importance=importance, factors=factors)


def _line_count(path: Path) -> int | None:
    try:
        return len(path.read_text(encoding="utf-8", errors="replace").splitlines())
    except OSError:
        return None


class ImportanceIndexer:
    """Builds and queries ``importance.json``."""

    def __init__(
        self,
        repo_root: Path,
        *,
        state_dir: str = RAG_DIR_NAME,
        history: GitHistory | None = None,
    ) -> None:
        self._root = repo_root
        self._state_dir = repo_root / state_dir
        self._path = self._state_dir / IMPORTANCE_FILE
        self._history = history

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ImportanceDocument | None:
        return load_document(self._path, ImportanceDocument)

    def build_importance_index(
        self, top_k: int = DEFAULT_TOP_K, graph: DependencyGraph | None = None
    ) -> ImportanceDocument:
        """Rank every graph file present on disk and persist the index."""
        graph = graph if graph is not None else load_graph(self._state_dir)
        doc = ImportanceDocument(top_k=top_k)
        if graph is None:
            log.info("importance_no_graph")
            write_document(self._path, doc)
            return doc

        present = [p for p in graph.files() if (self._root / p).is_file()]
        history = self._history or GitHistory(self._root)
        commits = history.commit_counts(present)

        entries = [
            calculate_importance(
                normalize_path(p),
                graph.nodes[p],
                _line_count(self._root / p),
                commits.get(normalize_path(p), 0),
            )
            for p in present
        ]
        entries.sort(key=lambda e: e.importance, reverse=True)
        doc.files = entries
        write_document(self._path, doc)
        log.info("importance_built", files=len(entries), top_k=top_k)
        return doc

    def top_k_files(self, k: int | None = None) -> list[ImportanceEntry]:
        doc = self.load()
        if doc is None:
            return []
        return doc.files[: doc.top_k if k is None else k]

    def is_in_top_k(self, file_path: str, k: int | None = None) -> bool:
        path = normalize_path(file_path, self._root)
        return any(paths_match(path, e.file_path) for e in self.top_k_files(k))

    def entry(self, file_path: str) -> tuple[int, ImportanceEntry] | None:
        """1-based rank and entry of a file, if indexed."""
        doc = self.load()
        if doc is None:
            return None
        path = normalize_path(file_path, self._root)
        for rank, e in enumerate(doc.files, start=1):
            if paths_match(path, e.file_path):
                return rank, e
        return None
