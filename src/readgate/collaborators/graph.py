"""Read-only view of the dependency graph document (``.rag/deps.json``).

The graph is produced by an external indexer. Only the fields the admission
checks need are modeled; unknown fields are ignored.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from pathlib import Path

from pydantic import ConfigDict, Field

from readgate.core.paths import DEPS_FILE, normalize_path, paths_match
from readgate.state.store import StateDocument, StateModel, load_document


class ImportInfo(StateModel):
    model_config = ConfigDict(extra="ignore")

    source: str = ""
    resolved_path: str | None = None
    names: list[str] = Field(default_factory=list)
    line: int = 0


class ExportInfo(StateModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    type: str = "const"
    line: int = 0


class DependencyNode(StateModel):
    model_config = ConfigDict(extra="ignore")

    file_path: str
    imports: list[ImportInfo] = Field(default_factory=list)
    exports: list[ExportInfo] = Field(default_factory=list)
    imported_by: list[str] = Field(default_factory=list)
    is_entry_point: bool = False
    is_leaf: bool = False

    @property
    def centrality(self) -> int:
        return len(self.imported_by) + len(self.imports)


class DependencyGraph(StateDocument):
    """Dependency graph keyed by normalized relative path."""

    model_config = ConfigDict(extra="ignore")

    nodes: dict[str, DependencyNode] = Field(default_factory=dict)

    def node(self, path: str) -> DependencyNode | None:
        """Look up a node by exact normalized path, then by suffix match."""
        key = normalize_path(path)
        found = self.nodes.get(key)
        if found is not None:
            return found
        for candidate, node in self.nodes.items():
            if paths_match(candidate, key):
                return node
        return None

    def files(self) -> list[str]:
        return list(self.nodes)

    def get_importers(self, path: str, transitive: bool = False) -> list[str]:
        """Files importing ``path``; breadth-first closure when transitive."""
        node = self.node(path)
        if node is None:
            return []
        if not transitive:
            return list(node.imported_by)
        return self._walk(node.imported_by, lambda n: n.imported_by)

    def get_dependencies(self, path: str, transitive: bool = False) -> list[str]:
        """Files imported by ``path``; breadth-first closure when transitive."""
        node = self.node(path)
        if node is None:
            return []
        direct = [i.resolved_path for i in node.imports if i.resolved_path]
        if not transitive:
            return direct
        return self._walk(
            direct,
            lambda n: [i.resolved_path for i in n.imports if i.resolved_path],
        )

    def _walk(
        self, start: list[str], edges: Callable[[DependencyNode], list[str]]
    ) -> list[str]:
        seen: dict[str, None] = {}
        queue = deque(start)
        while queue:
            current = queue.popleft()
            if current in seen:
                continue
            seen[current] = None
            current_node = self.nodes.get(current)
            if current_node is not None:
                queue.extend(p for p in edges(current_node) if p not in seen)
        return list(seen)


def load_graph(state_dir: Path) -> DependencyGraph | None:
    """Load the graph, or None when absent or unusable."""
    return load_document(state_dir / DEPS_FILE, DependencyGraph)
