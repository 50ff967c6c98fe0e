"""Tests for the dependency graph and error-pattern views."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from readgate.collaborators.error_db import load_error_db
from readgate.collaborators.graph import DependencyGraph, load_graph


@pytest.fixture
def graph(
    repo_root: Path, write_graph: Callable[[Path, dict[str, dict[str, Any]]], Path]
) -> DependencyGraph:
    # app -> service -> db ; cli -> service
    write_graph(
        repo_root,
        {
            "src/app.ts": {"imports": ["src/service.ts"]},
            "src/cli.ts": {"imports": ["src/service.ts"]},
            "src/service.ts": {
                "imports": ["src/db.ts"],
                "importedBy": ["src/app.ts", "src/cli.ts"],
                "exports": ["Service"],
            },
            "src/db.ts": {"importedBy": ["src/service.ts"], "exports": ["query", "connect"]},
        },
    )
    loaded = load_graph(repo_root / ".rag")
    assert loaded is not None
    return loaded


class TestDependencyGraph:
    """Graph queries."""

    def test_given_node_when_direct_importers_then_listed(self, graph: DependencyGraph) -> None:
        assert graph.get_importers("src/service.ts") == ["src/app.ts", "src/cli.ts"]

    def test_given_leaf_when_transitive_importers_then_closure(
        self, graph: DependencyGraph
    ) -> None:
        # When
        importers = graph.get_importers("src/db.ts", transitive=True)

        # Then
        assert importers == ["src/service.ts", "src/app.ts", "src/cli.ts"]

    def test_given_root_when_transitive_dependencies_then_closure(
        self, graph: DependencyGraph
    ) -> None:
        assert graph.get_dependencies("src/app.ts") == ["src/service.ts"]
        assert graph.get_dependencies("src/app.ts", transitive=True) == [
            "src/service.ts",
            "src/db.ts",
        ]

    def test_given_suffix_reference_when_looked_up_then_node_found(
        self, graph: DependencyGraph
    ) -> None:
        node = graph.node("./db.ts")
        assert node is not None
        assert node.file_path == "src/db.ts"
        assert node.centrality == 1

    def test_given_unknown_file_when_queried_then_empty(self, graph: DependencyGraph) -> None:
        assert graph.node("src/other.ts") is None
        assert graph.get_importers("src/other.ts") == []
        assert graph.get_dependencies("src/other.ts", transitive=True) == []

    def test_given_no_graph_file_when_loaded_then_none(self, repo_root: Path) -> None:
        assert load_graph(repo_root / ".rag") is None


class TestErrorPatternDB:
    """Error-pattern mentions."""

    def test_given_patterns_when_counted_then_basename_mentions(
        self,
        repo_root: Path,
        write_error_db: Callable[[Path, list[dict[str, Any]]], Path],
    ) -> None:
        # Given
        write_error_db(
            repo_root,
            [
                {"errorMessage": "TypeError in auth.ts line 3"},
                {"errorMessage": "x", "solution": {"description": "patch auth.ts"}},
                {"errorMessage": "y", "metadata": {"tags": ["auth.ts"]}},
                {"errorMessage": "unrelated"},
            ],
        )

        # When
        db = load_error_db(repo_root / ".rag")

        # Then
        assert db is not None
        assert db.count_mentions("src/lib/auth.ts") == 3
        assert db.count_mentions("src/other.ts") == 0
