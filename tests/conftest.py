"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages and
provides repository fixtures shared across the suite.
"""

from __future__ import annotations

import json
import os
import sys
from collections.abc import Callable, Generator, Iterator
from pathlib import Path
from typing import Any

import pygit2
import pytest

# Insert local src directory at the beginning of sys.path
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

_SIG = pygit2.Signature("Test User", "test@example.com")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Keep the host environment and global config out of every test."""
    for key in list(os.environ):
        if key.startswith("READGATE__"):
            monkeypatch.delenv(key)
    monkeypatch.setattr(
        "readgate.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "no-global-config.yaml"
    )
    yield


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    """Plain directory used as a repository root (no git)."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def git_repo(tmp_path: Path) -> Generator[pygit2.Repository, None, None]:
    """Create a temporary git repository with an initial commit."""
    repo_path = tmp_path / "repo"
    repo_path.mkdir()
    repo = pygit2.init_repository(str(repo_path), initial_head="main")
    repo.config["user.name"] = "Test User"
    repo.config["user.email"] = "test@example.com"

    (repo_path / "README.md").write_text("# Test Repo\n")
    repo.index.add("README.md")
    repo.index.write()
    tree = repo.index.write_tree()
    repo.create_commit("HEAD", _SIG, _SIG, "Initial commit", tree, [])

    yield repo


@pytest.fixture
def commit_files() -> Callable[..., pygit2.Oid]:
    """Write files into a repository and commit them."""

    def _commit(repo: pygit2.Repository, files: dict[str, str], message: str = "update") -> pygit2.Oid:
        workdir = Path(repo.workdir)
        for rel, content in files.items():
            target = workdir / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
            repo.index.add(rel)
        repo.index.write()
        tree = repo.index.write_tree()
        parents = [] if repo.head_is_unborn else [repo.head.target]
        return repo.create_commit("HEAD", _SIG, _SIG, message, tree, parents)

    return _commit


@pytest.fixture
def write_graph() -> Callable[[Path, dict[str, dict[str, Any]]], Path]:
    """Write a ``.rag/deps.json`` dependency graph.

    ``nodes`` maps a path to ``{"imports": [...], "exports": [...], "importedBy": [...]}``;
    imports are given as resolved paths.
    """

    def _write(root: Path, nodes: dict[str, dict[str, Any]]) -> Path:
        doc = {
            "version": "1.0.0",
            "nodes": {
                path: {
                    "filePath": path,
                    "imports": [
                        {"source": f"./{p}", "resolvedPath": p} for p in spec.get("imports", [])
                    ],
                    "exports": [{"name": n} for n in spec.get("exports", [])],
                    "importedBy": spec.get("importedBy", []),
                    "isEntryPoint": spec.get("isEntryPoint", False),
                }
                for path, spec in nodes.items()
            },
        }
        target = root / ".rag" / "deps.json"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(doc))
        return target

    return _write


@pytest.fixture
def write_error_db() -> Callable[[Path, list[dict[str, Any]]], Path]:
    """Write a ``.rag/errors.json`` error-pattern database."""

    def _write(root: Path, patterns: list[dict[str, Any]]) -> Path:
        target = root / ".rag" / "errors.json"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps({"version": "1.0.0", "patterns": patterns}))
        return target

    return _write
