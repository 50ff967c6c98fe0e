"""Path normalization and matching for repo-relative file references.

Agents refer to the same file as ``src/a.ts``, ``./src/a.ts``,
``src\\a.ts`` or an absolute path. Every component normalizes once at its
boundary with :func:`normalize_path` and compares with :func:`paths_match`.
"""

from __future__ import annotations

import os
import posixpath
from pathlib import Path

RAG_DIR_NAME = ".rag"

BUDGET_FILE = "budget.json"
HYPOTHESIS_FILE = "hypothesis.json"
HYPOTHESIS_ARCHIVE_FILE = "hypothesis-archive.json"
CONTEXT_STATE_FILE = "context-state.json"
CONTRACTS_FILE = "contracts.json"
IMPORTANCE_FILE = "importance.json"
DEPS_FILE = "deps.json"
ERRORS_FILE = "errors.json"
CONFIG_FILE = "config.yaml"


def normalize_path(path: str | os.PathLike[str], root: Path | None = None) -> str:
    """Normalize a file reference to a forward-slash, repo-relative form.

    Examples:
        ./src/a.ts -> src/a.ts
        src\\lib\\b.ts -> src/lib/b.ts
        /repo/src/a.ts (root=/repo) -> src/a.ts
    """
    text = os.fspath(path).replace("\\", "/")
    if root is not None and posixpath.isabs(text):
        root_text = os.fspath(root).replace("\\", "/").rstrip("/")
        if text == root_text:
            return "."
        if text.startswith(root_text + "/"):
            text = text[len(root_text) + 1 :]
    while text.startswith("./"):
        text = text[2:]
    if not text:
        return text
    return posixpath.normpath(text)


def paths_match(a: str, b: str) -> bool:
    """True when paths are equal or one is a path-component suffix of the other.

    ``src/a.ts`` matches ``a.ts`` and ``/repo/src/a.ts`` but not ``src/aa.ts``.
    """
    left = normalize_path(a)
    right = normalize_path(b)
    if not left or not right:
        return False
    if left == right:
        return True
    return left.endswith("/" + right) or right.endswith("/" + left)


def matches_any(path: str, candidates: list[str] | set[str]) -> bool:
    return any(paths_match(path, c) for c in candidates)


def rag_dir(root: Path, state_dir: str = RAG_DIR_NAME) -> Path:
    """State directory for a repo root."""
    return root / state_dir
