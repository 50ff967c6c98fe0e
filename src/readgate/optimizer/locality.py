"""Locality scoring: how relevant a file is to the task at hand.

Four independent factors, each a step function bounded to [0, 25]:
recency of modification, proximity to changed files, mentions in the error
pattern DB, and dependency-graph centrality. The score is their plain sum.
Missing collaborators contribute 0.
"""

from __future__ import annotations

import posixpath
import time
from collections.abc import Iterable
from pathlib import Path

from readgate.collaborators.error_db import ErrorPatternDB
from readgate.collaborators.graph import DependencyGraph
from readgate.config.constants import DEFAULT_LOCALITY_THRESHOLD
from readgate.core.paths import normalize_path
from readgate.optimizer.models import LocalityFactors, LocalityScore

# (lower bound, score) pairs, checked in order
_RECENCY_STEPS = ((1, 25), (4, 20), (24, 15), (72, 10), (168, 5))
_ERROR_STEPS = ((5, 25), (3, 20), (2, 15), (1, 10))
_CENTRALITY_STEPS = ((20, 25), (10, 20), (5, 15), (2, 10), (1, 5))


def recency_score(age_hours: float | None) -> int:
    if age_hours is None:
        return 0
    for limit, score in _RECENCY_STEPS:
        if age_hours < limit:
            return score
    return 0


def diff_proximity_score(path: str, changed_files: Iterable[str]) -> int:
    changed = [normalize_path(f) for f in changed_files]
    if not changed:
        return 0
    if path in changed:
        return 25
    parent = posixpath.dirname(path)
    if any(posixpath.dirname(f) == parent for f in changed):
        return 15
    grandparent = posixpath.dirname(parent)
    if any(posixpath.dirname(posixpath.dirname(f)) == grandparent for f in changed):
        return 5
    return 0


def error_history_score(path: str, error_db: ErrorPatternDB) -> int:
    count = error_db.count_mentions(path)
    for minimum, score in _ERROR_STEPS:
        if count >= minimum:
            return score
    return 0


def centrality_score(path: str, graph: DependencyGraph) -> int:
    node = graph.node(path)
    if node is None:
        return 0
    for minimum, score in _CENTRALITY_STEPS:
        if node.centrality >= minimum:
            return score
    return 0


def _age_hours(file_path: Path, now: float) -> float | None:
    try:
        mtime = file_path.stat().st_mtime
    except OSError:
        return None
    return (now - mtime) / 3600


def calculate_locality_score(
    file_path: str,
    changed_files: Iterable[str] | None = None,
    graph: DependencyGraph | None = None,
    error_db: ErrorPatternDB | None = None,
    now: float | None = None,
    repo_root: Path | None = None,
) -> LocalityScore:
    """Score one file. ``now`` is a POSIX timestamp (defaults to the current time)."""
    path = normalize_path(file_path, repo_root)
    on_disk = (repo_root / path) if repo_root is not None else Path(path)
    factors = LocalityFactors(
        recency=recency_score(_age_hours(on_disk, time.time() if now is None else now)),
        diff_proximity=diff_proximity_score(path, changed_files) if changed_files else 0,
        error_history=error_history_score(path, error_db) if error_db else 0,
        centrality=centrality_score(path, graph) if graph else 0,
    )
    return LocalityScore(file_path=path, score=factors.total, factors=factors)


def rank_files_by_locality(
    files: Iterable[str],
    changed_files: Iterable[str] | None = None,
    graph: DependencyGraph | None = None,
    error_db: ErrorPatternDB | None = None,
    now: float | None = None,
    repo_root: Path | None = None,
) -> list[LocalityScore]:
    """Score and sort files by descending score with dense ranks (ties share a rank)."""
    changed = list(changed_files) if changed_files is not None else None
    scores = [
        calculate_locality_score(f, changed, graph, error_db, now, repo_root) for f in files
    ]
    scores.sort(key=lambda s: s.score, reverse=True)

    ranked: list[LocalityScore] = []
    rank = 0
    previous: int | None = None
    for score in scores:
        if score.score != previous:
            rank += 1
            previous = score.score
        ranked.append(
            LocalityScore(
                file_path=score.file_path, score=score.score, factors=score.factors, rank=rank
            )
        )
    return ranked


def filter_by_threshold(
    scores: Iterable[LocalityScore], min_score: int = DEFAULT_LOCALITY_THRESHOLD
) -> list[LocalityScore]:
    return [s for s in scores if s.score >= min_score]
