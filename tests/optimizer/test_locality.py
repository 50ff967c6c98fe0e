"""Tests for locality scoring."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from readgate.collaborators.error_db import ErrorPattern, ErrorPatternDB
from readgate.collaborators.graph import load_graph
from readgate.optimizer.locality import (
    calculate_locality_score,
    diff_proximity_score,
    error_history_score,
    filter_by_threshold,
    rank_files_by_locality,
    recency_score,
)

NOW = 1_700_000_000.0
HOUR = 3600


def _touch(path: Path, age_hours: float) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("x\n")
    mtime = NOW - age_hours * HOUR
    os.utime(path, (mtime, mtime))
    return path


class TestFactorSteps:
    """Step functions for each factor."""

    @pytest.mark.parametrize(
        ("age", "expected"),
        [
            (0.5, 25),
            (1, 20),
            (3.9, 20),
            (4, 15),
            (23, 15),
            (24, 10),
            (71, 10),
            (72, 5),
            (167, 5),
            (168, 0),
            (None, 0),
        ],
    )
    def test_recency(self, age: float | None, expected: int) -> None:
        assert recency_score(age) == expected

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("src/auth/login.ts", 25),
            ("src/auth/session.ts", 15),
            ("src/db/pool.ts", 5),
            ("lib/other.ts", 0),
        ],
    )
    def test_diff_proximity(self, path: str, expected: int) -> None:
        assert diff_proximity_score(path, ["src/auth/login.ts"]) == expected

    def test_diff_proximity_without_changes_is_zero(self) -> None:
        assert diff_proximity_score("src/a.ts", []) == 0

    @pytest.mark.parametrize(
        ("mentions", "expected"),
        [(0, 0), (1, 10), (2, 15), (3, 20), (4, 20), (5, 25), (9, 25)],
    )
    def test_error_history(self, mentions: int, expected: int) -> None:
        db = ErrorPatternDB(
            patterns=[ErrorPattern(error_message="crash in auth.ts") for _ in range(mentions)]
        )
        assert error_history_score("src/auth.ts", db) == expected


class TestCalculateLocalityScore:
    """Combined scores."""

    def test_given_no_collaborators_when_scored_then_only_recency(
        self, repo_root: Path
    ) -> None:
        # Given
        _touch(repo_root / "src" / "a.ts", age_hours=2)

        # When
        score = calculate_locality_score("src/a.ts", now=NOW, repo_root=repo_root)

        # Then
        assert score.score == 20
        assert score.factors.diff_proximity == 0
        assert score.factors.error_history == 0
        assert score.factors.centrality == 0

    def test_given_all_signals_when_scored_then_sum_of_factors(
        self,
        repo_root: Path,
        write_graph: Callable[[Path, dict[str, dict[str, Any]]], Path],
    ) -> None:
        # Given
        _touch(repo_root / "src" / "hub.ts", age_hours=0.1)
        importers = [f"src/m{i}.ts" for i in range(20)]
        write_graph(repo_root, {"src/hub.ts": {"importedBy": importers}})
        db = ErrorPatternDB(
            patterns=[ErrorPattern(error_message="hub.ts failed") for _ in range(5)]
        )

        # When
        score = calculate_locality_score(
            "src/hub.ts",
            changed_files=["src/hub.ts"],
            graph=load_graph(repo_root / ".rag"),
            error_db=db,
            now=NOW,
            repo_root=repo_root,
        )

        # Then
        assert score.score == 100
        assert score.factors.total == score.score

    def test_given_missing_file_when_scored_then_zero_recency(self, repo_root: Path) -> None:
        score = calculate_locality_score("src/none.ts", now=NOW, repo_root=repo_root)
        assert score.score == 0
        assert 0 <= score.score <= 100


class TestRanking:
    """Ranking and filtering."""

    def test_given_ties_when_ranked_then_dense_ranks(self, repo_root: Path) -> None:
        # Given
        _touch(repo_root / "a.ts", age_hours=0.5)  # 25
        _touch(repo_root / "b.ts", age_hours=0.5)  # 25
        _touch(repo_root / "c.ts", age_hours=30)  # 10

        # When
        ranked = rank_files_by_locality(["c.ts", "a.ts", "b.ts"], now=NOW, repo_root=repo_root)

        # Then
        assert [(s.file_path, s.score, s.rank) for s in ranked] == [
            ("a.ts", 25, 1),
            ("b.ts", 25, 1),
            ("c.ts", 10, 2),
        ]

    def test_given_threshold_when_filtered_then_low_scores_dropped(
        self, repo_root: Path
    ) -> None:
        # Given
        _touch(repo_root / "a.ts", age_hours=0.5)
        _touch(repo_root / "c.ts", age_hours=30)
        ranked = rank_files_by_locality(["a.ts", "c.ts"], now=NOW, repo_root=repo_root)

        # When
        kept = filter_by_threshold(ranked, 25)

        # Then
        assert [s.file_path for s in kept] == ["a.ts"]
