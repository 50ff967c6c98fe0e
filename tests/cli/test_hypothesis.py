"""Tests for readgate hypothesis commands."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from readgate.cli.main import cli

runner = CliRunner()


def _invoke(root: Path, *args: str):
    return runner.invoke(cli, ["-C", str(root), "hypothesis", *args])


def _add(root: Path, *args: str) -> str:
    result = _invoke(root, "add", *args)
    assert result.exit_code == 0, result.output
    # The id is echoed on the last line of stdout
    return result.output.strip().splitlines()[-1]


class TestHypothesisCommands:
    """Session lifecycle through the CLI."""

    def test_given_no_session_when_add_then_error(self, repo_root: Path) -> None:
        result = _invoke(repo_root, "add", "x", "-f", "a.ts")
        assert result.exit_code == 1
        assert "HYPOTHESIS_NO_SESSION" in result.output

    def test_given_session_when_checked_then_targets_allowed(self, repo_root: Path) -> None:
        # Given
        assert _invoke(repo_root, "start", "Fix login").exit_code == 0
        _add(repo_root, "Token parsing", "-f", "src/auth.ts", "-p", "2")

        # When
        on_target = _invoke(repo_root, "check", "src/auth.ts")
        off_target = _invoke(repo_root, "check", "src/db.ts")

        # Then
        assert on_target.output.startswith("ALLOW src/auth.ts")
        assert off_target.output.startswith("DENY src/db.ts: File not in any hypothesis target")
        assert off_target.exit_code == 0

    def test_given_hypothesis_when_validated_twice_then_second_fails(
        self, repo_root: Path
    ) -> None:
        # Given
        _invoke(repo_root, "start", "t")
        hypothesis_id = _add(repo_root, "h", "-f", "a.ts")

        # When
        first = _invoke(repo_root, "validate", hypothesis_id, "--evidence", "seen")
        second = _invoke(repo_root, "reject", hypothesis_id)

        # Then
        assert first.exit_code == 0
        assert second.exit_code == 1
        assert "HYPOTHESIS_ALREADY_RESOLVED" in second.output

    def test_given_resolved_session_when_status_and_archive_then_reported(
        self, repo_root: Path
    ) -> None:
        # Given
        _invoke(repo_root, "start", "t")
        hypothesis_id = _add(repo_root, "h", "-f", "a.ts")
        _invoke(repo_root, "reject", hypothesis_id, "-e", "not it")

        # When
        status = _invoke(repo_root, "status", "--json")
        text = _invoke(repo_root, "status")
        archive = _invoke(repo_root, "archive")

        # Then
        data = json.loads(status.output)
        assert (data["total"], data["rejected"]) == (1, 1)
        assert "[-]" in text.output
        assert archive.exit_code == 0
        assert _invoke(repo_root, "status").exit_code == 1

    def test_given_pending_when_archived_then_error(self, repo_root: Path) -> None:
        _invoke(repo_root, "start", "t")
        _add(repo_root, "h", "-f", "a.ts")
        result = _invoke(repo_root, "archive")
        assert result.exit_code == 1
        assert "HYPOTHESIS_PENDING" in result.output

    def test_given_no_target_when_add_then_usage_error(self, repo_root: Path) -> None:
        _invoke(repo_root, "start", "t")
        assert _invoke(repo_root, "add", "h").exit_code == 2
