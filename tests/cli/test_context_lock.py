"""Tests for readgate context-lock commands."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from readgate.cli.main import cli

runner = CliRunner()


def _invoke(root: Path, *args: str):
    return runner.invoke(cli, ["-C", str(root), "context-lock", *args])


class TestContextLockCommands:
    def test_given_lock_when_checked_then_only_locked_files_allowed(
        self, repo_root: Path
    ) -> None:
        # Given
        result = _invoke(repo_root, "lock", "Root cause found", "-f", "src/a.ts")
        assert result.exit_code == 0

        # When
        allowed = _invoke(repo_root, "check", "src/a.ts")
        denied = _invoke(repo_root, "check", "src/b.ts")

        # Then
        assert allowed.output.startswith("ALLOW")
        assert denied.output.startswith("DENY src/b.ts: Context locked: Root cause found")

    def test_given_override_when_checked_then_allowed(self, repo_root: Path) -> None:
        _invoke(repo_root, "lock", "done")
        assert _invoke(repo_root, "override", "src/c.ts", "--reason", "needed").exit_code == 0
        assert _invoke(repo_root, "check", "src/c.ts").output.startswith("ALLOW")

    def test_given_locked_when_unlocked_then_status_open(self, repo_root: Path) -> None:
        # Given
        _invoke(repo_root, "lock", "done", "-f", "a.ts")

        # When
        _invoke(repo_root, "unlock")
        text = _invoke(repo_root, "status")
        data = json.loads(_invoke(repo_root, "status", "--json").output)

        # Then
        assert "open" in text.output
        assert data["sufficientContext"] is False
        assert data["lockedFiles"] == ["a.ts"]
