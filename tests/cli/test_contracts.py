"""Tests for readgate contracts commands."""

from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from readgate.cli.main import cli

runner = CliRunner()

SOURCE = "export function login(user: string): boolean {\n  return true;\n}\n"


def _invoke(root: Path, *args: str):
    return runner.invoke(cli, ["-C", str(root), "contracts", *args])


class TestContractsCommands:
    def test_given_snapshot_when_signature_changes_then_check_reports_diff(
        self, repo_root: Path
    ) -> None:
        # Given
        target = repo_root / "auth.ts"
        target.write_text(SOURCE)
        assert _invoke(repo_root, "snapshot", "auth.ts").exit_code == 0
        target.write_text(SOURCE.replace("user: string", "user: string, otp: string"))

        # When
        text = _invoke(repo_root, "check", "auth.ts")
        data = json.loads(_invoke(repo_root, "check", "auth.ts", "--json").output)

        # Then
        assert text.exit_code == 0
        assert "Modified (1)" in text.output
        assert data[0]["filePath"] == "auth.ts"
        assert len(data[0]["modified"]) == 1

    def test_given_snapshot_when_status_then_lists_tracked(self, repo_root: Path) -> None:
        (repo_root / "auth.ts").write_text(SOURCE)
        _invoke(repo_root, "snapshot", "auth.ts")

        result = _invoke(repo_root, "status")

        assert "Tracked contracts: 1" in result.output
        assert "auth.ts" in result.output

    def test_given_no_files_when_snapshot_then_usage_error(self, repo_root: Path) -> None:
        assert _invoke(repo_root, "snapshot").exit_code == 2
