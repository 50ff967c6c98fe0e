"""Tests for the context lock."""

from __future__ import annotations

from pathlib import Path

import pytest

from readgate.optimizer.context_lock import ContextLock


@pytest.fixture
def lock(repo_root: Path) -> ContextLock:
    return ContextLock(repo_root)


class TestContextLock:
    """Declare, check, override, unlock."""

    def test_given_no_lock_when_checked_then_allowed(self, lock: ContextLock) -> None:
        # When
        check, _ = lock.check("src/anything.ts")

        # Then
        assert check.allowed is True
        assert check.reason == "Context not locked"
        assert lock.is_locked is False

    def test_given_lock_when_checking_files_then_only_locked_set_allowed(
        self, lock: ContextLock
    ) -> None:
        # Given
        lock.declare_sufficient_context("Found the bug", ["src/a.ts", "./src/b.ts"])

        # When
        known = lock.attempt_read("src/b.ts")
        unknown = lock.attempt_read("src/c.ts")

        # Then
        assert lock.is_locked is True
        assert known.allowed is True
        assert known.reason == "File was read before context lock"
        assert unknown.allowed is False
        assert unknown.reason == "Context locked: Found the bug"
        doc = lock.load()
        assert doc is not None
        assert [a.file_path for a in doc.blocked_attempts] == ["src/c.ts"]
        assert doc.blocked_attempts[0].reason == "Context declared sufficient"

    def test_given_override_when_checked_then_allowed(self, lock: ContextLock) -> None:
        # Given
        lock.declare_sufficient_context("done", ["src/a.ts"])
        lock.add_override("src/c.ts", "Needed for the fix")

        # When
        check = lock.attempt_read("src/c.ts")

        # Then
        assert check.allowed is True
        assert check.reason == "File has override"

    def test_given_pure_check_when_denied_then_nothing_recorded(self, lock: ContextLock) -> None:
        # Given
        lock.declare_sufficient_context("done")

        # When
        check, _ = lock.check("src/x.ts")

        # Then
        assert check.allowed is False
        assert lock.state().blocked_attempts == []

    def test_given_locked_when_unlocked_then_reads_allowed_and_history_kept(
        self, lock: ContextLock
    ) -> None:
        # Given
        lock.declare_sufficient_context("done", ["src/a.ts"])
        lock.attempt_read("src/z.ts")

        # When
        doc = lock.unlock()

        # Then
        assert doc.sufficient_context is False
        assert doc.reason is None
        assert doc.locked_files == ["src/a.ts"]
        assert len(doc.blocked_attempts) == 1
        assert lock.attempt_read("src/z.ts").allowed is True

    def test_given_repeated_declare_when_same_file_then_not_duplicated(
        self, lock: ContextLock
    ) -> None:
        lock.declare_sufficient_context("first", ["src/a.ts"])
        doc = lock.declare_sufficient_context("second", ["src/a.ts", "src/b.ts"])

        assert doc.locked_files == ["src/a.ts", "src/b.ts"]
        assert doc.reason == "second"
