"""Tests for versioned state documents."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from pydantic import Field
from structlog.testing import capture_logs

from readgate.core.errors import ErrorCode, StateError
from readgate.state.store import (
    StateDocument,
    StateModel,
    delete_document,
    load_document,
    write_document,
)


class Item(StateModel):
    file_path: str
    token_count: int = 0


class SampleDocument(StateDocument):
    session_id: str
    items: list[Item] = Field(default_factory=list)


class TestWriteDocument:
    """Atomic writes."""

    def test_given_document_when_written_then_camel_case_json_on_disk(
        self, tmp_path: Path
    ) -> None:
        # Given
        target = tmp_path / ".rag" / "sample.json"
        doc = SampleDocument(session_id="abc", items=[Item(file_path="a.py", token_count=3)])

        # When
        write_document(target, doc)

        # Then
        raw = json.loads(target.read_text())
        assert raw == {
            "version": "1.0.0",
            "sessionId": "abc",
            "items": [{"filePath": "a.py", "tokenCount": 3}],
        }

    def test_given_replace_fails_when_written_then_old_document_kept(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        # Given
        target = tmp_path / "sample.json"
        write_document(target, SampleDocument(session_id="old"))

        def failing_replace(src: object, dst: object) -> None:
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", failing_replace)

        # When
        with pytest.raises(StateError) as exc_info:
            write_document(target, SampleDocument(session_id="new"))

        # Then
        assert exc_info.value.code == ErrorCode.STATE_WRITE_FAILED
        assert json.loads(target.read_text())["sessionId"] == "old"
        assert sorted(p.name for p in tmp_path.iterdir()) == ["sample.json"]

    def test_given_successful_write_when_done_then_no_temp_files_left(
        self, tmp_path: Path
    ) -> None:
        # Given
        target = tmp_path / "sample.json"

        # When
        write_document(target, SampleDocument(session_id="one"))
        write_document(target, SampleDocument(session_id="two"))

        # Then
        assert [p.name for p in tmp_path.iterdir()] == ["sample.json"]
        assert json.loads(target.read_text())["sessionId"] == "two"


class TestLoadDocument:
    """Fail-open loading."""

    def test_given_missing_file_when_loaded_then_none(self, tmp_path: Path) -> None:
        assert load_document(tmp_path / "absent.json", SampleDocument) is None

    def test_given_written_document_when_loaded_then_equal(self, tmp_path: Path) -> None:
        # Given
        target = tmp_path / "sample.json"
        doc = SampleDocument(session_id="abc", items=[Item(file_path="a.py")])
        write_document(target, doc)

        # When
        loaded = load_document(target, SampleDocument)

        # Then
        assert loaded == doc

    @pytest.mark.parametrize(
        ("content", "reason"),
        [
            ("{not json", "unreadable"),
            (json.dumps({"version": "0.9.0", "sessionId": "x"}), "version mismatch"),
            (json.dumps(["a", "b"]), "version mismatch"),
            (json.dumps({"version": "1.0.0"}), "invalid"),
        ],
    )
    def test_given_unusable_document_when_loaded_then_reset_logged(
        self, tmp_path: Path, content: str, reason: str
    ) -> None:
        # Given
        target = tmp_path / "sample.json"
        target.write_text(content)

        # When
        with capture_logs() as logs:
            loaded = load_document(target, SampleDocument)

        # Then
        assert loaded is None
        resets = [e for e in logs if e["event"] == "state_reset"]
        assert len(resets) == 1
        assert resets[0]["log_level"] == "warning"
        assert resets[0]["reason"].startswith(reason)


class TestDeleteDocument:
    def test_given_existing_document_when_deleted_then_true(self, tmp_path: Path) -> None:
        target = tmp_path / "sample.json"
        write_document(target, SampleDocument(session_id="x"))

        assert delete_document(target) is True
        assert not target.exists()
        assert delete_document(target) is False
