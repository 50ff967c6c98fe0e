"""Versioned JSON state documents under the repo state directory.

Loading is fail-open: a missing document loads as ``None``; an unreadable,
invalid or version-mismatched document is logged as ``state_reset`` and also
loads as ``None`` so the owning component falls back to defaults.

Writes are atomic: the document is serialized to a temp file in the target
directory and ``os.replace``d over the target, so readers never observe a
half-written file.
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from readgate.config.constants import STATE_VERSION
from readgate.core.errors import StateError
from readgate.core.logging import get_logger

log = get_logger("state")


class StateModel(BaseModel):
    """Base for persisted models: camelCase on disk, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StateDocument(StateModel):
    """Top-level persisted document carrying a format version."""

    version: str = STATE_VERSION


DocT = TypeVar("DocT", bound=StateDocument)


def utc_now() -> datetime:
    return datetime.now(UTC)


def load_document(path: Path, model: type[DocT]) -> DocT | None:
    """Load a document, or None when absent or unusable."""
    if not path.exists():
        return None
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        log.warning("state_reset", path=str(path), reason=f"unreadable: {e}")
        return None

    version = raw.get("version") if isinstance(raw, dict) else None
    if version != STATE_VERSION:
        log.warning(
            "state_reset",
            path=str(path),
            reason="version mismatch",
            found=version,
            expected=STATE_VERSION,
        )
        return None

    try:
        return model.model_validate(raw)
    except ValidationError as e:
        log.warning("state_reset", path=str(path), reason="invalid", errors=e.error_count())
        return None


def write_document(path: Path, document: StateDocument) -> None:
    """Atomically replace ``path`` with the serialized document.

    Raises:
        StateError: If the document cannot be written. The previous
            document, if any, is left untouched.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as e:
        raise StateError.write_failed(str(path), str(e)) from e
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(document.model_dump_json(by_alias=True, indent=2))
            f.write("\n")
        os.replace(tmp_path, path)
    except (OSError, ValueError, TypeError) as e:
        tmp_path.unlink(missing_ok=True)
        raise StateError.write_failed(str(path), str(e)) from e
    log.debug("state_written", path=str(path))


def delete_document(path: Path) -> bool:
    """Remove a document. Returns True if one existed."""
    if path.exists():
        path.unlink()
        return True
    return False
