"""Context lock: a manual declaration that no more exploratory reads are needed.

While locked, only files that were part of the declared context or carry an
explicit override may be read. Denied attempts are logged in the document.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from readgate.core.logging import get_logger
from readgate.core.paths import CONTEXT_STATE_FILE, RAG_DIR_NAME, matches_any, normalize_path
from readgate.optimizer.budget import new_session_id
from readgate.optimizer.models import (
    BlockedAttempt,
    ContextCheck,
    ContextLockDocument,
    ContextOverride,
)
from readgate.state.store import load_document, utc_now, write_document

log = get_logger("context_lock")


class ContextLock:
    """Persisted context lock state (``context-state.json``)."""

    def __init__(self, repo_root: Path, *, state_dir: str = RAG_DIR_NAME) -> None:
        self._root = repo_root
        self._path = repo_root / state_dir / CONTEXT_STATE_FILE

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ContextLockDocument | None:
        return load_document(self._path, ContextLockDocument)

    def state(self) -> ContextLockDocument:
        return self.load() or ContextLockDocument(session_id=new_session_id())

    @property
    def is_locked(self) -> bool:
        doc = self.load()
        return doc is not None and doc.sufficient_context

    def declare_sufficient_context(
        self, reason: str, current_files: Iterable[str] = ()
    ) -> ContextLockDocument:
        doc = self.state()
        doc.sufficient_context = True
        doc.declared_at = utc_now()
        doc.reason = reason
        for file_path in current_files:
            path = normalize_path(file_path, self._root)
            if path not in doc.locked_files:
                doc.locked_files.append(path)
        write_document(self._path, doc)
        log.info("context_locked", reason=reason, locked_files=len(doc.locked_files))
        return doc

    def unlock(self) -> ContextLockDocument:
        """Clear the lock. Locked files, overrides and blocked attempts are kept."""
        doc = self.state()
        doc.sufficient_context = False
        doc.declared_at = None
        doc.reason = None
        write_document(self._path, doc)
        log.info("context_unlocked")
        return doc

    def check(self, file_path: str) -> tuple[ContextCheck, ContextLockDocument]:
        """Evaluate a read without persisting anything."""
        doc = self.state()
        if not doc.sufficient_context:
            return ContextCheck(allowed=True, reason="Context not locked"), doc

        path = normalize_path(file_path, self._root)
        if matches_any(path, doc.locked_files):
            return ContextCheck(allowed=True, reason="File was read before context lock"), doc
        if matches_any(path, [o.file_path for o in doc.overrides]):
            return ContextCheck(allowed=True, reason="File has override"), doc
        return ContextCheck(allowed=False, reason=f"Context locked: {doc.reason}"), doc

    def attempt_read(self, file_path: str) -> ContextCheck:
        """Evaluate a read; a denied attempt is appended to the blocked log."""
        result, doc = self.check(file_path)
        if not result.allowed:
            path = normalize_path(file_path, self._root)
            doc.blocked_attempts.append(BlockedAttempt(file_path=path))
            write_document(self._path, doc)
            log.info("read_blocked", file=path, reason=doc.reason)
        return result

    def add_override(self, file_path: str, reason: str) -> ContextOverride:
        doc = self.state()
        override = ContextOverride(file_path=normalize_path(file_path, self._root), reason=reason)
        doc.overrides.append(override)
        write_document(self._path, doc)
        log.info("context_override", file=override.file_path, reason=reason)
        return override
