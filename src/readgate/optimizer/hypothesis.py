"""Hypothesis-driven reading.

A session holds falsifiable hypotheses about which files matter for a task.
While a session is active, reads outside every hypothesis target are denied.
Resolving a hypothesis is a one-time transition that moves its target files
into the validated or rejected set.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from readgate.core.errors import HypothesisError
from readgate.core.logging import get_logger
from readgate.core.paths import (
    HYPOTHESIS_ARCHIVE_FILE,
    HYPOTHESIS_FILE,
    RAG_DIR_NAME,
    matches_any,
    normalize_path,
    paths_match,
)
from readgate.optimizer.budget import new_session_id
from readgate.optimizer.models import (
    ArchivedSession,
    Hypothesis,
    HypothesisArchive,
    HypothesisCheck,
    HypothesisDocument,
    HypothesisStats,
    ReadAttempt,
)
from readgate.state.store import delete_document, load_document, utc_now, write_document

log = get_logger("hypothesis")


class HypothesisTracker:
    """Persisted hypothesis session (``hypothesis.json``)."""

    def __init__(self, repo_root: Path, *, state_dir: str = RAG_DIR_NAME) -> None:
        self._root = repo_root
        self._path = repo_root / state_dir / HYPOTHESIS_FILE
        self._archive_path = repo_root / state_dir / HYPOTHESIS_ARCHIVE_FILE

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> HypothesisDocument | None:
        return load_document(self._path, HypothesisDocument)

    def _require(self) -> HypothesisDocument:
        doc = self.load()
        if doc is None:
            raise HypothesisError.no_session()
        return doc

    @property
    def is_active(self) -> bool:
        doc = self.load()
        return doc is not None and bool(doc.hypotheses)

    def start(self, task: str) -> HypothesisDocument:
        """Begin a new session, archiving the current one if present."""
        current = self.load()
        if current is not None:
            self._append_archive(current)
        doc = HypothesisDocument(session_id=new_session_id(), task=task)
        write_document(self._path, doc)
        log.info("hypothesis_session_started", session_id=doc.session_id, task=task)
        return doc

    def add_hypothesis(
        self,
        description: str,
        target_files: Iterable[str],
        target_symbols: Iterable[str] = (),
        priority: int = 1,
    ) -> Hypothesis:
        doc = self._require()
        targets = [normalize_path(f, self._root) for f in target_files]
        if not description.strip():
            raise HypothesisError.invalid("description is empty")
        if not targets:
            raise HypothesisError.invalid("at least one target file is required")

        hypothesis = Hypothesis(
            id=new_session_id(),
            description=description,
            target_files=targets,
            target_symbols=list(target_symbols),
            priority=priority,
        )
        doc.hypotheses.append(hypothesis)
        # Stable: equal priorities keep insertion order
        doc.hypotheses.sort(key=lambda h: h.priority, reverse=True)
        write_document(self._path, doc)
        log.info("hypothesis_added", id=hypothesis.id, priority=priority, targets=len(targets))
        return hypothesis

    def validate_hypothesis(
        self, hypothesis_id: str, validated: bool, evidence: str | None = None
    ) -> Hypothesis:
        """Resolve a pending hypothesis.

        Raises:
            HypothesisError: If the id is unknown or the hypothesis was
                already validated or rejected.
        """
        doc = self._require()
        hypothesis = next((h for h in doc.hypotheses if h.id == hypothesis_id), None)
        if hypothesis is None:
            raise HypothesisError.not_found(hypothesis_id)
        if hypothesis.status != "pending":
            raise HypothesisError.already_resolved(hypothesis_id, hypothesis.status)

        hypothesis.status = "validated" if validated else "rejected"
        hypothesis.validated_at = utc_now()
        hypothesis.evidence = evidence

        keep, drop = (
            (doc.validated_files, doc.rejected_files)
            if validated
            else (doc.rejected_files, doc.validated_files)
        )
        for target in hypothesis.target_files:
            if target not in keep:
                keep.append(target)
            drop[:] = [f for f in drop if f != target]

        write_document(self._path, doc)
        log.info("hypothesis_resolved", id=hypothesis_id, status=hypothesis.status)
        return hypothesis

    def is_read_allowed(self, file_path: str) -> HypothesisCheck:
        doc = self.load()
        if doc is None:
            return HypothesisCheck(allowed=True, reason="No hypothesis session")

        path = normalize_path(file_path, self._root)
        if matches_any(path, doc.validated_files):
            return HypothesisCheck(allowed=True, reason="File in validated list")
        if matches_any(path, doc.rejected_files):
            return HypothesisCheck(allowed=False, reason="File rejected by hypothesis")

        for hypothesis in doc.hypotheses:
            if hypothesis.status != "pending":
                continue
            if any(paths_match(path, target) for target in hypothesis.target_files):
                return HypothesisCheck(
                    allowed=True,
                    reason=f"Validates hypothesis: {hypothesis.description}",
                    hypothesis_id=hypothesis.id,
                )
        return HypothesisCheck(allowed=False, reason="File not in any hypothesis target")

    def record_read_attempt(self, file_path: str, check: HypothesisCheck) -> None:
        doc = self.load()
        if doc is None:
            return
        doc.read_attempts.append(
            ReadAttempt(
                file_path=normalize_path(file_path, self._root),
                allowed=check.allowed,
                hypothesis_id=check.hypothesis_id,
                reason=check.reason,
            )
        )
        write_document(self._path, doc)

    def stats(self) -> HypothesisStats:
        doc = self._require()
        statuses = [h.status for h in doc.hypotheses]
        allowed = sum(1 for r in doc.read_attempts if r.allowed)
        blocked = len(doc.read_attempts) - allowed
        attempts = allowed + blocked
        return HypothesisStats(
            session_id=doc.session_id,
            task=doc.task,
            total=len(statuses),
            pending=statuses.count("pending"),
            validated=statuses.count("validated"),
            rejected=statuses.count("rejected"),
            reads_allowed=allowed,
            reads_blocked=blocked,
            hit_rate=round(allowed / attempts * 100) if attempts else 0,
        )

    def archive(self) -> HypothesisDocument:
        """Move a fully resolved session to the archive."""
        doc = self._require()
        pending = sum(1 for h in doc.hypotheses if h.status == "pending")
        if pending:
            raise HypothesisError.still_pending(pending)
        self._append_archive(doc)
        delete_document(self._path)
        return doc

    def load_archive(self) -> HypothesisArchive:
        return load_document(self._archive_path, HypothesisArchive) or HypothesisArchive()

    def _append_archive(self, doc: HypothesisDocument) -> None:
        archive = self.load_archive()
        archive.sessions.append(ArchivedSession(session=doc))
        write_document(self._archive_path, archive)
        log.info("hypothesis_session_archived", session_id=doc.session_id)
