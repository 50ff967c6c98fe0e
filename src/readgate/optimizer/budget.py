"""Token budget ledger.

Tracks estimated tokens consumed by file reads within a session. Recording a
read is unconditional; gating is the caller's job via :meth:`check_budget`
before the read. Raising the limit is always granted but every increase is
logged as a justification.
"""

from __future__ import annotations

import math
from collections import defaultdict
from pathlib import Path
from uuid import uuid4

from readgate.config.constants import SESSION_ID_LENGTH, TOP_FILES_LIMIT
from readgate.config.models import BudgetConfig
from readgate.core.errors import BudgetError, StateError
from readgate.core.formatting import percent
from readgate.core.logging import get_logger
from readgate.core.paths import BUDGET_FILE, RAG_DIR_NAME, normalize_path
from readgate.optimizer.models import (
    BudgetAlert,
    BudgetCheck,
    BudgetDocument,
    BudgetStats,
    BudgetStatus,
    Justification,
    ReadEntry,
    ReadLevel,
    RecordResult,
)
from readgate.state.store import load_document, write_document

log = get_logger("budget")


def estimate_tokens(content: str, chars_per_token: int = 4) -> int:
    """Estimated tokens for a piece of text: ceil(chars / chars_per_token)."""
    return math.ceil(len(content) / chars_per_token)


def estimate_file_tokens(path: Path, lines: int | None = None, chars_per_token: int = 4) -> int:
    """Estimated tokens for the first ``lines`` lines of a file (all when falsy).

    Missing or unreadable files estimate to 0.
    """
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return 0
    if lines:
        content = "\n".join(content.split("\n")[:lines])
    return estimate_tokens(content, chars_per_token)


def new_session_id() -> str:
    return uuid4().hex[:SESSION_ID_LENGTH]


class BudgetLedger:
    """Session-scoped token budget persisted to ``budget.json``."""

    def __init__(
        self,
        repo_root: Path,
        *,
        config: BudgetConfig | None = None,
        state_dir: str = RAG_DIR_NAME,
    ) -> None:
        self._root = repo_root
        self._config = config or BudgetConfig()
        self._path = repo_root / state_dir / BUDGET_FILE

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> BudgetDocument | None:
        return load_document(self._path, BudgetDocument)

    def exists(self) -> bool:
        return self.load() is not None

    def _current(self) -> BudgetDocument:
        return self.load() or BudgetDocument(
            session_id=new_session_id(), total_budget=self._config.default_limit
        )

    def init(self, limit: int | None = None) -> BudgetDocument:
        """Start a new session with a fresh ledger."""
        limit = self._config.default_limit if limit is None else limit
        if limit <= 0:
            raise BudgetError.invalid_amount(limit)
        doc = BudgetDocument(session_id=new_session_id(), total_budget=limit)
        write_document(self._path, doc)
        log.info("budget_initialized", session_id=doc.session_id, budget=limit)
        return doc

    def reset(self, limit: int | None = None) -> BudgetDocument:
        return self.init(limit)

    def _status(self, consumed: int, total: int, estimated: int = 0) -> BudgetStatus:
        if consumed + estimated > total:
            return "exceeded"
        ratio = consumed / total if total else 1.0
        if ratio >= self._config.critical_threshold:
            return "critical"
        if ratio >= self._config.warning_threshold:
            return "warning"
        return "ok"

    def check_budget(self, estimated_tokens: int) -> BudgetCheck:
        """Would a read of ``estimated_tokens`` fit in the remaining budget?"""
        doc = self._current()
        status = self._status(doc.consumed, doc.total_budget, estimated_tokens)
        return BudgetCheck(
            allowed=status != "exceeded",
            remaining=doc.total_budget - doc.consumed,
            status=status,
        )

    def estimate(self, file_path: str, lines: int | None = None) -> int:
        return estimate_file_tokens(self._root / file_path, lines, self._config.chars_per_token)

    def record_read(
        self,
        file_path: str,
        lines: int | None = None,
        level: ReadLevel = "full",
        reason: str = "",
        content: str | None = None,
    ) -> RecordResult:
        """Append a read and charge its tokens.

        The alert status is evaluated on the totals after the read, so the
        alert message reports the usage the read produced.
        """
        doc = self._current()
        path = normalize_path(file_path, self._root)
        if content is not None:
            tokens = estimate_tokens(content, self._config.chars_per_token)
        else:
            tokens = self.estimate(path, lines)

        entry = ReadEntry(
            file_path=path,
            lines=lines or 0,
            estimated_tokens=tokens,
            level=level,
            reason=reason,
        )
        doc.reads.append(entry)
        doc.consumed += tokens

        status = self._status(doc.consumed, doc.total_budget)
        alert: BudgetAlert | None = None
        if status != "ok":
            alert = BudgetAlert(
                type=status,
                message=self._alert_message(status, doc),
                consumed=doc.consumed,
                budget=doc.total_budget,
            )
            doc.alerts.append(alert)

        write_document(self._path, doc)
        log.info(
            "read_recorded",
            file=path,
            tokens=tokens,
            consumed=doc.consumed,
            budget=doc.total_budget,
            status=status,
        )
        return RecordResult(success=status != "exceeded", entry=entry, alert=alert)

    @staticmethod
    def _alert_message(status: BudgetStatus, doc: BudgetDocument) -> str:
        pct = percent(doc.consumed, doc.total_budget)
        if status == "warning":
            return f"Budget at {pct}% ({doc.consumed}/{doc.total_budget} tokens)"
        if status == "critical":
            return f"Budget critical: {pct}% ({doc.consumed}/{doc.total_budget} tokens)"
        return f"Budget exceeded! {pct}% - Justification required"

    def request_increase(self, reason: str, amount: int) -> Justification:
        """Raise the budget by ``amount``. Always granted, always logged."""
        if amount <= 0:
            raise BudgetError.invalid_amount(amount)
        doc = self.load()
        if doc is None:
            raise StateError.missing("budget", "Run 'readgate budget init' first")
        justification = Justification(reason=reason, additional_tokens=amount)
        doc.justifications.append(justification)
        doc.total_budget += amount
        write_document(self._path, doc)
        log.info("budget_increased", amount=amount, budget=doc.total_budget, reason=reason)
        return justification

    def stats(self) -> BudgetStats:
        doc = self._current()
        by_level: dict[str, dict[str, int]] = {}
        by_file: dict[str, int] = defaultdict(int)
        for read in doc.reads:
            bucket = by_level.setdefault(read.level, {"count": 0, "tokens": 0})
            bucket["count"] += 1
            bucket["tokens"] += read.estimated_tokens
            by_file[read.file_path] += read.estimated_tokens

        top_files = sorted(by_file.items(), key=lambda item: item[1], reverse=True)
        read_count = len(doc.reads)
        return BudgetStats(
            session_id=doc.session_id,
            consumed=doc.consumed,
            remaining=doc.total_budget - doc.consumed,
            budget=doc.total_budget,
            percent_used=percent(doc.consumed, doc.total_budget),
            read_count=read_count,
            avg_tokens_per_read=round(doc.consumed / read_count) if read_count else 0,
            by_level=by_level,
            top_files=top_files[:TOP_FILES_LIMIT],
            justification_count=len(doc.justifications),
            alert_count=len(doc.alerts),
        )
