"""Plain-text reports for CLI output."""

from __future__ import annotations

from collections.abc import Sequence

from readgate.core.formatting import (
    compress_path,
    format_tokens,
    pluralize,
    progress_bar,
    truncate_at_word,
)
from readgate.optimizer.engine import EngineStatus
from readgate.optimizer.models import (
    RISK_LEVELS,
    BudgetDocument,
    BudgetStats,
    ContextLockDocument,
    ContractDiff,
    HypothesisDocument,
    HypothesisStats,
    ImportanceDocument,
    LocalityScore,
    ReadDecision,
    RiskAssessment,
)
from readgate.optimizer.runtime_paths import RuntimePath

_STATUS_MARKS = {"pending": "[ ]", "validated": "[x]", "rejected": "[-]"}


def format_budget_report(doc: BudgetDocument, stats: BudgetStats) -> str:
    lines = [
        "Read Budget",
        f"  Session:   {doc.session_id}",
        f"  Started:   {doc.started_at:%Y-%m-%d %H:%M:%S}",
        f"  Usage:     [{progress_bar(stats.percent_used, 100, 20)}] {stats.percent_used}%",
        f"  Consumed:  {format_tokens(stats.consumed)} / {format_tokens(stats.budget)} tokens",
        f"  Remaining: {format_tokens(stats.remaining)} tokens",
        f"  Reads:     {stats.read_count} (avg {stats.avg_tokens_per_read} tokens/read)",
    ]
    if stats.by_level:
        lines.append("")
        lines.append("By level:")
        for level, data in stats.by_level.items():
            lines.append(
                f"  {level}: {pluralize(data['count'], 'read')}, "
                f"{format_tokens(data['tokens'])} tokens"
            )
    if stats.top_files:
        lines.append("")
        lines.append("Top files by tokens:")
        for path, tokens in stats.top_files[:5]:
            lines.append(f"  {format_tokens(tokens):>8} {path}")
    if doc.justifications:
        lines.append("")
        lines.append(f"Budget increases: {len(doc.justifications)}")
        for j in doc.justifications:
            lines.append(f"  +{format_tokens(j.additional_tokens)} tokens: {j.reason}")
    return "\n".join(lines)


def format_hypothesis_report(doc: HypothesisDocument, stats: HypothesisStats) -> str:
    lines = [
        "Hypothesis Session",
        f"  Task:      {doc.task}",
        f"  Session:   {doc.session_id}",
        f"  Hypotheses: {stats.total} ({stats.pending} pending, "
        f"{stats.validated} validated, {stats.rejected} rejected)",
        f"  Reads:     {stats.reads_allowed} allowed, {stats.reads_blocked} blocked",
        f"  Hit rate:  {stats.hit_rate}%",
    ]
    if doc.hypotheses:
        lines.append("")
        for h in doc.hypotheses:
            lines.append(f"  {_STATUS_MARKS[h.status]} {h.id} [P{h.priority}] {h.description}")
            lines.append(f"      Targets: {', '.join(h.target_files)}")
            if h.evidence:
                lines.append(f"      Evidence: {truncate_at_word(h.evidence, 60)}")
    return "\n".join(lines)


def format_context_state(doc: ContextLockDocument) -> str:
    lines = [
        "Context Lock",
        f"  Session:  {doc.session_id}",
        f"  Status:   {'LOCKED' if doc.sufficient_context else 'open'}",
    ]
    if doc.sufficient_context and doc.declared_at is not None:
        lines.append(f"  Locked at: {doc.declared_at:%Y-%m-%d %H:%M:%S}")
        lines.append(f"  Reason:   {doc.reason}")
    lines.append(f"  Locked files: {len(doc.locked_files)}")
    lines.append(f"  Blocked attempts: {len(doc.blocked_attempts)}")
    lines.append(f"  Overrides: {len(doc.overrides)}")
    if doc.blocked_attempts:
        lines.append("")
        lines.append("Recently blocked:")
        for attempt in doc.blocked_attempts[-5:]:
            lines.append(f"  {attempt.file_path}")
    return "\n".join(lines)


def format_contract_diff(diff: ContractDiff, file_path: str) -> str:
    lines = [f"Contract: {file_path}"]
    if not diff.has_changes:
        lines.append(f"  No changes ({pluralize(diff.unchanged, 'signature')} unchanged)")
        return "\n".join(lines)
    if diff.added:
        lines.append(f"  Added ({len(diff.added)}):")
        lines.extend(f"    + {s.signature}" for s in diff.added)
    if diff.removed:
        lines.append(f"  Removed ({len(diff.removed)}):")
        lines.extend(f"    - {s.signature}" for s in diff.removed)
    if diff.modified:
        lines.append(f"  Modified ({len(diff.modified)}):")
        for old, new in diff.modified:
            lines.append(f"    ~ {old.name}")
            lines.append(f"        - {old.signature}")
            lines.append(f"        + {new.signature}")
    lines.append(f"  Unchanged: {diff.unchanged}")
    return "\n".join(lines)


def format_locality_report(scores: Sequence[LocalityScore], threshold: int) -> str:
    above = sum(1 for s in scores if s.score >= threshold)
    lines = [
        "Locality Scores",
        f"  Files analyzed: {len(scores)}",
        f"  Above threshold ({threshold}+): {above}",
    ]
    if scores:
        lines.append("")
    for s in scores[:10]:
        f = s.factors
        lines.append(
            f"  {s.rank or '-':>3}. [{progress_bar(s.score, 100)}] {s.score:>3}/100 "
            f"{compress_path(s.file_path, 40)}"
        )
        lines.append(
            f"       R:{f.recency} D:{f.diff_proximity} E:{f.error_history} C:{f.centrality}"
        )
    return "\n".join(lines)


def format_importance_report(doc: ImportanceDocument, limit: int = 15) -> str:
    lines = [
        "File Importance",
        f"  Files indexed: {len(doc.files)}",
        f"  Top-K: {doc.top_k}",
        f"  Built: {doc.created_at:%Y-%m-%d %H:%M:%S}",
    ]
    if doc.files:
        lines.append("")
    for rank, e in enumerate(doc.files[:limit], start=1):
        f = e.factors
        entry = " entry" if f.is_entry else ""
        lines.append(
            f"  {rank:>3}. [{progress_bar(e.importance, 100)}] {e.importance:>3} "
            f"{compress_path(e.file_path, 40)}"
        )
        lines.append(
            f"       C:{f.centrality} G:{f.churn} S:{f.size} E:{f.exports}{entry}"
        )
    return "\n".join(lines)


def format_risk_report(assessments: Sequence[RiskAssessment]) -> str:
    counts = {level: 0 for level in RISK_LEVELS}
    for a in assessments:
        counts[a.risk_level] += 1
    lines = ["Risk Assessment", f"  Files analyzed: {len(assessments)}"]
    lines.extend(f"  {level.capitalize()}: {counts[level]}" for level in reversed(RISK_LEVELS))

    flagged = sorted(
        (a for a in assessments if a.risk_level in ("critical", "high")),
        key=lambda a: a.risk_score,
        reverse=True,
    )
    if flagged:
        lines.append("")
        lines.append("Files requiring review:")
        for a in flagged[:10]:
            f = a.factors
            lines.append(f"  {a.risk_level:<8} {compress_path(a.file_path, 40)} (score {a.risk_score})")
            lines.append(
                f"           S:{f.security} P:{f.performance} C:{f.complexity} "
                f"E:{f.external} D:{f.data_handling}"
            )
    return "\n".join(lines)


def format_risk_detail(assessment: RiskAssessment, limit: int = 10) -> str:
    f = assessment.factors
    lines = [
        f"Risk: {assessment.file_path}",
        f"  Level: {assessment.risk_level} (score {assessment.risk_score}/125)",
        f"  Security: {f.security}  Performance: {f.performance}  Complexity: {f.complexity}",
        f"  External: {f.external}  Data handling: {f.data_handling}",
    ]
    if assessment.matches:
        lines.append("")
        lines.append("Matches:")
        for m in assessment.matches[:limit]:
            lines.append(f"  L{m.line:<5} {m.category:<13} {m.excerpt}")
        if len(assessment.matches) > limit:
            lines.append(f"  ... and {len(assessment.matches) - limit} more")
    return "\n".join(lines)


def format_runtime_path(runtime: RuntimePath) -> str:
    lines = [
        "Runtime Path",
        f"  Executed files: {len(runtime.executed_files)}",
        f"  Pruned files: {len(runtime.pruned_files)}",
        f"  Savings: {runtime.savings}%",
    ]
    if runtime.call_chain:
        lines.append("")
        lines.append("Call chain:")
        for depth, call in enumerate(runtime.call_chain):
            lines.append(f"  {'  ' * depth}-> {call}")
    if runtime.relevant_files:
        lines.append("")
        lines.append("Relevant files:")
        lines.extend(f"  {f}" for f in runtime.relevant_files[:10])
    if runtime.pruned_files:
        lines.append("")
        lines.append("Pruned:")
        lines.extend(f"  {f}" for f in runtime.pruned_files[:5])
        if len(runtime.pruned_files) > 5:
            lines.append(f"  ... and {len(runtime.pruned_files) - 5} more")
    return "\n".join(lines)


def format_decision(decision: ReadDecision, file_path: str) -> str:
    verdict = "ALLOW" if decision.allowed else "DENY"
    lines = [f"{verdict} {file_path}: {decision.reason}"]
    if decision.score is not None:
        lines.append(f"  Score: {decision.score}/100")
    if decision.budget_impact is not None:
        lines.append(f"  Budget impact: {format_tokens(decision.budget_impact)} tokens")
    for suggestion in decision.suggestions:
        lines.append(f"  - {suggestion}")
    return "\n".join(lines)


def format_optimizer_status(status: EngineStatus) -> str:
    lines = ["Read Optimizer"]
    if status.budget is not None:
        b = status.budget
        lines.append(
            f"  Budget:     {format_tokens(b.consumed)}/{format_tokens(b.budget)} tokens "
            f"({b.percent_used}%)"
        )
    else:
        lines.append("  Budget:     not initialized")
    context = "LOCKED" if status.context_locked else "open"
    lines.append(f"  Context:    {context} ({pluralize(status.blocked_attempts, 'blocked read')})")
    if status.hypotheses is not None:
        h = status.hypotheses
        lines.append(f"  Hypotheses: {h.total} ({h.validated} validated, {h.pending} pending)")
    else:
        lines.append("  Hypotheses: none active")
    lines.append(f"  Contracts:  {pluralize(status.contracts_tracked, 'file')} tracked")
    lines.append(f"  Importance: {pluralize(status.importance_indexed, 'file')} indexed")
    return "\n".join(lines)
