"""Read admission decisions.

Composes the leaf signals into one verdict for a proposed read. Hard gates
(budget, context lock, hypotheses) short-circuit with a denial; soft signals
(importance, risk, locality) deduct from a confidence score that starts at
100. Policy violations are never raised, only reported.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from readgate.collaborators.error_db import load_error_db
from readgate.collaborators.graph import load_graph
from readgate.config.models import OptimizerConfig, ReadGateConfig
from readgate.core.logging import get_logger
from readgate.core.paths import normalize_path
from readgate.optimizer.budget import BudgetLedger
from readgate.optimizer.context_lock import ContextLock
from readgate.optimizer.contracts import ContractStore
from readgate.optimizer.hypothesis import HypothesisTracker
from readgate.optimizer.importance import ImportanceIndexer
from readgate.optimizer.locality import calculate_locality_score
from readgate.optimizer.models import (
    BudgetStats,
    HypothesisStats,
    ReadDecision,
    ReadLevel,
    RecordResult,
)
from readgate.optimizer.risk import (
    DEFAULT_RISK_RULES,
    RiskRule,
    assess_file_risk,
    level_at_least,
    load_risk_rules,
)
from readgate.vcs import GitHistory

log = get_logger("engine")

BUDGET_DENY_SUGGESTIONS = (
    "Use --signatures-only or --types-only to reduce tokens",
    "Request budget increase with justification",
)
CONTEXT_DENY_SUGGESTIONS = (
    "Context declared sufficient",
    "Add override if this file is critical",
)
HYPOTHESIS_DENY_SUGGESTIONS = (
    "Add this file to a hypothesis target",
    "Validate/reject pending hypotheses first",
)


@dataclass(frozen=True, slots=True)
class EngineStatus:
    """Summary of every leaf store."""

    budget: BudgetStats | None
    context_locked: bool
    locked_files: int
    blocked_attempts: int
    hypotheses: HypothesisStats | None
    contracts_tracked: int
    importance_indexed: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class DecisionEngine:
    """Evaluates proposed reads against the persisted admission state."""

    def __init__(
        self,
        repo_root: Path,
        config: ReadGateConfig | None = None,
        *,
        history: GitHistory | None = None,
    ) -> None:
        self._root = repo_root
        self._config = config or ReadGateConfig()
        state_dir = self._config.storage.state_dir
        self._state_dir = repo_root / state_dir
        self._history = history or GitHistory(repo_root)

        self.budget = BudgetLedger(repo_root, config=self._config.budget, state_dir=state_dir)
        self.context_lock = ContextLock(repo_root, state_dir=state_dir)
        self.hypotheses = HypothesisTracker(repo_root, state_dir=state_dir)
        self.contracts = ContractStore(repo_root, state_dir=state_dir)
        self.importance = ImportanceIndexer(
            repo_root, state_dir=state_dir, history=self._history
        )
        self._risk_rules: tuple[RiskRule, ...] | None = None

    @property
    def config(self) -> ReadGateConfig:
        return self._config

    @property
    def root(self) -> Path:
        return self._root

    @property
    def state_dir(self) -> Path:
        return self._state_dir

    @property
    def history(self) -> GitHistory:
        return self._history

    @property
    def risk_rules(self) -> tuple[RiskRule, ...]:
        if self._risk_rules is None:
            rules_path = self._config.risk.rules_path
            if rules_path:
                path = Path(rules_path)
                self._risk_rules = load_risk_rules(path if path.is_absolute() else self._root / path)
            else:
                self._risk_rules = DEFAULT_RISK_RULES
        return self._risk_rules

    def should_allow_read(
        self, file_path: str, config: OptimizerConfig | None = None
    ) -> ReadDecision:
        """Decide whether ``file_path`` may be read."""
        opts = config or self._config.optimizer
        path = normalize_path(file_path, self._root)
        estimated = self.budget.estimate(path)
        score = 100
        suggestions: list[str] = []

        # 1. Budget
        if opts.budget_enabled and self.budget.exists():
            check = self.budget.check_budget(estimated)
            if not check.allowed:
                return self._deny(
                    path,
                    "Budget exceeded - justification required",
                    BUDGET_DENY_SUGGESTIONS,
                    budget_impact=estimated,
                )
            if check.status == "critical":
                score -= opts.penalties.critical_budget
                suggestions.append("Budget critical - consider minimal read modes")

        # 2. Context lock
        if opts.context_lock_enabled and self.context_lock.is_locked:
            context = self.context_lock.attempt_read(path)
            if not context.allowed:
                return self._deny(path, context.reason, CONTEXT_DENY_SUGGESTIONS)

        # 3. Hypotheses
        if opts.hypothesis_enabled and self.hypotheses.is_active:
            hypothesis = self.hypotheses.is_read_allowed(path)
            if not hypothesis.allowed:
                return self._deny(path, hypothesis.reason, HYPOTHESIS_DENY_SUGGESTIONS)

        # 4. Importance
        if (
            opts.importance_enabled
            and self.importance.load() is not None
            and not self.importance.is_in_top_k(path, opts.top_k)
        ):
            score -= opts.penalties.importance
            suggestions.append(
                f"File not in top-{opts.top_k} importance - consider if really needed"
            )

        # 5. Risk
        if opts.risk_enabled:
            risk = assess_file_risk(
                path, self.risk_rules, self._root, self._config.risk.excerpt_chars
            )
            if not level_at_least(risk.risk_level, opts.min_risk_level):
                score -= opts.penalties.risk
                suggestions.append(
                    f"Low risk file ({risk.risk_level}) - may not need detailed review"
                )

        # 6. Locality
        if opts.locality_enabled:
            locality = calculate_locality_score(
                path,
                changed_files=self._history.changed_files(),
                graph=load_graph(self._state_dir),
                error_db=load_error_db(self._state_dir),
                repo_root=self._root,
            )
            if locality.score < opts.locality_threshold:
                score -= opts.penalties.locality
                suggestions.append(
                    f"Low locality score ({locality.score}) - "
                    "file may not be relevant to current task"
                )

        # 7. Contracts: informational only
        if (
            opts.contracts_enabled
            and self.contracts.get(path) is not None
            and not self.contracts.has_contract_changed(path)
        ):
            suggestions.append(
                "Contract unchanged since last snapshot - a signatures-only read may suffice"
            )

        reason = "Read allowed" if score >= opts.warning_score else "Read allowed with warnings"
        log.info("read_decision", file=path, allowed=True, score=score, tokens=estimated)
        return ReadDecision(
            allowed=True,
            reason=reason,
            score=score,
            suggestions=suggestions,
            budget_impact=estimated,
        )

    @staticmethod
    def _deny(
        path: str,
        reason: str,
        suggestions: tuple[str, ...],
        budget_impact: int | None = None,
    ) -> ReadDecision:
        log.info("read_decision", file=path, allowed=False, reason=reason)
        return ReadDecision(
            allowed=False,
            reason=reason,
            suggestions=list(suggestions),
            budget_impact=budget_impact,
        )

    def record_read(
        self,
        file_path: str,
        lines: int | None = None,
        level: ReadLevel = "full",
        reason: str = "",
        content: str | None = None,
    ) -> RecordResult:
        """Charge a completed read to the budget and log it against the hypotheses."""
        result = self.budget.record_read(file_path, lines, level, reason, content)
        if self.hypotheses.is_active:
            check = self.hypotheses.is_read_allowed(file_path)
            self.hypotheses.record_read_attempt(file_path, check)
        return result

    def status(self) -> EngineStatus:
        context = self.context_lock.load()
        contracts = self.contracts.load()
        importance = self.importance.load()
        return EngineStatus(
            budget=self.budget.stats() if self.budget.exists() else None,
            context_locked=bool(context and context.sufficient_context),
            locked_files=len(context.locked_files) if context else 0,
            blocked_attempts=len(context.blocked_attempts) if context else 0,
            hypotheses=self.hypotheses.stats() if self.hypotheses.load() else None,
            contracts_tracked=len(contracts.files) if contracts else 0,
            importance_indexed=len(importance.files) if importance else 0,
        )
