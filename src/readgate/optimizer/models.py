"""Data models for read admission.

Persisted documents are pydantic models (camelCase on disk). Results returned
by checks are frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Literal

from pydantic import Field

from readgate.state.store import StateDocument, StateModel, utc_now

ReadLevel = Literal["metadata", "signatures", "types", "chunks", "full"]
BudgetStatus = Literal["ok", "warning", "critical", "exceeded"]
AlertType = Literal["warning", "critical", "exceeded"]
HypothesisStatus = Literal["pending", "validated", "rejected"]
SignatureKind = Literal["function", "class", "interface", "type", "const", "method"]
RiskLevel = Literal["minimal", "low", "medium", "high", "critical"]
RiskCategory = Literal["security", "performance", "complexity", "external", "data_handling"]

READ_LEVELS: tuple[ReadLevel, ...] = ("metadata", "signatures", "types", "chunks", "full")
RISK_LEVELS: tuple[RiskLevel, ...] = ("minimal", "low", "medium", "high", "critical")
RISK_CATEGORIES: tuple[RiskCategory, ...] = (
    "security",
    "performance",
    "complexity",
    "external",
    "data_handling",
)


# =============================================================================
# Budget
# =============================================================================


class ReadEntry(StateModel):
    timestamp: datetime = Field(default_factory=utc_now)
    file_path: str
    lines: int = 0
    estimated_tokens: int
    level: ReadLevel = "full"
    reason: str = ""


class Justification(StateModel):
    timestamp: datetime = Field(default_factory=utc_now)
    reason: str
    additional_tokens: int
    approved: bool = True


class BudgetAlert(StateModel):
    timestamp: datetime = Field(default_factory=utc_now)
    type: AlertType
    message: str
    consumed: int
    budget: int


class BudgetDocument(StateDocument):
    """Token budget for one session."""

    session_id: str
    started_at: datetime = Field(default_factory=utc_now)
    total_budget: int
    consumed: int = 0
    reads: list[ReadEntry] = Field(default_factory=list)
    justifications: list[Justification] = Field(default_factory=list)
    alerts: list[BudgetAlert] = Field(default_factory=list)


@dataclass(frozen=True, slots=True)
class BudgetCheck:
    allowed: bool
    remaining: int
    status: BudgetStatus


@dataclass(frozen=True, slots=True)
class RecordResult:
    success: bool
    entry: ReadEntry
    alert: BudgetAlert | None = None


@dataclass(frozen=True, slots=True)
class BudgetStats:
    session_id: str
    consumed: int
    remaining: int
    budget: int
    percent_used: int
    read_count: int
    avg_tokens_per_read: int
    by_level: dict[str, dict[str, int]]
    top_files: list[tuple[str, int]]
    justification_count: int
    alert_count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Context lock
# =============================================================================


class BlockedAttempt(StateModel):
    timestamp: datetime = Field(default_factory=utc_now)
    file_path: str
    reason: str = "Context declared sufficient"


class ContextOverride(StateModel):
    timestamp: datetime = Field(default_factory=utc_now)
    file_path: str
    reason: str


class ContextLockDocument(StateDocument):
    session_id: str
    sufficient_context: bool = False
    declared_at: datetime | None = None
    reason: str | None = None
    locked_files: list[str] = Field(default_factory=list)
    blocked_attempts: list[BlockedAttempt] = Field(default_factory=list)
    overrides: list[ContextOverride] = Field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ContextCheck:
    allowed: bool
    reason: str


# =============================================================================
# Hypotheses
# =============================================================================


class Hypothesis(StateModel):
    id: str
    description: str
    target_files: list[str] = Field(default_factory=list)
    target_symbols: list[str] = Field(default_factory=list)
    priority: int = 1
    status: HypothesisStatus = "pending"
    created_at: datetime = Field(default_factory=utc_now)
    validated_at: datetime | None = None
    evidence: str | None = None


class ReadAttempt(StateModel):
    timestamp: datetime = Field(default_factory=utc_now)
    file_path: str
    allowed: bool
    hypothesis_id: str | None = None
    reason: str = ""


class HypothesisDocument(StateDocument):
    session_id: str
    task: str
    created_at: datetime = Field(default_factory=utc_now)
    hypotheses: list[Hypothesis] = Field(default_factory=list)
    validated_files: list[str] = Field(default_factory=list)
    rejected_files: list[str] = Field(default_factory=list)
    read_attempts: list[ReadAttempt] = Field(default_factory=list)


class ArchivedSession(StateModel):
    archived_at: datetime = Field(default_factory=utc_now)
    session: HypothesisDocument


class HypothesisArchive(StateDocument):
    sessions: list[ArchivedSession] = Field(default_factory=list)


@dataclass(frozen=True, slots=True)
class HypothesisCheck:
    allowed: bool
    reason: str
    hypothesis_id: str | None = None


@dataclass(frozen=True, slots=True)
class HypothesisStats:
    session_id: str
    task: str
    total: int
    pending: int
    validated: int
    rejected: int
    reads_allowed: int
    reads_blocked: int
    hit_rate: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Contracts
# =============================================================================


class SignatureInfo(StateModel):
    name: str
    kind: SignatureKind
    signature: str
    exported: bool = True
    line: int


class FileContract(StateModel):
    file_path: str
    hash: str
    signatures: list[SignatureInfo] = Field(default_factory=list)
    last_checked: datetime = Field(default_factory=utc_now)

    @property
    def exported_signatures(self) -> list[SignatureInfo]:
        return [s for s in self.signatures if s.exported]


class ContractDocument(StateDocument):
    created_at: datetime = Field(default_factory=utc_now)
    files: dict[str, FileContract] = Field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ContractDiff:
    added: list[SignatureInfo] = field(default_factory=list)
    removed: list[SignatureInfo] = field(default_factory=list)
    modified: list[tuple[SignatureInfo, SignatureInfo]] = field(default_factory=list)
    unchanged: int = 0

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.modified)

    def to_dict(self) -> dict[str, Any]:
        return {
            "added": [s.model_dump(by_alias=True, mode="json") for s in self.added],
            "removed": [s.model_dump(by_alias=True, mode="json") for s in self.removed],
            "modified": [
                {
                    "old": old.model_dump(by_alias=True, mode="json"),
                    "new": new.model_dump(by_alias=True, mode="json"),
                }
                for old, new in self.modified
            ],
            "unchanged": self.unchanged,
        }


# =============================================================================
# Locality
# =============================================================================


@dataclass(frozen=True, slots=True)
class LocalityFactors:
    recency: int = 0
    diff_proximity: int = 0
    error_history: int = 0
    centrality: int = 0

    @property
    def total(self) -> int:
        return self.recency + self.diff_proximity + self.error_history + self.centrality


@dataclass(frozen=True, slots=True)
class LocalityScore:
    file_path: str
    score: int
    factors: LocalityFactors
    rank: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Importance
# =============================================================================


class ImportanceFactors(StateModel):
    centrality: int = 0
    churn: int = 0
    size: int = 0
    exports: int = 0
    is_entry: int = 0


class ImportanceEntry(StateModel):
    file_path: str
    importance: int
    factors: ImportanceFactors = Field(default_factory=ImportanceFactors)


class ImportanceDocument(StateDocument):
    created_at: datetime = Field(default_factory=utc_now)
    top_k: int
    files: list[ImportanceEntry] = Field(default_factory=list)


# =============================================================================
# Risk
# =============================================================================


@dataclass(frozen=True, slots=True)
class RiskFactors:
    security: int = 0
    performance: int = 0
    complexity: int = 0
    external: int = 0
    data_handling: int = 0

    @property
    def total(self) -> int:
        return (
            self.security + self.performance + self.complexity + self.external + self.data_handling
        )


@dataclass(frozen=True, slots=True)
class RiskMatch:
    category: RiskCategory
    pattern: str
    line: int
    excerpt: str


@dataclass(frozen=True, slots=True)
class RiskAssessment:
    file_path: str
    risk_level: RiskLevel
    risk_score: int
    factors: RiskFactors
    matches: list[RiskMatch] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Decisions
# =============================================================================


@dataclass(frozen=True, slots=True)
class ReadDecision:
    """Verdict for a proposed read of one file."""

    allowed: bool
    reason: str
    score: int | None = None
    suggestions: list[str] = field(default_factory=list)
    budget_impact: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
