"""Read admission control: leaf signals and the decision engine."""

from readgate.optimizer.budget import BudgetLedger, estimate_tokens
from readgate.optimizer.context_lock import ContextLock
from readgate.optimizer.contracts import ContractStore, compare_contracts, extract_signatures
from readgate.optimizer.engine import DecisionEngine, EngineStatus
from readgate.optimizer.hypothesis import HypothesisTracker
from readgate.optimizer.importance import ImportanceIndexer
from readgate.optimizer.locality import (
    calculate_locality_score,
    filter_by_threshold,
    rank_files_by_locality,
)
from readgate.optimizer.models import ReadDecision
from readgate.optimizer.risk import (
    DEFAULT_RISK_RULES,
    assess_content,
    assess_diff_risk,
    assess_file_risk,
    filter_by_risk,
)
from readgate.optimizer.runtime_paths import analyze_runtime_path, parse_stack_trace

__all__ = [
    "BudgetLedger",
    "ContextLock",
    "ContractStore",
    "DEFAULT_RISK_RULES",
    "DecisionEngine",
    "EngineStatus",
    "HypothesisTracker",
    "ImportanceIndexer",
    "ReadDecision",
    "analyze_runtime_path",
    "assess_content",
    "assess_diff_risk",
    "assess_file_risk",
    "calculate_locality_score",
    "compare_contracts",
    "estimate_tokens",
    "extract_signatures",
    "filter_by_risk",
    "filter_by_threshold",
    "parse_stack_trace",
    "rank_files_by_locality",
]
