"""Configuration constants.

Values here are format and protocol constants, not tunables. For configurable
values see models.py (BudgetConfig, OptimizerConfig, ...).
"""

# =============================================================================
# State documents
# =============================================================================

STATE_VERSION = "1.0.0"
"""Version stamped on every persisted document. Mismatches reset the document."""

SESSION_ID_LENGTH = 8
"""Length of generated session and hypothesis ids."""

# =============================================================================
# Budget defaults
# =============================================================================

DEFAULT_BUDGET = 50_000
"""Default token budget for a new session."""

CHARS_PER_TOKEN = 4
"""Token estimation heuristic: one token per four characters."""

WARNING_THRESHOLD = 0.7
CRITICAL_THRESHOLD = 0.9

TOP_FILES_LIMIT = 10
"""Files listed in budget stats."""

# =============================================================================
# Scoring
# =============================================================================

FACTOR_MAX = 25
"""Upper bound for every locality and risk factor."""

DEFAULT_TOP_K = 30
DEFAULT_LOCALITY_THRESHOLD = 25
DEFAULT_WARNING_SCORE = 50

RISK_EXCERPT_CHARS = 60
"""Characters of a matching line kept in risk excerpts."""

PRUNE_IMPORTER_LIMIT = 3
"""Importers kept per executed file when pruning runtime paths."""
