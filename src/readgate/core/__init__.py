"""Core module exports."""

from readgate.core.errors import (
    BudgetError,
    ConfigError,
    ErrorCode,
    HypothesisError,
    ReadGateError,
    StateError,
)
from readgate.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)
from readgate.core.paths import normalize_path, paths_match
from readgate.core.progress import report, spinner, status

__all__ = [
    # Errors
    "BudgetError",
    "ConfigError",
    "ErrorCode",
    "HypothesisError",
    "ReadGateError",
    "StateError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
    # Paths
    "normalize_path",
    "paths_match",
    # Progress
    "report",
    "spinner",
    "status",
]
