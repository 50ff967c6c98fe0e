"""readgate error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: State documents
- 4xxx: Budget ledger
- 5xxx: Hypothesis tracker
- 9xxx: Internal

Policy violations (budget exceeded, context locked, hypothesis mismatch) are
never raised; they are reported as denied read decisions. These errors cover
malformed input and invalid operations on the leaf stores.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_MISSING_REQUIRED = 2003
    CONFIG_FILE_NOT_FOUND = 2004

    # State (3xxx)
    STATE_WRITE_FAILED = 3001
    STATE_MISSING = 3002

    # Budget (4xxx)
    BUDGET_INVALID_AMOUNT = 4001

    # Hypothesis (5xxx)
    HYPOTHESIS_NO_SESSION = 5001
    HYPOTHESIS_NOT_FOUND = 5002
    HYPOTHESIS_ALREADY_RESOLVED = 5003
    HYPOTHESIS_PENDING = 5004
    HYPOTHESIS_INVALID = 5005


@dataclass(frozen=True, slots=True)
class ReadGateError(Exception):
    """Base error with structured context for CLI and JSON output."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'HYPOTHESIS_NOT_FOUND')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(ReadGateError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class StateError(ReadGateError):
    """Persisted state document errors."""

    @classmethod
    def write_failed(cls, path: str, reason: str) -> "StateError":
        return cls(
            code=ErrorCode.STATE_WRITE_FAILED,
            message=f"Failed to write state document {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def missing(cls, name: str, hint: str) -> "StateError":
        return cls(
            code=ErrorCode.STATE_MISSING,
            message=f"No {name} found. {hint}",
            details={"name": name},
        )


class BudgetError(ReadGateError):
    """Budget ledger errors."""

    @classmethod
    def invalid_amount(cls, amount: int) -> "BudgetError":
        return cls(
            code=ErrorCode.BUDGET_INVALID_AMOUNT,
            message=f"Token amount must be positive, got {amount}",
            details={"amount": amount},
        )


class HypothesisError(ReadGateError):
    """Hypothesis tracker errors."""

    @classmethod
    def no_session(cls) -> "HypothesisError":
        return cls(
            code=ErrorCode.HYPOTHESIS_NO_SESSION,
            message="No active hypothesis session. Start one with 'readgate hypothesis start'",
        )

    @classmethod
    def not_found(cls, hypothesis_id: str) -> "HypothesisError":
        return cls(
            code=ErrorCode.HYPOTHESIS_NOT_FOUND,
            message=f"Hypothesis not found: {hypothesis_id}",
            details={"id": hypothesis_id},
        )

    @classmethod
    def already_resolved(cls, hypothesis_id: str, status: str) -> "HypothesisError":
        return cls(
            code=ErrorCode.HYPOTHESIS_ALREADY_RESOLVED,
            message=f"Hypothesis {hypothesis_id} is already {status}",
            details={"id": hypothesis_id, "status": status},
        )

    @classmethod
    def still_pending(cls, count: int) -> "HypothesisError":
        return cls(
            code=ErrorCode.HYPOTHESIS_PENDING,
            message=f"Cannot archive: {count} hypothesis(es) still pending",
            details={"pending": count},
        )

    @classmethod
    def invalid(cls, reason: str) -> "HypothesisError":
        return cls(
            code=ErrorCode.HYPOTHESIS_INVALID,
            message=f"Invalid hypothesis: {reason}",
            details={"reason": reason},
        )

