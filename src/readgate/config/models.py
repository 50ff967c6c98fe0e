"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (READGATE__SECTION__KEY)
3. Repo YAML (.rag/config.yaml)
4. Global YAML (~/.config/readgate/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    READGATE__<SECTION>__<KEY>=<VALUE>

Examples:
    READGATE__LOGGING__LEVEL=DEBUG
    READGATE__BUDGET__DEFAULT_LIMIT=80000
    READGATE__OPTIMIZER__HYPOTHESIS_ENABLED=true
    READGATE__OPTIMIZER__PENALTIES__LOCALITY=10
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from readgate.config.constants import (
    CHARS_PER_TOKEN,
    CRITICAL_THRESHOLD,
    DEFAULT_BUDGET,
    DEFAULT_LOCALITY_THRESHOLD,
    DEFAULT_TOP_K,
    DEFAULT_WARNING_SCORE,
    RISK_EXCERPT_CHARS,
    WARNING_THRESHOLD,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
RiskLevelName = Literal["minimal", "low", "medium", "high", "critical"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration.

    Env vars: Not directly configurable via env (use YAML for multi-output).
    """

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        READGATE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. INFO shows every admission decision.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class BudgetConfig(BaseModel):
    """Token budget configuration.

    Env vars:
        READGATE__BUDGET__DEFAULT_LIMIT: Budget for new sessions
        READGATE__BUDGET__WARNING_THRESHOLD: Usage ratio that raises a warning
        READGATE__BUDGET__CRITICAL_THRESHOLD: Usage ratio that raises a critical alert
    """

    default_limit: int = Field(
        default=DEFAULT_BUDGET,
        description="Token budget for a new session.",
    )
    chars_per_token: int = Field(
        default=CHARS_PER_TOKEN,
        description="Characters per estimated token. Lower values estimate more tokens.",
    )
    warning_threshold: float = Field(default=WARNING_THRESHOLD)
    critical_threshold: float = Field(default=CRITICAL_THRESHOLD)

    @field_validator("default_limit", "chars_per_token")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"Must be positive, got {v}")
        return v

    @model_validator(mode="after")
    def validate_thresholds(self) -> "BudgetConfig":
        if not (0 < self.warning_threshold <= self.critical_threshold <= 1):
            raise ValueError(
                "Thresholds must satisfy 0 < warning_threshold <= critical_threshold <= 1"
            )
        return self


class PenaltyConfig(BaseModel):
    """Score deductions applied by soft checks."""

    critical_budget: int = 20
    importance: int = 30
    risk: int = 20
    locality: int = 15


class OptimizerConfig(BaseModel):
    """Read admission configuration.

    Env vars:
        READGATE__OPTIMIZER__HYPOTHESIS_ENABLED: Gate reads on hypothesis targets
        READGATE__OPTIMIZER__TOP_K: Importance cutoff
        READGATE__OPTIMIZER__MIN_RISK_LEVEL: Minimum risk level worth reading
        READGATE__OPTIMIZER__LOCALITY_THRESHOLD: Minimum locality score
    """

    budget_enabled: bool = True
    context_lock_enabled: bool = True
    hypothesis_enabled: bool = Field(
        default=False,
        description="Deny reads outside active hypothesis targets.",
    )
    importance_enabled: bool = True
    risk_enabled: bool = True
    locality_enabled: bool = True
    contracts_enabled: bool = True
    top_k: int = Field(default=DEFAULT_TOP_K, description="Files considered important.")
    min_risk_level: RiskLevelName = Field(
        default="low",
        description="Files below this risk level are penalized.",
    )
    locality_threshold: int = Field(
        default=DEFAULT_LOCALITY_THRESHOLD,
        description="Files below this locality score are penalized.",
    )
    warning_score: int = Field(
        default=DEFAULT_WARNING_SCORE,
        description="Allowed reads scoring below this are reported with warnings.",
    )
    penalties: PenaltyConfig = Field(default_factory=PenaltyConfig)

    @field_validator("top_k")
    @classmethod
    def validate_top_k(cls, v: int) -> int:
        if v <= 0:
            raise ValueError(f"top_k must be positive, got {v}")
        return v


class RiskConfig(BaseModel):
    """Risk assessment configuration.

    Env vars:
        READGATE__RISK__RULES_PATH: YAML file with extra risk rules
    """

    rules_path: str | None = Field(
        default=None,
        description="YAML file of extra rules: a list of {category, pattern, weight}. "
        "Relative paths resolve against the repo root.",
    )
    excerpt_chars: int = Field(default=RISK_EXCERPT_CHARS)


class StorageConfig(BaseModel):
    """State storage configuration.

    Env vars:
        READGATE__STORAGE__STATE_DIR: Directory (relative to repo root) for state documents
    """

    state_dir: str = Field(default=".rag")


class ReadGateConfig(BaseModel):
    """Root configuration for readgate."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    budget: BudgetConfig = Field(default_factory=BudgetConfig)
    optimizer: OptimizerConfig = Field(default_factory=OptimizerConfig)
    risk: RiskConfig = Field(default_factory=RiskConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
