"""Config module exports."""

from readgate.config.loader import ReadGateSettings, load_config
from readgate.config.models import (
    BudgetConfig,
    LoggingConfig,
    OptimizerConfig,
    PenaltyConfig,
    ReadGateConfig,
    RiskConfig,
    StorageConfig,
)

__all__ = [
    "load_config",
    "ReadGateConfig",
    "ReadGateSettings",
    "BudgetConfig",
    "LoggingConfig",
    "OptimizerConfig",
    "PenaltyConfig",
    "RiskConfig",
    "StorageConfig",
]
