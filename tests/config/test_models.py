"""Tests for config/models.py module.

Covers:
- LogOutputConfig model
- BudgetConfig model
- OptimizerConfig and PenaltyConfig models
- ReadGateConfig root model
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from readgate.config.models import (
    BudgetConfig,
    LogOutputConfig,
    OptimizerConfig,
    ReadGateConfig,
)


class TestLogOutputConfig:
    """Tests for LogOutputConfig model."""

    def test_defaults(self) -> None:
        config = LogOutputConfig()
        assert config.format == "console"
        assert config.destination == "stderr"
        assert config.level is None

    def test_relative_file_destination_rejected(self) -> None:
        with pytest.raises(ValidationError, match="absolute"):
            LogOutputConfig(destination="logs/readgate.log")


class TestBudgetConfig:
    """Tests for BudgetConfig model."""

    def test_defaults(self) -> None:
        config = BudgetConfig()
        assert config.default_limit == 50_000
        assert config.chars_per_token == 4
        assert config.warning_threshold == 0.7
        assert config.critical_threshold == 0.9

    @pytest.mark.parametrize("field", ["default_limit", "chars_per_token"])
    def test_non_positive_rejected(self, field: str) -> None:
        with pytest.raises(ValidationError, match="Must be positive"):
            BudgetConfig(**{field: 0})

    def test_inverted_thresholds_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Thresholds"):
            BudgetConfig(warning_threshold=0.95, critical_threshold=0.9)


class TestOptimizerConfig:
    """Tests for OptimizerConfig model."""

    def test_defaults(self) -> None:
        config = OptimizerConfig()
        assert config.hypothesis_enabled is False
        assert config.budget_enabled and config.context_lock_enabled
        assert config.top_k == 30
        assert config.min_risk_level == "low"
        assert config.locality_threshold == 25
        assert config.warning_score == 50
        assert config.penalties.critical_budget == 20
        assert config.penalties.importance == 30
        assert config.penalties.risk == 20
        assert config.penalties.locality == 15

    def test_unknown_risk_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            OptimizerConfig(min_risk_level="severe")  # type: ignore[arg-type]

    def test_zero_top_k_rejected(self) -> None:
        with pytest.raises(ValidationError, match="top_k"):
            OptimizerConfig(top_k=0)


class TestReadGateConfig:
    def test_sections_present(self) -> None:
        config = ReadGateConfig()
        assert config.storage.state_dir == ".rag"
        assert config.risk.rules_path is None
        assert config.risk.excerpt_chars == 60
        assert config.logging.level == "WARNING"
