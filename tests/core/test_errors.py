"""Tests for error types and codes."""

import pytest

from readgate.core.errors import (
    BudgetError,
    ConfigError,
    ErrorCode,
    HypothesisError,
    ReadGateError,
    StateError,
)


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.CONFIG_INVALID_VALUE, 2000),
            (ErrorCode.STATE_WRITE_FAILED, 3000),
            (ErrorCode.BUDGET_INVALID_AMOUNT, 4000),
            (ErrorCode.HYPOTHESIS_ALREADY_RESOLVED, 5000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        # Given
        error_code = code

        # When
        value = error_code.value

        # Then
        assert expected_range <= value < expected_range + 1000


class TestReadGateError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        # Given
        error = ReadGateError(
            code=ErrorCode.STATE_MISSING,
            message="Test message",
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 3002,
            "error": "STATE_MISSING",
            "message": "Test message",
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_includes_code_and_message(self) -> None:
        # Given
        error = BudgetError.invalid_amount(-5)

        # When
        text = str(error)

        # Then
        assert text == "[4001] BUDGET_INVALID_AMOUNT: Token amount must be positive, got -5"

    def test_given_error_when_raised_then_catchable_as_base(self) -> None:
        # Given / When / Then
        with pytest.raises(ReadGateError):
            raise HypothesisError.no_session()


class TestFactories:
    """Classmethod factories carry codes and details."""

    def test_given_parse_failure_when_created_then_has_path_details(self) -> None:
        # When
        error = ConfigError.parse_error("/tmp/config.yaml", "bad indent")

        # Then
        assert error.code == ErrorCode.CONFIG_PARSE_ERROR
        assert error.details == {"path": "/tmp/config.yaml", "reason": "bad indent"}

    def test_given_invalid_value_when_created_then_stringifies_value(self) -> None:
        # When
        error = ConfigError.invalid_value("optimizer.top_k", 0, "must be positive")

        # Then
        assert error.code == ErrorCode.CONFIG_INVALID_VALUE
        assert error.details["value"] == "0"
        assert "optimizer.top_k" in error.message

    def test_given_missing_state_when_created_then_message_has_hint(self) -> None:
        # When
        error = StateError.missing("budget", "Run 'readgate budget init' first")

        # Then
        assert error.message == "No budget found. Run 'readgate budget init' first"

    def test_given_resolved_hypothesis_when_created_then_reports_status(self) -> None:
        # When
        error = HypothesisError.already_resolved("abc12345", "validated")

        # Then
        assert error.code == ErrorCode.HYPOTHESIS_ALREADY_RESOLVED
        assert error.details == {"id": "abc12345", "status": "validated"}

    def test_given_pending_count_when_created_then_code_is_pending(self) -> None:
        # When
        error = HypothesisError.still_pending(2)

        # Then
        assert error.code == ErrorCode.HYPOTHESIS_PENDING
