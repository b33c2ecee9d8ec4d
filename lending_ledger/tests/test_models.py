"""Unit tests for ledger domain models."""

import unittest

from pydantic import ValidationError

from lending_ledger.models.enums import LiquidationOutcome, LoanStatus
from lending_ledger.models.exceptions import LoanNotActiveError, ModelValidationError
from lending_ledger.models.liquidation_logs import LiquidationLogModel
from lending_ledger.models.loans import LoanModel
from lending_ledger.models.parameters import RiskParameters


def _loan(**overrides) -> LoanModel:
    payload = {
        "loan_id": 1,
        "borrower": "alice",
        "collateral_amount": 100_000_000,
        "loan_amount": 25_000_000_000,
        "interest_rate": 5,
        "start_height": 10,
        "last_interest_settlement": 10,
    }
    payload.update(overrides)
    return LoanModel(**payload)


class LoanModelTests(unittest.TestCase):
    """Loan invariants and state transitions."""

    def test_loan_happy_path(self) -> None:
        """Create a valid loan model."""
        loan = _loan(collateral_asset="btc")
        self.assertEqual(loan.status, LoanStatus.ACTIVE)
        self.assertEqual(loan.collateral_asset, "BTC")
        self.assertEqual(loan.total_owed, 25_000_000_000)
        self.assertTrue(loan.is_active)

    def test_rejects_non_positive_amounts(self) -> None:
        """Reject zero and negative amounts."""
        with self.assertRaises(ValidationError):
            _loan(collateral_amount=0)
        with self.assertRaises(ValidationError):
            _loan(loan_amount=0)

    def test_rejects_zero_loan_id(self) -> None:
        """Reject a zero loan id."""
        with self.assertRaises(ValidationError):
            _loan(loan_id=0)

    def test_settlement_cannot_precede_start(self) -> None:
        """Reject settlement before the start height."""
        with self.assertRaises(ValidationError):
            _loan(last_interest_settlement=9)

    def test_assignment_is_validated(self) -> None:
        """Validate fields on assignment."""
        loan = _loan()
        with self.assertRaises(ValidationError):
            loan.accrued_interest = -1

    def test_close_is_one_way(self) -> None:
        """Keep terminal states absorbing."""
        loan = _loan()
        loan.close(LoanStatus.LIQUIDATED, 42)
        self.assertEqual(loan.status, LoanStatus.LIQUIDATED)
        self.assertEqual(loan.closed_height, 42)
        with self.assertRaises(LoanNotActiveError):
            loan.close(LoanStatus.REPAID, 43)

    def test_close_requires_terminal_status(self) -> None:
        """Reject closing into ACTIVE."""
        with self.assertRaises(ValueError):
            _loan().close(LoanStatus.ACTIVE)

    def test_record_round_trip(self) -> None:
        """Round-trip a loan through its record form."""
        loan = _loan(accrued_interest=7)
        record = loan.to_record()
        self.assertEqual(record["status"], "ACTIVE")
        self.assertEqual(LoanModel.from_record(record).model_dump(), loan.model_dump())

    def test_from_record_wraps_validation_errors(self) -> None:
        """Wrap pydantic errors in ModelValidationError."""
        with self.assertRaises(ModelValidationError):
            LoanModel.from_record({"loan_id": 1})


class EnumTests(unittest.TestCase):
    """Test loan status enums."""

    def test_terminal_states(self) -> None:
        """Mark REPAID and LIQUIDATED as terminal."""
        self.assertFalse(LoanStatus.ACTIVE.is_terminal)
        self.assertTrue(LoanStatus.REPAID.is_terminal)
        self.assertTrue(LoanStatus.LIQUIDATED.is_terminal)

    def test_string_values(self) -> None:
        """Expose plain string values."""
        self.assertEqual(LiquidationOutcome.LIQUIDATED, "LIQUIDATED")


class RiskParametersTests(unittest.TestCase):
    """Test risk parameter validation."""

    def test_defaults(self) -> None:
        """Use the reference defaults."""
        params = RiskParameters()
        self.assertFalse(params.platform_initialized)
        self.assertEqual(params.minimum_collateral_ratio_percent, 150)
        self.assertEqual(params.liquidation_threshold_percent, 120)
        self.assertEqual(params.collateral_scale, 10**8)

    def test_minimum_ratio_floor(self) -> None:
        """Reject a minimum ratio below 110."""
        with self.assertRaises(ValidationError):
            RiskParameters(minimum_collateral_ratio_percent=109, liquidation_threshold_percent=100)

    def test_threshold_floor(self) -> None:
        """Reject a threshold below 100."""
        with self.assertRaises(ValidationError):
            RiskParameters(liquidation_threshold_percent=99)

    def test_threshold_below_minimum_ratio(self) -> None:
        """Require the threshold below the minimum ratio."""
        with self.assertRaises(ValidationError):
            RiskParameters(minimum_collateral_ratio_percent=120, liquidation_threshold_percent=120)

    def test_frozen(self) -> None:
        """Reject mutation of a parameter snapshot."""
        params = RiskParameters()
        with self.assertRaises(ValidationError):
            params.platform_initialized = True


class LiquidationLogTests(unittest.TestCase):
    """Test liquidation log records."""

    def test_rejects_healthy_ratio(self) -> None:
        """Reject a log whose ratio is above the threshold."""
        with self.assertRaises(ValidationError):
            LiquidationLogModel(
                log_id=1,
                loan_id=1,
                borrower="alice",
                unit_price=20_000_000_000,
                collateral_ratio_percent=121,
                liquidation_threshold_percent=120,
                outstanding_amount=25_000_000_000,
                collateral_seized=100_000_000,
            )


if __name__ == "__main__":
    unittest.main()
