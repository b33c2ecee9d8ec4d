"""Reusable enums for lending ledger domain models."""

from enum import Enum


class StringEnum(str, Enum):
    """Base enum class with string behavior for JSON serialization."""


class LoanStatus(StringEnum):
    """Loan lifecycle states. ACTIVE is the only non-terminal state."""

    ACTIVE = "ACTIVE"
    REPAID = "REPAID"
    LIQUIDATED = "LIQUIDATED"

    @property
    def is_terminal(self) -> bool:
        return self is not LoanStatus.ACTIVE


class LiquidationOutcome(StringEnum):
    """Result of a single liquidation health check."""

    UNAFFECTED = "UNAFFECTED"
    LIQUIDATED = "LIQUIDATED"
