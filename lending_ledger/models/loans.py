"""Loan domain model for collateral-backed positions."""

import logging
from typing import Optional

from pydantic import Field, field_validator, model_validator

from .base import UINT64_MAX, Amount, BaseLedgerModel, Percent, Tick
from .enums import LoanStatus
from .exceptions import LoanNotActiveError


logger = logging.getLogger(__name__)


class LoanModel(BaseLedgerModel):
    """Represents one loan issued against a single priced collateral asset."""

    loan_id: int = Field(..., ge=1, le=UINT64_MAX)
    borrower: str = Field(..., min_length=1)
    collateral_asset: str = Field(default="BTC", min_length=1)

    collateral_amount: Amount = Field(..., gt=0)
    loan_amount: Amount = Field(..., gt=0)
    interest_rate: Percent = Field(..., ge=0)

    start_height: Tick = Field(..., ge=0)
    last_interest_settlement: Tick = Field(..., ge=0)
    accrued_interest: Amount = Field(default=0, ge=0)
    repaid_amount: Amount = Field(default=0, ge=0)

    status: LoanStatus = Field(default=LoanStatus.ACTIVE)
    closed_height: Optional[Tick] = Field(default=None, ge=0)

    @field_validator("collateral_asset")
    @classmethod
    def _uppercase_asset(cls, value: str) -> str:
        """Force ticker-style uppercase asset symbols."""
        return value.upper()

    @model_validator(mode="after")
    def _validate_business_rules(self) -> "LoanModel":
        """Validate settlement ordering and closing markers."""
        try:
            if self.last_interest_settlement < self.start_height:
                raise ValueError("last_interest_settlement must be >= start_height")
            if self.status is LoanStatus.ACTIVE and self.closed_height is not None:
                raise ValueError("closed_height is only set once a loan leaves ACTIVE")
            return self
        except ValueError:
            logger.exception(
                "Loan validation failed loan_id=%s borrower=%s",
                self.loan_id,
                self.borrower,
            )
            raise

    @property
    def total_owed(self) -> Amount:
        """Outstanding principal plus settled interest."""
        return self.loan_amount + self.accrued_interest

    @property
    def is_active(self) -> bool:
        return self.status is LoanStatus.ACTIVE

    def ensure_active(self) -> None:
        if not self.is_active:
            raise LoanNotActiveError(
                "Loan {0} is {1}".format(self.loan_id, self.status.value)
            )

    def close(self, status: LoanStatus, height: Optional[Tick] = None) -> None:
        """Move the loan into a terminal state. Terminal states are absorbing."""
        self.ensure_active()
        if not status.is_terminal:
            raise ValueError("close() requires a terminal status")
        self.status = status
        self.closed_height = height
