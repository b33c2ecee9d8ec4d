"""Result payloads returned by lifecycle operations and read-only queries."""

from typing import List

from pydantic import Field

from .base import Amount, BaseLedgerModel, Percent
from .enums import LoanStatus


class RepaymentOutcome(BaseLedgerModel):
    """Describes how a payment was applied to a loan."""

    loan_id: int = Field(..., ge=1)
    status: LoanStatus
    amount_paid: Amount = Field(..., gt=0)
    interest_paid: Amount = Field(default=0, ge=0)
    principal_paid: Amount = Field(default=0, ge=0)
    remaining_owed: Amount = Field(default=0, ge=0)
    change: Amount = Field(default=0, ge=0, description="Overpaid amount due back to the payer.")


class LoanQuote(BaseLedgerModel):
    """Pre-trade risk view of a prospective loan at the current price."""

    collateral_amount: Amount = Field(..., gt=0)
    loan_amount: Amount = Field(..., gt=0)
    unit_price: Amount = Field(..., ge=0)
    collateral_ratio_percent: Percent = Field(..., ge=0)
    minimum_collateral_ratio_percent: Percent
    max_loan_amount: Amount = Field(..., ge=0)
    eligible: bool


class PlatformStats(BaseLedgerModel):
    """Aggregate counters over the ledger."""

    loans_issued: int = Field(default=0, ge=0)
    active_loans: int = Field(default=0, ge=0)
    total_active_principal: Amount = Field(default=0, ge=0)
    total_active_interest: Amount = Field(default=0, ge=0)
    total_active_collateral: Amount = Field(default=0, ge=0)


class LiquidationScanSummary(BaseLedgerModel):
    """Result of one batch liquidation cycle."""

    tick: int = Field(..., ge=0)
    evaluated: int = Field(default=0, ge=0)
    liquidated: List[int] = Field(default_factory=list)
    failed: List[int] = Field(default_factory=list)
    price_available: bool = True
