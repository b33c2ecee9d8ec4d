"""Common reusable risk math exports."""

from .risk_math import (
    accrued_interest,
    collateral_ratio,
    collateral_value,
    elapsed_ticks,
    is_liquidatable,
    is_sufficiently_collateralized,
    liquidation_price,
    max_loan_amount,
)

__all__ = [
    "accrued_interest",
    "collateral_ratio",
    "collateral_value",
    "elapsed_ticks",
    "is_liquidatable",
    "is_sufficiently_collateralized",
    "liquidation_price",
    "max_loan_amount",
]
