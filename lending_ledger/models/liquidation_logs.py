"""Liquidation audit model."""

import logging
from typing import Optional

from pydantic import Field, model_validator

from .base import Amount, BaseLedgerModel, Percent, Tick


logger = logging.getLogger(__name__)


class LiquidationLogModel(BaseLedgerModel):
    """Represents a full-position liquidation event kept for audit."""

    log_id: int = Field(..., ge=1)
    loan_id: int = Field(..., ge=1)
    borrower: str = Field(..., min_length=1)

    triggered_height: Optional[Tick] = Field(default=None, ge=0)
    unit_price: Amount = Field(..., ge=0)
    collateral_ratio_percent: Percent = Field(..., ge=0)
    liquidation_threshold_percent: Percent = Field(..., ge=100)

    outstanding_amount: Amount = Field(..., gt=0)
    collateral_seized: Amount = Field(..., gt=0)

    @model_validator(mode="after")
    def _validate_trigger(self) -> "LiquidationLogModel":
        """A log is only written when the ratio breached the threshold."""
        if self.collateral_ratio_percent > self.liquidation_threshold_percent:
            logger.error(
                "Liquidation log above threshold log_id=%s loan_id=%s",
                self.log_id,
                self.loan_id,
            )
            raise ValueError("collateral_ratio_percent must be <= liquidation_threshold_percent")
        return self
