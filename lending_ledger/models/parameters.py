"""Risk parameters handed to the lifecycle manager by the platform administrator."""

import logging

from pydantic import ConfigDict, Field, model_validator

from .base import BaseLedgerModel, Percent


logger = logging.getLogger(__name__)

MIN_COLLATERAL_RATIO_FLOOR = 110
LIQUIDATION_THRESHOLD_FLOOR = 100


class RiskParameters(BaseLedgerModel):
    """Immutable snapshot of the platform's lending parameters."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    platform_initialized: bool = Field(default=False)
    minimum_collateral_ratio_percent: Percent = Field(default=150, ge=MIN_COLLATERAL_RATIO_FLOOR)
    liquidation_threshold_percent: Percent = Field(default=120, ge=LIQUIDATION_THRESHOLD_FLOOR)
    default_interest_rate_percent: Percent = Field(default=5, ge=0)
    ticks_per_day: int = Field(default=144, gt=0)
    collateral_asset: str = Field(default="BTC", min_length=1)
    collateral_decimals: int = Field(default=8, ge=0, le=30)
    allow_partial_repayment: bool = Field(default=False)

    @model_validator(mode="after")
    def _validate_thresholds(self) -> "RiskParameters":
        """New loans must open strictly above the liquidation line."""
        if self.liquidation_threshold_percent >= self.minimum_collateral_ratio_percent:
            logger.error(
                "Rejected risk parameters min_ratio=%s liquidation_threshold=%s",
                self.minimum_collateral_ratio_percent,
                self.liquidation_threshold_percent,
            )
            raise ValueError(
                "liquidation_threshold_percent must be lower than minimum_collateral_ratio_percent"
            )
        return self

    @property
    def collateral_scale(self) -> int:
        """Smallest collateral units per whole unit."""
        return 10**self.collateral_decimals
