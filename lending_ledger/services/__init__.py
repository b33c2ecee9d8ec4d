"""Service layer exports."""

from .lifecycle_manager import LifecycleManager, agent_allowlist
from .liquidation_poller import LiquidationPoller
from .price_oracle import ContractPriceOracle, PriceOracle, StaticPriceOracle

__all__ = [
    "LifecycleManager",
    "LiquidationPoller",
    "PriceOracle",
    "StaticPriceOracle",
    "ContractPriceOracle",
    "agent_allowlist",
]
