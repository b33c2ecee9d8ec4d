"""Process entrypoint wiring the lifecycle engine to its collaborators."""

import asyncio
from dataclasses import dataclass
from typing import Optional

from .core import AppSettings, WallClockTickSource, get_logger, load_settings, setup_logging
from .core.clock import TickSource
from .repositories import LedgerState
from .services import (
    ContractPriceOracle,
    LifecycleManager,
    LiquidationPoller,
    PriceOracle,
    StaticPriceOracle,
    agent_allowlist,
)


logger = get_logger(__name__)


@dataclass
class LedgerEngine:
    """Bundle of the wired ledger components."""

    settings: AppSettings
    state: LedgerState
    oracle: PriceOracle
    manager: LifecycleManager
    poller: LiquidationPoller


def build_oracle(settings: AppSettings) -> PriceOracle:
    """Create the configured price oracle."""
    if settings.oracle_mode == "contract":
        if not settings.oracle_rpc_url or not settings.oracle_contract_address:
            raise ValueError("Contract oracle requires oracle.rpc_url and oracle.contract_address")
        return ContractPriceOracle(
            rpc_url=settings.oracle_rpc_url,
            contract_address=settings.oracle_contract_address,
            abi_json=settings.oracle_contract_abi_json,
            price_function=settings.oracle_price_function,
            pass_asset=settings.oracle_pass_asset,
        )
    if settings.oracle_mode != "static":
        logger.warning("Unknown oracle mode '%s'. Using static prices.", settings.oracle_mode)
    return StaticPriceOracle(settings.oracle_static_prices)


def build_engine(
    settings: AppSettings,
    oracle: Optional[PriceOracle] = None,
    tick_source: Optional[TickSource] = None,
) -> LedgerEngine:
    """Wire ledger state, manager, and poller from settings."""
    state = LedgerState(max_loans_per_user=settings.max_active_loans_per_user)
    resolved_oracle = oracle if oracle is not None else build_oracle(settings)
    manager = LifecycleManager(
        state=state,
        oracle=resolved_oracle,
        parameters=settings.risk_parameters(),
        agent_policy=agent_allowlist(settings.authorized_agents) if settings.authorized_agents else None,
    )
    poller = LiquidationPoller(
        manager=manager,
        tick_source=tick_source
        or WallClockTickSource(settings.clock_genesis_epoch, settings.clock_seconds_per_tick),
        interval_sec=settings.poller_interval_sec,
        enabled=settings.poller_enabled,
    )
    logger.info("Ledger engine initialized: %s", settings.app_name)
    return LedgerEngine(settings=settings, state=state, oracle=resolved_oracle, manager=manager, poller=poller)


async def _serve(engine: LedgerEngine) -> None:
    """Run the liquidation poller until cancelled."""
    await engine.poller.start()
    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await engine.poller.stop()


def run() -> None:
    """Start the ledger process with the liquidation poller."""
    settings = load_settings()
    setup_logging(settings.log_level)
    engine = build_engine(settings)
    try:
        asyncio.run(_serve(engine))
    except KeyboardInterrupt:
        logger.info("Ledger process stopped.")


if __name__ == "__main__":
    run()
