"""Background liquidation poller that drives health checks across active loans.

The lifecycle manager never schedules itself. This poller is the external
driver: each cycle reads one tick and evaluates every active loan with
settle-then-evaluate ordering. Cycles are not atomic as a whole; each loan
is its own transaction, so an interrupted cycle simply resumes next time.
"""

import asyncio
import logging
from typing import Optional

from ..core.clock import TickSource
from ..models.enums import LiquidationOutcome
from ..models.exceptions import LedgerError, LoanNotActiveError, PriceUnavailableError
from ..models.outcomes import LiquidationScanSummary
from .lifecycle_manager import LifecycleManager


logger = logging.getLogger(__name__)


class LiquidationPoller:
    """Periodically scan active loans and liquidate unhealthy ones."""

    def __init__(
        self,
        manager: LifecycleManager,
        tick_source: TickSource,
        interval_sec: float = 60.0,
        enabled: bool = True,
    ) -> None:
        self._manager = manager
        self._tick_source = tick_source
        self._interval_sec = float(interval_sec)
        self._enabled = enabled
        self._task: Optional[asyncio.Task] = None
        self._stop_event = asyncio.Event()
        self.last_summary: Optional[LiquidationScanSummary] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start polling loop in background task if enabled."""
        if not self._enabled:
            logger.info("Liquidation poller disabled by configuration.")
            return
        if self.is_running:
            logger.info("Liquidation poller already running.")
            return
        self._stop_event.clear()
        self._task = asyncio.create_task(self._run_loop(), name="liquidation-poller")
        logger.info("Liquidation poller started interval=%ss", self._interval_sec)

    async def stop(self) -> None:
        """Gracefully stop background polling task."""
        if not self._task:
            return
        self._stop_event.set()
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            logger.info("Liquidation poller task cancelled.")
        finally:
            self._task = None

    async def _run_loop(self) -> None:
        """Main polling loop for liquidation checks."""
        logger.info("Liquidation poller loop running.")
        while not self._stop_event.is_set():
            try:
                self.last_summary = self.scan_once()
            except Exception:
                logger.exception("Unhandled error during liquidation poll cycle.")

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval_sec)
            except asyncio.TimeoutError:
                continue

    def scan_once(self) -> LiquidationScanSummary:
        """Execute one liquidation-check cycle across all active loans."""
        tick = self._tick_source()
        loan_ids = self._manager.list_active_loan_ids()
        summary = LiquidationScanSummary(tick=tick)
        logger.info("Liquidation cycle started loans=%d tick=%s", len(loan_ids), tick)

        for loan_id in loan_ids:
            try:
                outcome = self._manager.evaluate_liquidation(loan_id, current_tick=tick)
            except LoanNotActiveError:
                # Closed by a repayment between listing and evaluation.
                continue
            except PriceUnavailableError:
                logger.warning("Price unavailable. Ending liquidation cycle early tick=%s", tick)
                summary.price_available = False
                break
            except LedgerError:
                logger.exception("Failed loan evaluation loan_id=%s", loan_id)
                summary.failed.append(loan_id)
                continue

            summary.evaluated += 1
            if outcome is LiquidationOutcome.LIQUIDATED:
                summary.liquidated.append(loan_id)

        logger.info(
            "Liquidation cycle finished evaluated=%d liquidated=%d failed=%d",
            summary.evaluated,
            len(summary.liquidated),
            len(summary.failed),
        )
        return summary
