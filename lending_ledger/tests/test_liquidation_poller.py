"""Tests for the batch liquidation poller."""

import asyncio
import unittest

from lending_ledger.core.clock import ManualTickSource
from lending_ledger.models.enums import LoanStatus
from lending_ledger.models.parameters import RiskParameters
from lending_ledger.repositories import LedgerState
from lending_ledger.services.lifecycle_manager import LifecycleManager
from lending_ledger.services.liquidation_poller import LiquidationPoller
from lending_ledger.services.price_oracle import StaticPriceOracle

ONE_BTC = 100_000_000
LOAN_25K = 25_000_000_000


def _build(interval_sec: float = 60.0, enabled: bool = True):
    oracle = StaticPriceOracle({"BTC": 50_000_000_000})
    manager = LifecycleManager(
        state=LedgerState(),
        oracle=oracle,
        parameters=RiskParameters(platform_initialized=True),
    )
    ticks = ManualTickSource()
    poller = LiquidationPoller(manager, ticks, interval_sec=interval_sec, enabled=enabled)
    return oracle, manager, ticks, poller


class ScanOnceTests(unittest.TestCase):
    """Test a single liquidation scan."""

    def setUp(self) -> None:
        self.oracle, self.manager, self.ticks, self.poller = _build()
        self.weak = self.manager.open_loan("alice", ONE_BTC, LOAN_25K, 0)
        self.strong = self.manager.open_loan("bob", 10 * ONE_BTC, LOAN_25K, 0)

    def test_liquidates_only_unhealthy_loans(self) -> None:
        """Liquidate only loans at or below the threshold."""
        self.oracle.set_price("BTC", 20_000_000_000)
        self.ticks.advance(6)
        summary = self.poller.scan_once()
        self.assertEqual(summary.tick, 6)
        self.assertEqual(summary.evaluated, 2)
        self.assertEqual(summary.liquidated, [self.weak])
        self.assertEqual(self.manager.get_loan(self.weak).status, LoanStatus.LIQUIDATED)
        self.assertEqual(self.manager.get_loan(self.strong).status, LoanStatus.ACTIVE)
        self.assertEqual(self.manager.get_loan(self.strong).last_interest_settlement, 6)

    def test_healthy_book_is_unaffected(self) -> None:
        """Leave a healthy book untouched."""
        summary = self.poller.scan_once()
        self.assertEqual(summary.liquidated, [])
        self.assertEqual(self.manager.list_active_loan_ids(), [self.weak, self.strong])

    def test_missing_price_ends_cycle(self) -> None:
        """Stop the cycle when the price is missing."""
        self.oracle.clear_price("BTC")
        summary = self.poller.scan_once()
        self.assertFalse(summary.price_available)
        self.assertEqual(summary.evaluated, 0)
        self.assertEqual(self.manager.list_active_loan_ids(), [self.weak, self.strong])

    def test_next_cycle_resumes_after_price_returns(self) -> None:
        """Resume liquidations once the price returns."""
        self.oracle.clear_price("BTC")
        self.poller.scan_once()
        self.oracle.set_price("BTC", 20_000_000_000)
        summary = self.poller.scan_once()
        self.assertEqual(summary.liquidated, [self.weak])


class PollerLoopTests(unittest.IsolatedAsyncioTestCase):
    """Test the background poller lifecycle."""

    async def test_background_loop_liquidates_and_stops(self) -> None:
        """Run the background loop and stop cleanly."""
        oracle, manager, _, poller = _build(interval_sec=0.01)
        loan_id = manager.open_loan("alice", ONE_BTC, LOAN_25K, 0)
        oracle.set_price("BTC", 20_000_000_000)

        await poller.start()
        self.assertTrue(poller.is_running)
        for _ in range(100):
            if manager.get_loan(loan_id).status is LoanStatus.LIQUIDATED:
                break
            await asyncio.sleep(0.01)
        await poller.stop()

        self.assertFalse(poller.is_running)
        self.assertEqual(manager.get_loan(loan_id).status, LoanStatus.LIQUIDATED)
        self.assertIsNotNone(poller.last_summary)

    async def test_disabled_poller_does_not_start(self) -> None:
        """Skip startup when the poller is disabled."""
        _, _, _, poller = _build(enabled=False)
        await poller.start()
        self.assertFalse(poller.is_running)
        await poller.stop()


if __name__ == "__main__":
    unittest.main()
