"""Shared ledger state with a single-writer transaction boundary."""

from contextlib import contextmanager
import logging
from threading import RLock
from typing import Iterator, Optional

from ..common.risk_math import MAX_ACTIVE_LOANS_PER_USER
from ..models.repositories import (
    LiquidationLogRepository,
    LoanRepository,
    UserLoanIndexRepository,
)
from .memory_repositories import (
    InMemoryLiquidationLogRepository,
    InMemoryLoanRepository,
    InMemoryUserLoanIndex,
)


logger = logging.getLogger(__name__)


class LedgerState:
    """Groups the loan store, user index, and liquidation log behind one lock.

    Every state-changing operation runs inside `transaction()`. Writers are
    serialized by a re-entrant lock, and any exception raised inside the
    block restores all three repositories to their state at entry.
    """

    def __init__(
        self,
        loans: Optional[LoanRepository] = None,
        user_index: Optional[UserLoanIndexRepository] = None,
        liquidation_logs: Optional[LiquidationLogRepository] = None,
        max_loans_per_user: int = MAX_ACTIVE_LOANS_PER_USER,
    ) -> None:
        self.loans = loans or InMemoryLoanRepository()
        self.user_index = user_index or InMemoryUserLoanIndex(max_loans_per_user)
        self.liquidation_logs = liquidation_logs or InMemoryLiquidationLogRepository()
        self._lock = RLock()
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator["LedgerState"]:
        """Run a block atomically against the ledger.

        Nested transactions join the outermost one; only the outermost
        block takes the snapshot and performs the rollback.
        """
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            snapshot = (
                self.loans.snapshot(),
                self.user_index.snapshot(),
                self.liquidation_logs.snapshot(),
            )
            self._depth = 1
            try:
                yield self
            except BaseException:
                self.loans.restore(snapshot[0])
                self.user_index.restore(snapshot[1])
                self.liquidation_logs.restore(snapshot[2])
                logger.debug("Ledger transaction rolled back.")
                raise
            finally:
                self._depth = 0

    @contextmanager
    def read(self) -> Iterator["LedgerState"]:
        """Hold the lock for a consistent multi-table read."""
        with self._lock:
            yield self

    def reset(self) -> None:
        """Drop all records and restart id allocation at 1."""
        with self._lock:
            self.loans.clear()
            self.user_index.clear()
            self.liquidation_logs.clear()
            logger.info("Ledger state reset.")
