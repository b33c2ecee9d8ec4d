"""In-memory repository implementations and the ledger transaction boundary."""

from .ledger_state import LedgerState
from .memory_repositories import (
    InMemoryLiquidationLogRepository,
    InMemoryLoanRepository,
    InMemoryUserLoanIndex,
)

__all__ = [
    "LedgerState",
    "InMemoryLoanRepository",
    "InMemoryUserLoanIndex",
    "InMemoryLiquidationLogRepository",
]
