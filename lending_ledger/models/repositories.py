"""Repository interfaces for storage-agnostic ledger access."""

from abc import ABC, abstractmethod
import logging
from typing import Any, List

from pydantic import ValidationError

from .exceptions import LoanNotFoundError, TooManyActiveLoansError
from .liquidation_logs import LiquidationLogModel
from .loans import LoanModel


logger = logging.getLogger(__name__)


class SnapshotRepository(ABC):
    """Common contract for transactional snapshot and rollback."""

    @abstractmethod
    def snapshot(self) -> Any:
        """Capture the repository state for a later rollback."""

    @abstractmethod
    def restore(self, state: Any) -> None:
        """Restore state captured by `snapshot`."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every record and reset counters."""


class LoanRepository(SnapshotRepository):
    """Loan store abstraction. Owns loan records and id allocation."""

    @abstractmethod
    def allocate_loan_id(self) -> int:
        """Return the next unused loan id and count it as issued."""

    @abstractmethod
    def create(self, model: LoanModel) -> LoanModel:
        """Persist a new loan model."""

    @abstractmethod
    def get_by_id(self, loan_id: int) -> LoanModel:
        """Fetch a loan by identifier.

        Raises:
            LoanNotFoundError: If loan does not exist.
        """

    @abstractmethod
    def update(self, model: LoanModel) -> LoanModel:
        """Replace a stored loan.

        Raises:
            LoanNotFoundError: If loan does not exist.
        """

    @abstractmethod
    def list_active(self) -> List[LoanModel]:
        """Return active loans ordered by id."""

    @property
    @abstractmethod
    def loans_issued(self) -> int:
        """Number of ids allocated so far."""


class UserLoanIndexRepository(SnapshotRepository):
    """Per-borrower index of active loan ids."""

    @abstractmethod
    def get_loans(self, borrower: str) -> List[int]:
        """Return active loan ids for a borrower in insertion order."""

    @abstractmethod
    def add(self, borrower: str, loan_id: int) -> None:
        """Append a loan id to a borrower's entry.

        Raises:
            TooManyActiveLoansError: If the entry is already full.
        """

    @abstractmethod
    def remove(self, borrower: str, loan_id: int) -> bool:
        """Remove one loan id, keeping the rest. Returns whether it was present."""

    @abstractmethod
    def is_full(self, borrower: str) -> bool:
        """Return whether the borrower's entry has reached its bound."""


class LiquidationLogRepository(SnapshotRepository):
    """Liquidation log data access abstraction."""

    @abstractmethod
    def next_log_id(self) -> int:
        """Return the id for the next log record."""

    @abstractmethod
    def create(self, model: LiquidationLogModel) -> LiquidationLogModel:
        """Persist liquidation log."""

    @abstractmethod
    def get_by_loan_id(self, loan_id: int) -> List[LiquidationLogModel]:
        """Fetch liquidation logs for a loan."""


__all__ = [
    "ValidationError",
    "LoanNotFoundError",
    "TooManyActiveLoansError",
    "SnapshotRepository",
    "LoanRepository",
    "UserLoanIndexRepository",
    "LiquidationLogRepository",
]
