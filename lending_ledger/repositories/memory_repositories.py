"""In-memory implementations of the ledger repositories.

Records are copied on the way in and on the way out, so a caller holding a
`LoanModel` can never change ledger state without going through `update`.
Locking and rollback belong to `LedgerState`; these classes are not
thread-safe on their own.
"""

import logging
from typing import Dict, List, Tuple

from ..common.risk_math import MAX_ACTIVE_LOANS_PER_USER
from ..models.base import UINT64_MAX
from ..models.exceptions import (
    LoanNotFoundError,
    ModelValidationError,
    TooManyActiveLoansError,
)
from ..models.liquidation_logs import LiquidationLogModel
from ..models.loans import LoanModel
from ..models.repositories import (
    LiquidationLogRepository,
    LoanRepository,
    UserLoanIndexRepository,
)


logger = logging.getLogger(__name__)

LoanStoreState = Tuple[Dict[int, LoanModel], int]


class InMemoryLoanRepository(LoanRepository):
    """Authoritative loan table keyed by integer id."""

    def __init__(self) -> None:
        self._loans: Dict[int, LoanModel] = {}
        self._loans_issued = 0

    @property
    def loans_issued(self) -> int:
        return self._loans_issued

    def allocate_loan_id(self) -> int:
        """Return the next id. Ids start at 1 and are never reused."""
        if self._loans_issued >= UINT64_MAX:
            raise ModelValidationError("loan id space exhausted")
        self._loans_issued += 1
        return self._loans_issued

    def create(self, model: LoanModel) -> LoanModel:
        if model.loan_id in self._loans:
            raise ModelValidationError("Loan id already exists: {0}".format(model.loan_id))
        if model.loan_id > self._loans_issued:
            raise ModelValidationError("Loan id {0} was never allocated".format(model.loan_id))
        self._loans[model.loan_id] = model.model_copy(deep=True)
        logger.debug("Stored loan_id=%s borrower=%s", model.loan_id, model.borrower)
        return model.model_copy(deep=True)

    def get_by_id(self, loan_id: int) -> LoanModel:
        stored = self._loans.get(loan_id)
        if stored is None:
            raise LoanNotFoundError("Loan not found: {0}".format(loan_id))
        return stored.model_copy(deep=True)

    def update(self, model: LoanModel) -> LoanModel:
        if model.loan_id not in self._loans:
            raise LoanNotFoundError("Loan not found: {0}".format(model.loan_id))
        self._loans[model.loan_id] = model.model_copy(deep=True)
        return model.model_copy(deep=True)

    def list_active(self) -> List[LoanModel]:
        return [
            self._loans[loan_id].model_copy(deep=True)
            for loan_id in sorted(self._loans)
            if self._loans[loan_id].is_active
        ]

    def snapshot(self) -> LoanStoreState:
        # Stored records are replaced, never mutated in place, so a shallow copy suffices.
        return dict(self._loans), self._loans_issued

    def restore(self, state: LoanStoreState) -> None:
        loans, issued = state
        self._loans = dict(loans)
        self._loans_issued = issued

    def clear(self) -> None:
        self._loans = {}
        self._loans_issued = 0


class InMemoryUserLoanIndex(UserLoanIndexRepository):
    """Bounded, ordered set of active loan ids per borrower."""

    def __init__(self, max_loans_per_user: int = MAX_ACTIVE_LOANS_PER_USER) -> None:
        if max_loans_per_user <= 0:
            raise ValueError("max_loans_per_user must be > 0")
        self._max_loans_per_user = max_loans_per_user
        self._entries: Dict[str, List[int]] = {}

    @property
    def max_loans_per_user(self) -> int:
        return self._max_loans_per_user

    def get_loans(self, borrower: str) -> List[int]:
        return list(self._entries.get(borrower, []))

    def is_full(self, borrower: str) -> bool:
        return len(self._entries.get(borrower, [])) >= self._max_loans_per_user

    def add(self, borrower: str, loan_id: int) -> None:
        entry = self._entries.get(borrower, [])
        if loan_id in entry:
            raise ModelValidationError(
                "Loan {0} already indexed for borrower {1}".format(loan_id, borrower)
            )
        if len(entry) >= self._max_loans_per_user:
            raise TooManyActiveLoansError(
                "Borrower {0} already holds {1} active loans".format(borrower, len(entry))
            )
        self._entries[borrower] = entry + [loan_id]

    def remove(self, borrower: str, loan_id: int) -> bool:
        entry = self._entries.get(borrower, [])
        if loan_id not in entry:
            return False
        remaining = [existing for existing in entry if existing != loan_id]
        if remaining:
            self._entries[borrower] = remaining
        else:
            del self._entries[borrower]
        return True

    def snapshot(self) -> Dict[str, List[int]]:
        # Entries are rebuilt on every change, so sharing the lists is safe.
        return dict(self._entries)

    def restore(self, state: Dict[str, List[int]]) -> None:
        self._entries = dict(state)

    def clear(self) -> None:
        self._entries = {}


class InMemoryLiquidationLogRepository(LiquidationLogRepository):
    """Append-only liquidation audit trail."""

    def __init__(self) -> None:
        self._logs: List[LiquidationLogModel] = []

    def next_log_id(self) -> int:
        return len(self._logs) + 1

    def create(self, model: LiquidationLogModel) -> LiquidationLogModel:
        self._logs = self._logs + [model.model_copy(deep=True)]
        return model.model_copy(deep=True)

    def get_by_loan_id(self, loan_id: int) -> List[LiquidationLogModel]:
        return [log.model_copy(deep=True) for log in self._logs if log.loan_id == loan_id]

    def snapshot(self) -> List[LiquidationLogModel]:
        return self._logs

    def restore(self, state: List[LiquidationLogModel]) -> None:
        self._logs = state

    def clear(self) -> None:
        self._logs = []
