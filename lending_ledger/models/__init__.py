"""Public model package exports for the lending ledger."""

from .base import UINT64_MAX, UINT128_MAX, Amount, BaseLedgerModel, Percent, Tick
from .enums import LiquidationOutcome, LoanStatus
from .exceptions import (
    ArithmeticOverflowError,
    DivisionByZeroError,
    InsufficientCollateralError,
    InvalidAmountError,
    InvalidTimeRangeError,
    LedgerError,
    LoanNotActiveError,
    LoanNotFoundError,
    ModelError,
    ModelNotFoundError,
    ModelValidationError,
    NotInitializedError,
    PartialRepaymentUnsupportedError,
    PriceUnavailableError,
    TooManyActiveLoansError,
    UnauthorizedPayerError,
    UserIndexMismatchError,
)
from .liquidation_logs import LiquidationLogModel
from .loans import LoanModel
from .outcomes import LiquidationScanSummary, LoanQuote, PlatformStats, RepaymentOutcome
from .parameters import RiskParameters
from .repositories import LiquidationLogRepository, LoanRepository, UserLoanIndexRepository

__all__ = [
    "Amount",
    "BaseLedgerModel",
    "Percent",
    "Tick",
    "UINT64_MAX",
    "UINT128_MAX",
    "LoanModel",
    "LiquidationLogModel",
    "RiskParameters",
    "RepaymentOutcome",
    "LoanQuote",
    "PlatformStats",
    "LiquidationScanSummary",
    "LoanStatus",
    "LiquidationOutcome",
    "LedgerError",
    "ModelError",
    "ModelValidationError",
    "ModelNotFoundError",
    "NotInitializedError",
    "InvalidAmountError",
    "PriceUnavailableError",
    "InsufficientCollateralError",
    "LoanNotFoundError",
    "LoanNotActiveError",
    "TooManyActiveLoansError",
    "InvalidTimeRangeError",
    "DivisionByZeroError",
    "ArithmeticOverflowError",
    "PartialRepaymentUnsupportedError",
    "UnauthorizedPayerError",
    "UserIndexMismatchError",
    "LoanRepository",
    "UserLoanIndexRepository",
    "LiquidationLogRepository",
]
