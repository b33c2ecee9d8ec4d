"""Custom exceptions for model, repository, and lifecycle layers."""


class LedgerError(Exception):
    """Base class for ledger failures reported to callers."""

    code = "LEDGER_ERROR"


class ModelError(LedgerError):
    """Base class for model-related failures."""

    code = "MODEL_ERROR"


class ModelValidationError(ModelError):
    """Raised when model data fails custom business validation."""

    code = "MODEL_VALIDATION"


class ModelNotFoundError(ModelError):
    """Raised when a requested record does not exist."""

    code = "NOT_FOUND"


class NotInitializedError(LedgerError):
    """Raised when the platform has not been initialized."""

    code = "NOT_INITIALIZED"


class InvalidAmountError(LedgerError):
    """Raised for zero, negative, or out-of-range numeric input."""

    code = "INVALID_AMOUNT"


class PriceUnavailableError(LedgerError):
    """Raised when no price quote exists for the collateral asset."""

    code = "PRICE_UNAVAILABLE"


class InsufficientCollateralError(LedgerError):
    """Raised when collateral does not cover the minimum collateral ratio."""

    code = "INSUFFICIENT_COLLATERAL"


class LoanNotFoundError(ModelNotFoundError):
    """Raised when a loan id is unknown to the loan store."""

    code = "LOAN_NOT_FOUND"


class LoanNotActiveError(LedgerError):
    """Raised when an operation targets a repaid or liquidated loan."""

    code = "LOAN_NOT_ACTIVE"


class TooManyActiveLoansError(LedgerError):
    """Raised when a borrower's active-loan index is full."""

    code = "TOO_MANY_ACTIVE_LOANS"


class InvalidTimeRangeError(LedgerError):
    """Raised when the current tick precedes the last interest settlement."""

    code = "INVALID_TIME_RANGE"


class DivisionByZeroError(LedgerError):
    """Raised when a ratio or rate computation would divide by zero."""

    code = "DIVISION_BY_ZERO"


class ArithmeticOverflowError(LedgerError):
    """Raised when an intermediate value leaves the unsigned 128-bit range."""

    code = "ARITHMETIC_OVERFLOW"


class PartialRepaymentUnsupportedError(LedgerError):
    """Raised when a payment is below the total owed and partial repayment is off."""

    code = "PARTIAL_REPAYMENT_UNSUPPORTED"


class UnauthorizedPayerError(LedgerError):
    """Raised when the payer is neither the borrower nor an accepted agent."""

    code = "UNAUTHORIZED_PAYER"


class UserIndexMismatchError(LedgerError):
    """Raised when an active loan is missing from its borrower's index."""

    code = "USER_INDEX_MISMATCH"
