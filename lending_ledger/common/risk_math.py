"""Canonical risk math for collateral ratios and interest accrual.

All arithmetic is integer-only. Python integers never wrap, so every
intermediate is checked against the unsigned 128-bit range the ledger
amounts are specified in; leaving that range fails the call instead of
producing a silently huge number.

Ratios are always computed multiply-then-divide:

    ratio = floor(collateral * price * 100 / (loan * collateral_scale))

The same helper backs both the opening check and the liquidation check,
so both round identically.
"""

from __future__ import annotations

from ..models.base import UINT128_MAX
from ..models.exceptions import (
    ArithmeticOverflowError,
    DivisionByZeroError,
    InvalidAmountError,
    InvalidTimeRangeError,
)

# ---------------------------------------------------------------------------
# Scaling factors
# ---------------------------------------------------------------------------
PERCENT_SCALE: int = 100
TICKS_PER_DAY: int = 144          # one tick ~ 10 minutes
SECONDS_PER_TICK: int = 600

# ---------------------------------------------------------------------------
# Reference risk parameters  (percentage, NOT basis-points)
# ---------------------------------------------------------------------------
MINIMUM_COLLATERAL_RATIO_PERCENT: int = 150
LIQUIDATION_THRESHOLD_PERCENT: int = 120
DEFAULT_INTEREST_RATE_PERCENT: int = 5
MAX_ACTIVE_LOANS_PER_USER: int = 10


# ---------------------------------------------------------------------------
# Range guards
# ---------------------------------------------------------------------------

def _require_non_negative(name: str, value: int) -> None:
    if value < 0:
        raise InvalidAmountError("{0} must be >= 0, got {1}".format(name, value))
    if value > UINT128_MAX:
        raise InvalidAmountError("{0} exceeds the unsigned 128-bit range".format(name))


def checked(value: int, label: str = "intermediate") -> int:
    """Return *value* unchanged, failing if it left the unsigned 128-bit range."""
    if value > UINT128_MAX:
        raise ArithmeticOverflowError("{0} overflows 128 bits".format(label))
    return value


# ---------------------------------------------------------------------------
# Collateral ratio
# ---------------------------------------------------------------------------

def collateral_value(collateral_amount: int, unit_price: int) -> int:
    """Collateral amount times unit price, overflow-checked."""
    _require_non_negative("collateral_amount", collateral_amount)
    _require_non_negative("unit_price", unit_price)
    return checked(collateral_amount * unit_price, "collateral_value")


def collateral_ratio(
    collateral_amount: int,
    loan_amount: int,
    unit_price: int,
    collateral_scale: int = 1,
) -> int:
    """Integer collateral ratio in percent (150 means 150%).

    Example (8-decimal collateral, 6-decimal price and loan):
        1 BTC = 100_000_000 sats at $50,000 against a $25,000 loan
        collateral_ratio(100_000_000, 25_000_000_000, 50_000_000_000, 10**8) -> 200

    Raises:
        DivisionByZeroError: If *loan_amount* or *collateral_scale* is zero.
        InvalidAmountError: If any input is negative.
        ArithmeticOverflowError: If an intermediate exceeds 128 bits.
    """
    _require_non_negative("loan_amount", loan_amount)
    _require_non_negative("collateral_scale", collateral_scale)
    if loan_amount == 0:
        raise DivisionByZeroError("loan_amount must be nonzero to compute a collateral ratio")
    if collateral_scale == 0:
        raise DivisionByZeroError("collateral_scale must be nonzero")

    numerator = checked(collateral_value(collateral_amount, unit_price) * PERCENT_SCALE, "ratio numerator")
    denominator = checked(loan_amount * collateral_scale, "ratio denominator")
    return numerator // denominator


def is_sufficiently_collateralized(
    collateral_amount: int,
    loan_amount: int,
    unit_price: int,
    minimum_ratio_percent: int,
    collateral_scale: int = 1,
) -> bool:
    """Return *True* when the ratio meets or exceeds the minimum."""
    ratio = collateral_ratio(collateral_amount, loan_amount, unit_price, collateral_scale)
    return ratio >= minimum_ratio_percent


def is_liquidatable(ratio_percent: int, liquidation_threshold_percent: int) -> bool:
    """Return *True* when a position can be liquidated (ratio at or below threshold)."""
    return ratio_percent <= liquidation_threshold_percent


def max_loan_amount(
    collateral_amount: int,
    unit_price: int,
    minimum_ratio_percent: int,
    collateral_scale: int = 1,
) -> int:
    """Largest loan amount that still satisfies the minimum ratio."""
    _require_non_negative("collateral_scale", collateral_scale)
    if minimum_ratio_percent <= 0 or collateral_scale == 0:
        raise DivisionByZeroError("minimum ratio and collateral scale must be positive")
    numerator = checked(collateral_value(collateral_amount, unit_price) * PERCENT_SCALE, "max loan numerator")
    return numerator // checked(minimum_ratio_percent * collateral_scale, "max loan denominator")


def liquidation_price(
    collateral_amount: int,
    outstanding: int,
    liquidation_threshold_percent: int,
    collateral_scale: int = 1,
) -> int:
    """Highest unit price at which the position is liquidatable.

    Derivation from the ratio formula:
        threshold >= floor(c * p * 100 / (debt * scale))
        <=> c * p * 100 < (threshold + 1) * debt * scale
        p_max = ceil((threshold + 1) * debt * scale / (c * 100)) - 1
    """
    _require_non_negative("outstanding", outstanding)
    _require_non_negative("collateral_amount", collateral_amount)
    if collateral_amount == 0:
        raise DivisionByZeroError("collateral_amount must be nonzero")
    bound = checked((liquidation_threshold_percent + 1) * outstanding * collateral_scale, "liquidation bound")
    divisor = collateral_amount * PERCENT_SCALE
    return -(-bound // divisor) - 1


# ---------------------------------------------------------------------------
# Interest accrual
# ---------------------------------------------------------------------------

def elapsed_ticks(current_tick: int, last_settlement: int) -> int:
    """Ticks since the last settlement; a clock that runs backwards is a caller bug."""
    if current_tick < last_settlement:
        raise InvalidTimeRangeError(
            "current tick {0} precedes last settlement {1}".format(current_tick, last_settlement)
        )
    return current_tick - last_settlement


def accrued_interest(
    principal: int,
    annual_rate_percent: int,
    elapsed: int,
    ticks_per_day: int = TICKS_PER_DAY,
) -> int:
    """Simple interest for *elapsed* ticks.

        interest = floor(principal * rate / (100 * ticks_per_day)) * elapsed

    Known rounding bias: the per-tick amount is truncated before it is
    multiplied by the elapsed ticks, so short periods and small principals
    under-accrue. Kept as-is so historical amounts stay reproducible.

    Raises:
        InvalidTimeRangeError: If *elapsed* is negative.
        DivisionByZeroError: If *ticks_per_day* is zero.
        InvalidAmountError: If principal or rate is negative.
    """
    if elapsed < 0:
        raise InvalidTimeRangeError("elapsed ticks must be >= 0, got {0}".format(elapsed))
    _require_non_negative("principal", principal)
    _require_non_negative("annual_rate_percent", annual_rate_percent)
    _require_non_negative("ticks_per_day", ticks_per_day)
    if ticks_per_day == 0:
        raise DivisionByZeroError("ticks_per_day must be nonzero")

    per_tick = checked(principal * annual_rate_percent, "interest numerator") // (PERCENT_SCALE * ticks_per_day)
    return checked(per_tick * elapsed, "accrued interest")
