"""Loan lifecycle orchestration: open, settle, liquidate, repay.

Each public operation runs as one `LedgerState` transaction, so a failure at
any step leaves the loan store, the user index, and the liquidation log
exactly as they were before the call.
"""

import logging
from typing import Callable, Iterable, List, Optional

from ..common.risk_math import (
    accrued_interest,
    checked,
    collateral_ratio,
    elapsed_ticks,
    is_liquidatable,
    max_loan_amount,
)
from ..models.base import UINT128_MAX
from ..models.enums import LiquidationOutcome, LoanStatus
from ..models.exceptions import (
    InsufficientCollateralError,
    InvalidAmountError,
    InvalidTimeRangeError,
    ModelValidationError,
    NotInitializedError,
    PartialRepaymentUnsupportedError,
    PriceUnavailableError,
    TooManyActiveLoansError,
    UnauthorizedPayerError,
    UserIndexMismatchError,
)
from ..models.liquidation_logs import LiquidationLogModel
from ..models.loans import LoanModel
from ..models.outcomes import LoanQuote, PlatformStats, RepaymentOutcome
from ..models.parameters import RiskParameters
from ..repositories.ledger_state import LedgerState
from .price_oracle import PriceOracle


logger = logging.getLogger(__name__)

AgentPolicy = Callable[[str, str], bool]


def agent_allowlist(agents: Iterable[str]) -> AgentPolicy:
    """Build a payer policy accepting any payer in *agents* for every borrower."""
    allowed = frozenset(agent.strip() for agent in agents if agent and agent.strip())

    def _policy(payer: str, borrower: str) -> bool:
        return payer in allowed

    return _policy


def _require_amount(name: str, value: int) -> int:
    """Reject non-integers, zero, negatives, and values beyond 128 bits."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmountError("{0} must be an integer".format(name))
    if value <= 0:
        raise InvalidAmountError("{0} must be > 0, got {1}".format(name, value))
    if value > UINT128_MAX:
        raise InvalidAmountError("{0} exceeds the unsigned 128-bit range".format(name))
    return value


def _require_tick(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidTimeRangeError("tick must be an integer")
    if value < 0:
        raise InvalidTimeRangeError("tick must be >= 0, got {0}".format(value))
    return value


class LifecycleManager:
    """Issue, accrue, liquidate, and close collateralized loans."""

    def __init__(
        self,
        state: LedgerState,
        oracle: PriceOracle,
        parameters: Optional[RiskParameters] = None,
        agent_policy: Optional[AgentPolicy] = None,
    ) -> None:
        self._state = state
        self._oracle = oracle
        self._parameters = parameters or RiskParameters()
        self._agent_policy = agent_policy

    @property
    def parameters(self) -> RiskParameters:
        return self._parameters

    def apply_parameters(self, parameters: RiskParameters) -> None:
        """Swap in a new parameter snapshot between transactions."""
        with self._state.read():
            self._parameters = parameters
        logger.info(
            "Risk parameters applied initialized=%s min_ratio=%s liquidation_threshold=%s",
            parameters.platform_initialized,
            parameters.minimum_collateral_ratio_percent,
            parameters.liquidation_threshold_percent,
        )

    # ------------------------------------------------------------------
    # Loan request
    # ------------------------------------------------------------------

    def open_loan(
        self,
        borrower: str,
        collateral_amount: int,
        loan_amount: int,
        current_tick: int,
        interest_rate: Optional[int] = None,
    ) -> int:
        """Open a loan against deposited collateral and return its id.

        Raises:
            NotInitializedError: If the platform is not initialized.
            InvalidAmountError: If an amount is zero or out of range, or the
                tick is negative.
            PriceUnavailableError: If the collateral asset has no quote.
            InsufficientCollateralError: If the ratio is below the minimum.
            TooManyActiveLoansError: If the borrower's index is full.
        """
        params = self._parameters
        if not params.platform_initialized:
            raise NotInitializedError("Platform is not initialized")
        if not isinstance(borrower, str) or not borrower.strip():
            raise ModelValidationError("borrower must be a non-empty account identifier")
        borrower = borrower.strip()
        _require_amount("collateral_amount", collateral_amount)
        _require_amount("loan_amount", loan_amount)
        if isinstance(current_tick, bool) or not isinstance(current_tick, int) or current_tick < 0:
            raise InvalidAmountError("current_tick must be a non-negative integer")
        rate = params.default_interest_rate_percent if interest_rate is None else interest_rate
        if isinstance(rate, bool) or not isinstance(rate, int) or rate < 0:
            raise InvalidAmountError("interest_rate must be a non-negative integer")

        with self._state.transaction() as state:
            unit_price = self._require_price(params.collateral_asset)
            ratio = collateral_ratio(collateral_amount, loan_amount, unit_price, params.collateral_scale)
            if ratio < params.minimum_collateral_ratio_percent:
                logger.warning(
                    "Loan rejected borrower=%s ratio=%s minimum=%s",
                    borrower,
                    ratio,
                    params.minimum_collateral_ratio_percent,
                )
                raise InsufficientCollateralError(
                    "Collateral ratio {0}% is below the {1}% minimum".format(
                        ratio, params.minimum_collateral_ratio_percent
                    )
                )
            if state.user_index.is_full(borrower):
                logger.warning("Loan rejected borrower=%s reason=index_full", borrower)
                raise TooManyActiveLoansError(
                    "Borrower {0} has reached the active loan limit".format(borrower)
                )

            loan_id = state.loans.allocate_loan_id()
            loan = LoanModel(
                loan_id=loan_id,
                borrower=borrower,
                collateral_asset=params.collateral_asset,
                collateral_amount=collateral_amount,
                loan_amount=loan_amount,
                interest_rate=rate,
                start_height=current_tick,
                last_interest_settlement=current_tick,
            )
            state.loans.create(loan)
            state.user_index.add(loan.borrower, loan_id)

        logger.info(
            "Loan opened loan_id=%s borrower=%s collateral=%s amount=%s ratio=%s tick=%s",
            loan_id,
            borrower,
            collateral_amount,
            loan_amount,
            ratio,
            current_tick,
        )
        return loan_id

    # ------------------------------------------------------------------
    # Interest settlement
    # ------------------------------------------------------------------

    def settle_interest(self, loan_id: int, current_tick: int) -> int:
        """Accrue interest up to *current_tick* and return principal plus interest owed."""
        with self._state.transaction() as state:
            loan = state.loans.get_by_id(loan_id)
            loan.ensure_active()
            self._settle(state, loan, current_tick)
            return loan.total_owed

    def _settle(self, state: LedgerState, loan: LoanModel, current_tick: int) -> int:
        """Settle *loan* in place and persist it. Returns the interest added."""
        elapsed = elapsed_ticks(_require_tick(current_tick), loan.last_interest_settlement)
        if elapsed == 0:
            return 0
        interest = accrued_interest(
            loan.loan_amount,
            loan.interest_rate,
            elapsed,
            self._parameters.ticks_per_day,
        )
        loan.accrued_interest = checked(loan.accrued_interest + interest, "accrued_interest")
        checked(loan.total_owed, "total_owed")
        loan.last_interest_settlement = current_tick
        state.loans.update(loan)
        logger.debug(
            "Interest settled loan_id=%s elapsed=%s interest=%s total_interest=%s",
            loan.loan_id,
            elapsed,
            interest,
            loan.accrued_interest,
        )
        return interest

    # ------------------------------------------------------------------
    # Liquidation
    # ------------------------------------------------------------------

    def evaluate_liquidation(self, loan_id: int, current_tick: Optional[int] = None) -> LiquidationOutcome:
        """Liquidate the whole position if its ratio is at or below the threshold.

        When *current_tick* is given, interest is settled first inside the
        same transaction so the check sees the up-to-date debt.
        """
        params = self._parameters
        with self._state.transaction() as state:
            loan = state.loans.get_by_id(loan_id)
            loan.ensure_active()
            if current_tick is not None:
                self._settle(state, loan, current_tick)

            unit_price = self._require_price(loan.collateral_asset)
            outstanding = loan.total_owed
            ratio = collateral_ratio(loan.collateral_amount, outstanding, unit_price, params.collateral_scale)
            if not is_liquidatable(ratio, params.liquidation_threshold_percent):
                logger.debug("Loan healthy loan_id=%s ratio=%s", loan_id, ratio)
                return LiquidationOutcome.UNAFFECTED

            loan.close(LoanStatus.LIQUIDATED, current_tick)
            state.loans.update(loan)
            self._unindex(state, loan)
            state.liquidation_logs.create(
                LiquidationLogModel(
                    log_id=state.liquidation_logs.next_log_id(),
                    loan_id=loan_id,
                    borrower=loan.borrower,
                    triggered_height=current_tick,
                    unit_price=unit_price,
                    collateral_ratio_percent=ratio,
                    liquidation_threshold_percent=params.liquidation_threshold_percent,
                    outstanding_amount=outstanding,
                    collateral_seized=loan.collateral_amount,
                )
            )

        logger.warning(
            "Loan liquidated loan_id=%s borrower=%s ratio=%s threshold=%s price=%s",
            loan_id,
            loan.borrower,
            ratio,
            params.liquidation_threshold_percent,
            unit_price,
        )
        return LiquidationOutcome.LIQUIDATED

    # ------------------------------------------------------------------
    # Repayment
    # ------------------------------------------------------------------

    def repay_loan(self, loan_id: int, payer: str, amount_paid: int, current_tick: int) -> RepaymentOutcome:
        """Settle interest to *current_tick* and apply a payment.

        Raises:
            LoanNotFoundError: If the loan is unknown.
            LoanNotActiveError: If the loan is already closed.
            UnauthorizedPayerError: If *payer* may not repay this loan.
            PartialRepaymentUnsupportedError: If the payment is short and
                partial repayment is disabled.
        """
        _require_amount("amount_paid", amount_paid)
        params = self._parameters
        with self._state.transaction() as state:
            loan = state.loans.get_by_id(loan_id)
            loan.ensure_active()
            self._authorize_payer(payer, loan)
            self._settle(state, loan, current_tick)

            total_owed = loan.total_owed
            if amount_paid >= total_owed:
                outcome = RepaymentOutcome(
                    loan_id=loan_id,
                    status=LoanStatus.REPAID,
                    amount_paid=amount_paid,
                    interest_paid=loan.accrued_interest,
                    principal_paid=loan.loan_amount,
                    remaining_owed=0,
                    change=amount_paid - total_owed,
                )
                loan.repaid_amount = loan.repaid_amount + total_owed
                loan.close(LoanStatus.REPAID, current_tick)
                state.loans.update(loan)
                self._unindex(state, loan)
                logger.info("Loan repaid loan_id=%s payer=%s total=%s", loan_id, payer, total_owed)
                return outcome

            if not params.allow_partial_repayment:
                raise PartialRepaymentUnsupportedError(
                    "Payment {0} is below the {1} owed on loan {2}".format(amount_paid, total_owed, loan_id)
                )

            interest_paid = min(amount_paid, loan.accrued_interest)
            principal_paid = amount_paid - interest_paid
            loan.accrued_interest = loan.accrued_interest - interest_paid
            loan.loan_amount = loan.loan_amount - principal_paid
            loan.repaid_amount = loan.repaid_amount + amount_paid
            state.loans.update(loan)
            logger.info(
                "Partial repayment loan_id=%s payer=%s paid=%s remaining=%s",
                loan_id,
                payer,
                amount_paid,
                loan.total_owed,
            )
            return RepaymentOutcome(
                loan_id=loan_id,
                status=LoanStatus.ACTIVE,
                amount_paid=amount_paid,
                interest_paid=interest_paid,
                principal_paid=principal_paid,
                remaining_owed=loan.total_owed,
            )

    def _unindex(self, state: LedgerState, loan: LoanModel) -> None:
        if not state.user_index.remove(loan.borrower, loan.loan_id):
            logger.error("Active loan missing from user index loan_id=%s borrower=%s", loan.loan_id, loan.borrower)
            raise UserIndexMismatchError(
                "Loan {0} is not indexed under borrower {1}".format(loan.loan_id, loan.borrower)
            )

    def _authorize_payer(self, payer: str, loan: LoanModel) -> None:
        if isinstance(payer, str):
            payer = payer.strip()
        if payer == loan.borrower:
            return
        if self._agent_policy is not None and self._agent_policy(payer, loan.borrower):
            logger.info("Agent repayment accepted loan_id=%s agent=%s", loan.loan_id, payer)
            return
        raise UnauthorizedPayerError(
            "Payer {0} may not repay loan {1}".format(payer, loan.loan_id)
        )

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def get_loan(self, loan_id: int) -> LoanModel:
        with self._state.read() as state:
            return state.loans.get_by_id(loan_id)

    def get_user_loans(self, borrower: str) -> List[int]:
        if isinstance(borrower, str):
            borrower = borrower.strip()
        with self._state.read() as state:
            return state.user_index.get_loans(borrower)

    def list_active_loan_ids(self) -> List[int]:
        with self._state.read() as state:
            return [loan.loan_id for loan in state.loans.list_active()]

    def get_liquidation_logs(self, loan_id: int) -> List[LiquidationLogModel]:
        with self._state.read() as state:
            return state.liquidation_logs.get_by_loan_id(loan_id)

    def get_platform_stats(self) -> PlatformStats:
        with self._state.read() as state:
            active = state.loans.list_active()
            return PlatformStats(
                loans_issued=state.loans.loans_issued,
                active_loans=len(active),
                total_active_principal=sum(loan.loan_amount for loan in active),
                total_active_interest=sum(loan.accrued_interest for loan in active),
                total_active_collateral=sum(loan.collateral_amount for loan in active),
            )

    def quote_loan(self, collateral_amount: int, loan_amount: int) -> LoanQuote:
        """Preview the ratio and borrowing headroom at the current price."""
        _require_amount("collateral_amount", collateral_amount)
        _require_amount("loan_amount", loan_amount)
        params = self._parameters
        unit_price = self._require_price(params.collateral_asset)
        ratio = collateral_ratio(collateral_amount, loan_amount, unit_price, params.collateral_scale)
        return LoanQuote(
            collateral_amount=collateral_amount,
            loan_amount=loan_amount,
            unit_price=unit_price,
            collateral_ratio_percent=ratio,
            minimum_collateral_ratio_percent=params.minimum_collateral_ratio_percent,
            max_loan_amount=max_loan_amount(
                collateral_amount,
                unit_price,
                params.minimum_collateral_ratio_percent,
                params.collateral_scale,
            ),
            eligible=ratio >= params.minimum_collateral_ratio_percent,
        )

    def _require_price(self, asset: str) -> int:
        price = self._oracle.get_price(asset)
        if price is None:
            logger.warning("No price quote for asset=%s", asset)
            raise PriceUnavailableError("No price quote for {0}".format(asset))
        if price < 0:
            raise InvalidAmountError("Oracle returned a negative price for {0}".format(asset))
        return price
