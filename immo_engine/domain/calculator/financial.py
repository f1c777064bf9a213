"""Financial calculation functions.

Loan payment and amortization schedule calculations, deferral included.
"""

from __future__ import annotations

import datetime as dt
from functools import lru_cache

import numpy_financial as npf
from dateutil.relativedelta import relativedelta

from immo_engine.core.exceptions import AmortizationError, InvalidParameterError
from immo_engine.core.logging import get_logger
from immo_engine.core.tax_constants import BALANCE_EPSILON
from immo_engine.domain.models.loan import (
    AmortizationRow,
    AmortizationSchedule,
    DeferralType,
    LoanTerms,
)

log = get_logger(__name__)


def calculate_monthly_payment(
    principal: float,
    annual_rate_pct: float,
    duration_months: int,
) -> float:
    """Calculate monthly loan payment (principal + interest only).

    Args:
        principal: Loan amount in €
        annual_rate_pct: Annual interest rate as percentage (e.g., 3.5 for 3.5%)
        duration_months: Number of amortizing months

    Returns:
        Monthly payment amount in €
    """
    if principal <= 0 or duration_months <= 0:
        return 0.0

    monthly_rate = (annual_rate_pct / 100.0) / 12.0

    if monthly_rate <= 0:
        return principal / duration_months

    return float(-npf.pmt(monthly_rate, duration_months, principal))


def calculate_insurance(
    principal: float,
    annual_insurance_pct: float,
) -> float:
    """Calculate monthly insurance premium.

    Args:
        principal: Initial loan amount in €
        annual_insurance_pct: Annual insurance rate as percentage

    Returns:
        Monthly insurance amount in €
    """
    if principal <= 0:
        return 0.0
    return (principal * (annual_insurance_pct / 100.0)) / 12.0


@lru_cache(maxsize=256)
def build_amortization_schedule(terms: LoanTerms) -> AmortizationSchedule:
    """Generate the month-by-month schedule of a loan.

    One row per month of the term, deferral months included. During a partial
    deferral the borrower pays interest on the full principal. During a total
    deferral nothing is paid; the interest accrued is summed into
    ``deferred_interest`` and never added to the principal. Amortization then
    runs on the original principal over the remaining months.

    Args:
        terms: Loan terms

    Returns:
        AmortizationSchedule, empty when principal or duration is zero

    Raises:
        InvalidParameterError: If the deferral is not shorter than the term.
        AmortizationError: If the schedule does not close on a zero balance.
    """
    n_months = terms.duration_months
    if terms.principal <= 0 or n_months <= 0:
        return AmortizationSchedule()

    deferral = terms.effective_deferral_months
    if deferral >= n_months:
        raise InvalidParameterError(
            "deferral_months",
            terms.deferral_months,
            f"must be shorter than the loan term ({n_months} months)",
        )

    monthly_rate = (terms.annual_rate_pct / 100.0) / 12.0
    payment = calculate_monthly_payment(terms.principal, terms.annual_rate_pct, n_months - deferral)
    insurance = terms.monthly_insurance

    rows: list[AmortizationRow] = []
    balance = terms.principal
    deferred_interest = 0.0

    for index in range(n_months):
        month = index + 1
        row_date = terms.disbursement_date + relativedelta(months=index)
        interest = balance * monthly_rate

        if index < deferral:
            if terms.deferral_type == DeferralType.TOTAL:
                deferred_interest += interest
                paid = 0.0
            else:
                paid = interest
            rows.append(
                AmortizationRow(
                    month=month,
                    date=row_date,
                    principal=0.0,
                    interest=interest,
                    payment=paid,
                    insurance=insurance,
                    remaining_balance=balance,
                    is_deferred=True,
                )
            )
            continue

        # Last month repays whatever is left so the schedule closes at zero
        principal_part = balance if month == n_months else payment - interest
        balance = max(0.0, balance - principal_part)

        rows.append(
            AmortizationRow(
                month=month,
                date=row_date,
                principal=principal_part,
                interest=interest,
                payment=principal_part + interest,
                insurance=insurance,
                remaining_balance=balance,
            )
        )

    if rows[-1].remaining_balance > BALANCE_EPSILON:
        raise AmortizationError(f"Schedule closes with a balance of {rows[-1].remaining_balance:.2f}")

    log.debug(
        "amortization_schedule_built",
        months=n_months,
        deferral_type=terms.deferral_type.value,
        deferral_months=deferral,
        payment=round(payment, 2),
        deferred_interest=round(deferred_interest, 2),
    )
    return AmortizationSchedule(rows=tuple(rows), deferred_interest=deferred_interest)


def remaining_balance_at(terms: LoanTerms | None, on: dt.date) -> float:
    """Outstanding principal after the last payment dated on or before ``on``.

    Before the first payment the full principal is still owed. A cash purchase
    (no loan) owes nothing.
    """
    if terms is None:
        return 0.0
    schedule = build_amortization_schedule(terms)
    if schedule.is_empty:
        return 0.0
    return schedule.balance_at(on, default=terms.principal)


def total_interest(schedule: AmortizationSchedule) -> float:
    """Interest over the life of the loan, deferred interest included."""
    return sum(row.interest for row in schedule.rows)
