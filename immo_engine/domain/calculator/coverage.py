"""Period coverage helpers.

A property held for part of a calendar year only contributes that fraction of
its yearly figures. Revenues and charges are scaled by ``year_coverage``; loan
figures are read from the schedule rows that fall inside the holding period,
which is the same adjustment expressed month by month.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

from immo_engine.domain.calculator.financial import build_amortization_schedule
from immo_engine.domain.models.loan import AmortizationRow
from immo_engine.domain.models.property import Property


@dataclass(frozen=True)
class LoanYear:
    """Loan figures paid within the holding period of one calendar year."""

    payment: float = 0.0
    insurance: float = 0.0
    interest: float = 0.0
    principal: float = 0.0

    @property
    def total(self) -> float:
        """Cash out for the year: payments plus insurance."""
        return self.payment + self.insurance


def year_coverage(prop: Property, year: int) -> float:
    """Fraction of ``year`` during which the property is held, in [0, 1].

    Days are counted inclusively at both ends.
    """
    year_start = dt.date(year, 1, 1)
    year_end = dt.date(year, 12, 31)
    start = max(prop.project_start_date, year_start)
    end = min(prop.project_end_date, year_end)
    if end < start:
        return 0.0

    held_days = (end - start).days + 1
    days_in_year = (year_end - year_start).days + 1
    return min(1.0, max(0.0, held_days / days_in_year))


def adjust_for_coverage(value: float, prop: Property, year: int) -> float:
    """Scale a full-year amount to the held fraction of ``year``."""
    return value * year_coverage(prop, year)


def is_partial_year(prop: Property, year: int) -> bool:
    coverage = year_coverage(prop, year)
    return 0.0 < coverage < 1.0


def _rows_held_in_year(prop: Property, year: int) -> list[AmortizationRow]:
    if prop.loan is None:
        return []
    schedule = build_amortization_schedule(prop.loan)
    return [
        row
        for row in schedule.rows_for_year(year)
        if prop.project_start_date <= row.date <= prop.project_end_date
    ]


def loan_info_for_year(prop: Property, year: int) -> LoanYear:
    """Loan payments and insurance falling in ``year`` and in the holding period.

    Months of a total deferral contribute interest but no payment.
    """
    rows = _rows_held_in_year(prop, year)
    return LoanYear(
        payment=sum(r.payment for r in rows),
        insurance=sum(r.insurance for r in rows),
        interest=sum(r.interest for r in rows),
        principal=sum(r.principal for r in rows),
    )


def interest_for_year(prop: Property, year: int) -> float:
    """Interest of ``year`` within the holding period (accrued deferral interest included)."""
    return sum(r.interest for r in _rows_held_in_year(prop, year))
