"""Loan data models.

Loan terms are immutable inputs; the amortization schedule is the engine's
month-by-month output for them.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum

import pandas as pd
from pydantic import BaseModel, Field, computed_field


class DeferralType(str, Enum):
    """Loan grace period kind."""

    NONE = "none"
    PARTIAL = "partial"  # interest paid, principal deferred
    TOTAL = "total"  # nothing paid, interest accrues


class LoanTerms(BaseModel):
    """Loan parameters as signed with the bank."""

    principal: float = Field(..., ge=0, description="Borrowed amount in €")
    annual_rate_pct: float = Field(..., ge=0, description="Annual nominal rate %")
    duration_years: int = Field(..., ge=0, description="Loan term in years, deferral included")
    deferral_type: DeferralType = Field(default=DeferralType.NONE, description="Grace period kind")
    deferral_months: int = Field(default=0, ge=0, description="Grace period length in months")
    insurance_rate_pct: float = Field(default=0.0, ge=0, description="Annual insurance rate % of principal")
    disbursement_date: dt.date = Field(..., description="Date of the first schedule row")

    model_config = {
        "frozen": True,
    }

    @computed_field
    @property
    def duration_months(self) -> int:
        """Loan term in months."""
        return self.duration_years * 12

    @computed_field
    @property
    def effective_deferral_months(self) -> int:
        """Deferral months actually applied (0 when there is no deferral)."""
        return 0 if self.deferral_type == DeferralType.NONE else self.deferral_months

    @computed_field
    @property
    def monthly_insurance(self) -> float:
        """Monthly insurance premium, constant over the loan life."""
        if self.principal <= 0:
            return 0.0
        return self.principal * (self.insurance_rate_pct / 100.0) / 12.0


class AmortizationRow(BaseModel):
    """Single month of an amortization schedule."""

    month: int = Field(..., ge=1, description="1-based month index")
    date: dt.date
    principal: float = Field(..., description="Principal repaid this month")
    interest: float = Field(..., description="Interest for this month (accrued only during total deferral)")
    payment: float = Field(..., description="Principal + interest actually paid")
    insurance: float = Field(default=0.0, description="Loan insurance paid this month")
    remaining_balance: float = Field(..., ge=0, description="Balance after this month's payment")
    is_deferred: bool = Field(default=False)

    model_config = {
        "frozen": True,
    }


class AmortizationSchedule(BaseModel):
    """Ordered monthly rows plus the lump of interest accrued during a total deferral."""

    rows: tuple[AmortizationRow, ...] = ()
    deferred_interest: float = Field(default=0.0, ge=0)

    model_config = {
        "frozen": True,
    }

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def rows_for_year(self, year: int) -> list[AmortizationRow]:
        return [r for r in self.rows if r.date.year == year]

    def balance_at(self, on: dt.date, default: float) -> float:
        """Remaining balance after the last payment dated on or before ``on``.

        ``default`` is returned when no payment is due yet (usually the principal).
        """
        balance = default
        for row in self.rows:
            if row.date > on:
                break
            balance = row.remaining_balance
        return balance

    def to_frame(self) -> pd.DataFrame:
        """Tabular view with French column labels, one line per month."""
        return pd.DataFrame(
            [
                {
                    "Mois": r.month,
                    "Date": r.date,
                    "Capital": r.principal,
                    "Intérêts": r.interest,
                    "Mensualité": r.payment,
                    "Assurance": r.insurance,
                    "Capital Restant Dû": r.remaining_balance,
                    "Différé": r.is_deferred,
                }
                for r in self.rows
            ]
        )
