"""Revenue recognition and deductible charges.

The deductible set (property charges plus loan interest and insurance) is
shared by the individual real regimes and the corporate consolidation so the
charge list lives in one place.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field

from immo_engine.domain.calculator.coverage import loan_info_for_year, year_coverage
from immo_engine.domain.models.property import Property, YearlyExpenseRecord
from immo_engine.domain.models.tax import RentalType

# Fields of YearlyExpenseRecord grown by ExpenseProjection, paired with their rate field
_PROJECTED_FIELDS = {
    "property_tax": "property_tax_increase_pct",
    "condo_fees": "condo_fees_increase_pct",
    "property_insurance": "property_insurance_increase_pct",
    "management_fees": "management_fees_increase_pct",
    "unpaid_rent_insurance": "unpaid_rent_insurance_increase_pct",
    "repairs": "repairs_increase_pct",
    "other_deductible": "other_deductible_increase_pct",
    "other_non_deductible": "other_non_deductible_increase_pct",
    "rent": "rent_increase_pct",
    "furnished_rent": "furnished_rent_increase_pct",
    "tenant_charges": "tenant_charges_increase_pct",
    "tax_benefit": "tax_benefit_increase_pct",
}


def full_year_revenue(record: YearlyExpenseRecord, rental_type: RentalType) -> float:
    """Gross revenue of a full year for the given letting mode.

    Unfurnished lettings count rent, tax benefit and recharged charges;
    furnished lettings count furnished rent and recharged charges.
    """
    if rental_type == RentalType.FURNISHED:
        return record.furnished_rent + record.tenant_charges
    return record.rent + record.tax_benefit + record.tenant_charges


def recognized_revenue(prop: Property, year: int, rental_type: RentalType) -> float:
    """Coverage-adjusted revenue of ``year``, net of vacancy."""
    gross = full_year_revenue(prop.expenses_for_year(year), rental_type)
    return gross * year_coverage(prop, year) * (1.0 - prop.vacancy_rate_pct / 100.0)


@dataclass(frozen=True)
class DeductibleExpenses:
    """Coverage-adjusted deductible charges of one property for one year."""

    charges: float = 0.0
    interest: float = 0.0
    loan_insurance: float = 0.0

    @property
    def financial(self) -> float:
        """Financial charges, which escape the foncier deficit ceiling."""
        return self.interest + self.loan_insurance

    @property
    def total(self) -> float:
        return self.charges + self.financial


def deductible_expenses(prop: Property, year: int) -> DeductibleExpenses:
    """Deductible charges, loan interest and loan insurance for ``year``.

    Principal repayments are never deductible.
    """
    record = prop.expenses_for_year(year)
    loan = loan_info_for_year(prop, year)
    return DeductibleExpenses(
        charges=record.deductible_charges * year_coverage(prop, year),
        interest=loan.interest,
        loan_insurance=loan.insurance,
    )


def non_deductible_expenses(prop: Property, year: int) -> float:
    return prop.expenses_for_year(year).other_non_deductible * year_coverage(prop, year)


class ExpenseProjection(BaseModel):
    """Annual growth rates (%) used to derive yearly records from a reference year."""

    property_tax_increase_pct: float = Field(default=2.0, gt=-100)
    condo_fees_increase_pct: float = Field(default=2.0, gt=-100)
    property_insurance_increase_pct: float = Field(default=1.0, gt=-100)
    management_fees_increase_pct: float = Field(default=1.0, gt=-100)
    unpaid_rent_insurance_increase_pct: float = Field(default=1.0, gt=-100)
    repairs_increase_pct: float = Field(default=2.0, gt=-100)
    other_deductible_increase_pct: float = Field(default=1.0, gt=-100)
    other_non_deductible_increase_pct: float = Field(default=1.0, gt=-100)
    rent_increase_pct: float = Field(default=2.0, gt=-100)
    furnished_rent_increase_pct: float = Field(default=2.0, gt=-100)
    tenant_charges_increase_pct: float = Field(default=2.0, gt=-100)
    tax_benefit_increase_pct: float = Field(default=1.0, gt=-100)


def project_yearly_expenses(
    base: YearlyExpenseRecord,
    projection: ExpenseProjection,
    start_year: int,
    end_year: int,
) -> list[YearlyExpenseRecord]:
    """Derive one record per year of [start_year, end_year] from a reference record.

    ``base.year`` is the reference year; later years compound each field by its
    growth rate and earlier years discount it by the same rate.

    Args:
        base: Record holding the reference-year amounts
        projection: Per-field growth rates
        start_year: First year to produce
        end_year: Last year to produce (inclusive)

    Returns:
        Records sorted by year
    """
    records = []
    for year in range(start_year, end_year + 1):
        offset = year - base.year
        values = {
            field: getattr(base, field) * (1.0 + getattr(projection, rate) / 100.0) ** offset
            for field, rate in _PROJECTED_FIELDS.items()
        }
        records.append(YearlyExpenseRecord(year=year, **values))
    return records
