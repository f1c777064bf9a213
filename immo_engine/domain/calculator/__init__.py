"""Pure calculators: amortization, coverage, regimes and capital gains."""

from .capital_gains import capital_gains_tax, income_tax_discount, social_discount
from .coverage import adjust_for_coverage, interest_for_year, loan_info_for_year, year_coverage
from .expenses import ExpenseProjection, project_yearly_expenses
from .financial import build_amortization_schedule, calculate_insurance, calculate_monthly_payment
from .regimes import (
    accumulated_depreciation,
    all_gross_yields_for_year,
    all_tax_regimes_for_year,
    tax_regimes_across_years,
)

__all__ = [
    "ExpenseProjection",
    "accumulated_depreciation",
    "adjust_for_coverage",
    "all_gross_yields_for_year",
    "all_tax_regimes_for_year",
    "build_amortization_schedule",
    "calculate_insurance",
    "calculate_monthly_payment",
    "capital_gains_tax",
    "income_tax_discount",
    "interest_for_year",
    "loan_info_for_year",
    "project_yearly_expenses",
    "social_discount",
    "tax_regimes_across_years",
    "year_coverage",
]
