"""Unit tests for immo_engine.domain.calculator.expenses module."""

import pytest

from immo_engine.domain.calculator.coverage import interest_for_year
from immo_engine.domain.calculator.expenses import (
    ExpenseProjection,
    deductible_expenses,
    full_year_revenue,
    non_deductible_expenses,
    project_yearly_expenses,
    recognized_revenue,
)
from immo_engine.domain.models.property import YearlyExpenseRecord
from immo_engine.domain.models.tax import RentalType


class TestRevenueRecognition:
    """Revenue depends on the letting mode."""

    def test_unfurnished_counts_rent_benefit_and_charges(self):
        record = YearlyExpenseRecord(year=2024, rent=10_000, furnished_rent=14_000, tenant_charges=500, tax_benefit=300)
        assert full_year_revenue(record, RentalType.UNFURNISHED) == 10_800

    def test_furnished_counts_furnished_rent_and_charges(self):
        record = YearlyExpenseRecord(year=2024, rent=10_000, furnished_rent=14_000, tenant_charges=500, tax_benefit=300)
        assert full_year_revenue(record, RentalType.FURNISHED) == 14_500

    def test_partial_year_scaled(self, partial_year_property):
        revenue = recognized_revenue(partial_year_property, 2024, RentalType.UNFURNISHED)
        assert revenue == pytest.approx(12_000 * 184 / 366)

    def test_vacancy_reduces_revenue(self, property_factory, expenses_factory):
        prop = property_factory(vacancy_rate_pct=10, expenses=expenses_factory(2024, 2033, rent=12_000))
        assert recognized_revenue(prop, 2025, RentalType.UNFURNISHED) == pytest.approx(10_800)

    def test_missing_year_is_zero(self, property_factory):
        assert recognized_revenue(property_factory(), 2025, RentalType.UNFURNISHED) == 0.0


class TestDeductibleExpenses:
    """Shared deductible set: charges, interest and loan insurance."""

    def test_components(self, rented_property):
        expenses = deductible_expenses(rented_property, 2024)
        assert expenses.charges == pytest.approx(2_400)
        assert expenses.interest == pytest.approx(interest_for_year(rented_property, 2024))
        assert expenses.loan_insurance == pytest.approx(720)
        assert expenses.financial == pytest.approx(expenses.interest + 720)
        assert expenses.total == pytest.approx(2_400 + expenses.financial)

    def test_non_deductible_kept_apart(self, rented_property):
        assert non_deductible_expenses(rented_property, 2024) == pytest.approx(100)
        assert deductible_expenses(rented_property, 2024).charges == pytest.approx(2_400)

    def test_deductible_charges_field(self):
        record = YearlyExpenseRecord(
            year=2024,
            property_tax=1,
            condo_fees=2,
            property_insurance=3,
            management_fees=4,
            unpaid_rent_insurance=5,
            repairs=6,
            other_deductible=7,
            other_non_deductible=100,
        )
        assert record.deductible_charges == 28


class TestExpenseProjection:
    """Yearly records derived from a reference year."""

    def test_compounds_forward(self):
        base = YearlyExpenseRecord(year=2024, rent=10_000, property_tax=1_000)
        records = project_yearly_expenses(base, ExpenseProjection(), 2024, 2026)
        assert [r.year for r in records] == [2024, 2025, 2026]
        assert records[0].rent == pytest.approx(10_000)
        assert records[2].rent == pytest.approx(10_000 * 1.02 ** 2)
        assert records[1].property_tax == pytest.approx(1_020)

    def test_discounts_backward(self):
        base = YearlyExpenseRecord(year=2025, rent=10_200)
        records = project_yearly_expenses(base, ExpenseProjection(), 2024, 2025)
        assert records[0].rent == pytest.approx(10_000)

    def test_zero_growth(self):
        base = YearlyExpenseRecord(year=2024, repairs=500)
        projection = ExpenseProjection(repairs_increase_pct=0)
        records = project_yearly_expenses(base, projection, 2024, 2030)
        assert all(r.repairs == 500 for r in records)
