"""Unit tests for immo_engine.domain.models Pydantic models."""

import datetime as dt

import pytest
from pydantic import ValidationError

from immo_engine.domain.calculator.financial import build_amortization_schedule
from immo_engine.domain.models import (
    SCI,
    BalanceYear,
    DeferralType,
    LoanTerms,
    Property,
    RegimeResult,
    TaxRegime,
    YearlyExpenseRecord,
)
from immo_engine.domain.models.tax import AmortizationBreakdown, RentalType


class TestProperty:
    """Tests for Property model."""

    def test_valid_property(self, rented_property):
        assert rented_property.years == range(2024, 2034)
        assert rented_property.start_year == 2024
        assert rented_property.end_year == 2033

    def test_end_before_start(self, property_factory):
        """An end date before the start date is rejected."""
        with pytest.raises(ValidationError, match="before project_start_date"):
            property_factory(project_start_date=dt.date(2025, 1, 1), project_end_date=dt.date(2024, 12, 31))

    def test_duplicate_expense_years(self, property_factory):
        with pytest.raises(ValidationError, match="one record per year"):
            property_factory(expenses=[YearlyExpenseRecord(year=2024), YearlyExpenseRecord(year=2024)])

    def test_negative_amounts_rejected(self, property_factory):
        with pytest.raises(ValidationError):
            property_factory(purchase_price=-1)
        with pytest.raises(ValidationError):
            YearlyExpenseRecord(year=2024, rent=-100)

    def test_missing_required_field(self):
        with pytest.raises(ValidationError):
            Property(id="x", project_start_date=dt.date(2024, 1, 1), project_end_date=dt.date(2025, 1, 1))

    def test_cost_aggregates(self, rented_property):
        assert rented_property.acquisition_fees == 20_000
        assert rented_property.gross_investment == 205_000
        assert rented_property.total_acquisition_cost == 220_000

    def test_initial_equity(self, rented_property, property_factory, standard_loan):
        assert rented_property.initial_equity == 20_000
        assert property_factory().initial_equity == 200_000
        derived = property_factory(notary_fees=15_000, agency_fees=5_000, loan=standard_loan)
        assert derived.initial_equity == 20_000
        over_financed = property_factory(loan=standard_loan.model_copy(update={"principal": 250_000}))
        assert over_financed.initial_equity == 0.0

    def test_sci_value(self, property_factory):
        assert property_factory().sci_value == 200_000
        assert property_factory(sci_property_value=250_000).sci_value == 250_000

    def test_missing_expense_year(self, rented_property):
        record = rented_property.expenses_for_year(2050)
        assert record.year == 2050
        assert record.rent == 0.0


class TestLoanTerms:
    """Tests for LoanTerms and its schedule."""

    def test_computed_fields(self, standard_loan):
        assert standard_loan.duration_months == 240
        assert standard_loan.effective_deferral_months == 0
        assert standard_loan.monthly_insurance == pytest.approx(60)

    def test_deferral_months_ignored_without_deferral(self, standard_loan):
        loan = standard_loan.model_copy(update={"deferral_months": 12})
        assert loan.effective_deferral_months == 0
        partial = standard_loan.model_copy(update={"deferral_months": 12, "deferral_type": DeferralType.PARTIAL})
        assert partial.effective_deferral_months == 12

    def test_frozen(self, standard_loan):
        with pytest.raises(ValidationError):
            standard_loan.principal = 1

    def test_deferral_type_from_string(self):
        loan = LoanTerms(
            principal=1_000,
            annual_rate_pct=1,
            duration_years=1,
            deferral_type="total",
            disbursement_date=dt.date(2024, 1, 1),
        )
        assert loan.deferral_type is DeferralType.TOTAL

    def test_schedule_helpers(self, standard_loan):
        schedule = build_amortization_schedule(standard_loan)
        assert len(schedule) == 240
        assert not schedule.is_empty
        assert len(schedule.rows_for_year(2024)) == 12
        assert schedule.balance_at(dt.date(2024, 1, 1), 200_000) == 200_000
        assert schedule.balance_at(dt.date(2024, 1, 15), 200_000) == schedule.rows[0].remaining_balance

    def test_schedule_frame(self, standard_loan):
        frame = build_amortization_schedule(standard_loan).to_frame()
        assert len(frame) == 240
        assert "Capital Restant Dû" in frame.columns


class TestTaxModels:
    def test_regime_rental_types(self):
        assert TaxRegime.MICRO_FONCIER.rental_type is RentalType.UNFURNISHED
        assert TaxRegime.REEL_BIC.rental_type is RentalType.FURNISHED
        assert TaxRegime.MICRO_BIC.is_micro
        assert not TaxRegime.REEL_FONCIER.is_furnished

    def test_canonical_order(self):
        assert [r.value for r in TaxRegime] == ["micro-foncier", "reel-foncier", "micro-bic", "reel-bic"]

    def test_amortization_breakdown(self):
        breakdown = AmortizationBreakdown(building=6_000, furniture=1_000, used=5_000)
        assert breakdown.total == 7_000
        assert breakdown.dropped == 2_000

    def test_regime_result_rejects_negative_carry(self):
        with pytest.raises(ValidationError):
            RegimeResult(regime=TaxRegime.REEL_FONCIER, year=2024, deficit_carried_forward=-1)


class TestSCI:
    def test_defaults(self):
        sci = SCI(id="s")
        assert sci.standard_rate_pct == 25.0
        assert sci.reduced_rate_pct == 15.0
        assert sci.reduced_rate_threshold == 42_500.0
        assert sci.rental_type is RentalType.UNFURNISHED
        assert sci.operating_expenses == 0.0

    def test_operating_expenses(self):
        sci = SCI(id="s", accounting_fees=1_000, legal_fees=200, bank_fees=100, insurance_fees=50, other_expenses=25)
        assert sci.operating_expenses == 1_375
        assert "operating_expenses" in sci.model_dump()

    def test_rate_bounds(self):
        with pytest.raises(ValidationError):
            SCI(id="s", standard_rate_pct=120)


class TestBalanceYear:
    def test_to_dict_labels(self):
        balance = BalanceYear(
            year=2030,
            annual_cash_flow_before_tax=1,
            annual_tax=2,
            annual_cash_flow=3,
            cumulative_cash_flow_before_tax=4,
            cumulative_tax=5,
            cumulative_cash_flow=6,
            revalued_price=7,
            net_selling_price=8,
            remaining_balance=9,
            sale_balance=10,
            capital_gain_tax=11,
            total_gain=12,
        )
        data = balance.to_dict()
        assert data["Année"] == 2030
        assert data["Gain Total"] == 12
        assert len(data) == 13
