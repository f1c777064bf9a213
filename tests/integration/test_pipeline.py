"""Integration tests for the simulation pipeline.

Tests the complete flow from property records → yearly regime results →
exit balances → goal search, for direct and corporate holdings.
"""

import datetime as dt

import pytest

from immo_engine.application.services import (
    TargetKind,
    all_sci_tax_results_across_years,
    balances_frame,
    exit_balance,
    find_earliest_year_for_target,
    irr_for_sale_year,
    yearly_balances,
)
from immo_engine.domain.calculator import (
    ExpenseProjection,
    accumulated_depreciation,
    project_yearly_expenses,
    tax_regimes_across_years,
)
from immo_engine.domain.models import (
    SCI,
    DeferralType,
    LoanTerms,
    Property,
    SaleParameters,
    TaxParameters,
    TaxRegime,
    YearlyExpenseRecord,
)


@pytest.fixture
def projected_property():
    """Furnished studio bought mid-2025 with a partially deferred loan, held 15 years."""
    start, end = dt.date(2025, 7, 1), dt.date(2040, 6, 30)
    base = YearlyExpenseRecord(
        year=2025,
        property_tax=900,
        condo_fees=1_100,
        property_insurance=150,
        management_fees=700,
        rent=9_600,
        furnished_rent=11_400,
        tenant_charges=480,
    )
    return Property(
        id="studio",
        name="Studio Bordeaux",
        project_start_date=start,
        project_end_date=end,
        purchase_price=160_000,
        agency_fees=6_000,
        notary_fees=12_000,
        down_payment=18_000,
        loan=LoanTerms(
            principal=160_000,
            annual_rate_pct=3.6,
            duration_years=25,
            deferral_type=DeferralType.PARTIAL,
            deferral_months=12,
            insurance_rate_pct=0.3,
            disbursement_date=start,
        ),
        expenses=project_yearly_expenses(base, ExpenseProjection(), start.year, end.year),
        tax_parameters=TaxParameters(
            marginal_rate_pct=30,
            building_value=120_000,
            furniture_value=8_000,
        ),
    )


class TestDirectHoldingPipeline:
    """Property held in own name under each regime."""

    def test_every_year_has_every_regime(self, projected_property):
        results = tax_regimes_across_years(projected_property)
        assert list(results) == list(range(2025, 2041))
        for by_regime in results.values():
            assert list(by_regime) == list(TaxRegime)

    def test_partial_first_and_last_years(self, projected_property):
        results = tax_regimes_across_years(projected_property)
        full = results[2030][TaxRegime.MICRO_FONCIER].revenue
        assert results[2025][TaxRegime.MICRO_FONCIER].revenue < full
        assert results[2040][TaxRegime.MICRO_FONCIER].revenue < full

    def test_reel_bic_shelters_income_early(self, projected_property):
        results = tax_regimes_across_years(projected_property)
        assert results[2026][TaxRegime.REEL_BIC].total_tax < results[2026][TaxRegime.MICRO_BIC].total_tax

    def test_balances_for_every_regime(self, projected_property):
        sale = SaleParameters(annual_increase_pct=1.5, agency_fees=4_000)
        for regime in TaxRegime:
            balances = yearly_balances(projected_property, sale, regime)
            assert len(balances) == 16
            final = exit_balance(projected_property, sale, 2040, regime)
            assert balances[-1].total_gain == pytest.approx(final.total_gain)
            assert final.remaining_balance > 0

    def test_reel_bic_recapture(self, projected_property):
        sale = SaleParameters(annual_increase_pct=3.0)
        final = exit_balance(projected_property, sale, 2040, TaxRegime.REEL_BIC)
        taken = accumulated_depreciation(projected_property, 2040)
        assert taken > 0
        assert final.capital_gain.short_term_gain == pytest.approx(
            min(taken, final.capital_gain.gross_capital_gain)
        )

    def test_frame_and_irr(self, projected_property):
        sale = SaleParameters(annual_increase_pct=2.0)
        frame = balances_frame(projected_property, sale, TaxRegime.MICRO_BIC)
        assert frame["Année"].iloc[-1] == 2040
        irr = irr_for_sale_year(projected_property, sale, 2040, TaxRegime.MICRO_BIC)
        assert -100 < irr < 100

    def test_goal_search(self, projected_property):
        result = find_earliest_year_for_target(
            projected_property,
            TargetKind.TOTAL_GAIN,
            10_000,
            sale_params=SaleParameters(annual_increase_pct=2.0),
        )
        assert {o.candidate.regime for o in result.outcomes} == set(TaxRegime)
        if result.reached:
            assert 2025 <= result.year <= 2040


class TestCorporatePipeline:
    """Two properties held through one SCI."""

    @pytest.fixture
    def vehicle(self, projected_property, rented_property):
        members = [projected_property, rented_property]
        sci = SCI(
            id="sci-fam",
            name="SCI Famille",
            accounting_fees=1_200,
            legal_fees=300,
            property_ids=[m.id for m in members],
        )
        return sci, members

    def test_consolidated_years(self, vehicle):
        sci, members = vehicle
        results = all_sci_tax_results_across_years(sci, members)
        assert min(results) == 2024
        assert max(results) == 2040
        for result in results.values():
            assert set(result.property_contributions) == {"studio", "p1"}

    def test_member_outside_holding_gets_no_revenue(self, vehicle):
        sci, members = vehicle
        results = all_sci_tax_results_across_years(sci, members)
        assert results[2024].property_contributions["studio"].revenues == 0.0
        assert results[2035].property_contributions["p1"].revenues == 0.0

    def test_member_exit(self, vehicle):
        sci, members = vehicle
        sale = SaleParameters(annual_increase_pct=2.0)
        result = exit_balance(members[1], sale, 2030, "unfurnished", sci=sci, members=members)
        assert result.regime is None
        assert result.capital_gain.income_tax_discount == 0.0

    def test_vehicle_goal_search(self, vehicle):
        sci, members = vehicle
        result = find_earliest_year_for_target(sci, TargetKind.CUMULATIVE_CASH_FLOW, 1e9, members=members)
        assert not result.reached
        assert result.best_candidate is not None
        assert len(result.outcomes) == 2
