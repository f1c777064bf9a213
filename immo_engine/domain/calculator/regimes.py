"""Individual rental-income tax regimes.

Each regime is a small strategy object with its own revenue recognition and
deduction rules. A year's result depends only on the same regime's result for
the previous year, so multi-year runs are an explicit fold over the holding
period.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import ClassVar

from immo_engine.core.logging import get_logger
from immo_engine.core.settings import EngineSettings, get_settings
from immo_engine.domain.calculator.coverage import year_coverage
from immo_engine.domain.calculator.expenses import (
    deductible_expenses,
    full_year_revenue,
    recognized_revenue,
)
from immo_engine.domain.models.property import Property
from immo_engine.domain.models.tax import AmortizationBreakdown, RegimeResult, TaxRegime

log = get_logger(__name__)


def asset_amortization(value: float, duration_years: int, elapsed_years: int, coverage: float) -> float:
    """Straight-line amortization of one asset for one year.

    Zero outside the window ``0 <= elapsed_years < duration_years``.
    """
    if value <= 0 or duration_years <= 0:
        return 0.0
    if elapsed_years < 0 or elapsed_years >= duration_years:
        return 0.0
    return value / duration_years * coverage


def amortization_breakdown(prop: Property, year: int) -> AmortizationBreakdown:
    """Coverage-adjusted amortization of every depreciable asset (``used`` left at 0)."""
    tp = prop.tax_parameters
    elapsed = year - prop.start_year
    coverage = year_coverage(prop, year)
    return AmortizationBreakdown(
        building=asset_amortization(tp.building_value, tp.building_amortization_years, elapsed, coverage),
        furniture=asset_amortization(tp.furniture_value, tp.furniture_amortization_years, elapsed, coverage),
        works=asset_amortization(tp.works_value, tp.works_amortization_years, elapsed, coverage),
        other=asset_amortization(tp.other_value, tp.other_amortization_years, elapsed, coverage),
    )


class RegimeCalculator(ABC):
    """Computes one regime for one year from the previous year's result."""

    regime: ClassVar[TaxRegime]

    @abstractmethod
    def compute(
        self,
        prop: Property,
        year: int,
        prior: RegimeResult | None,
        settings: EngineSettings,
    ) -> RegimeResult:
        ...

    def initial_deficit(self, prop: Property) -> float:
        """Deficit carried into the first computed year."""
        return 0.0

    def prior_deficit(self, prop: Property, prior: RegimeResult | None) -> float:
        if prior is None:
            return self.initial_deficit(prop)
        return prior.deficit_carried_forward

    def _result(
        self,
        prop: Property,
        year: int,
        revenue: float,
        taxable_income: float,
        **extra,
    ) -> RegimeResult:
        tp = prop.tax_parameters
        if taxable_income > 0:
            income_tax = taxable_income * tp.marginal_rate_pct / 100.0
            social_charges = taxable_income * tp.social_charges_rate_pct / 100.0
        else:
            income_tax = social_charges = 0.0
        total_tax = income_tax + social_charges

        if taxable_income > 0 and total_tax == 0:
            log.warning(
                "zero_tax_on_positive_income",
                property_id=prop.id,
                regime=self.regime.value,
                year=year,
                taxable_income=round(taxable_income, 2),
            )

        return RegimeResult(
            regime=self.regime,
            year=year,
            revenue=revenue,
            taxable_income=max(0.0, taxable_income),
            income_tax=income_tax,
            social_charges=social_charges,
            total_tax=total_tax,
            net_income=revenue - total_tax,
            **extra,
        )


class MicroFoncier(RegimeCalculator):
    """Flat abatement on unfurnished revenue, no charges, no deficit."""

    regime = TaxRegime.MICRO_FONCIER

    def compute(self, prop, year, prior, settings):
        revenue = recognized_revenue(prop, year, self.regime.rental_type)
        taxable = revenue * (1.0 - settings.micro_foncier_abatement_pct / 100.0)
        return self._result(prop, year, revenue, max(0.0, taxable))


class MicroBic(RegimeCalculator):
    """Flat abatement on furnished revenue, no charges, no deficit."""

    regime = TaxRegime.MICRO_BIC

    def compute(self, prop, year, prior, settings):
        revenue = recognized_revenue(prop, year, self.regime.rental_type)
        taxable = revenue * (1.0 - settings.micro_bic_abatement_pct / 100.0)
        return self._result(prop, year, revenue, max(0.0, taxable))


class ReelFoncier(RegimeCalculator):
    """Real charges on unfurnished revenue with the foncier deficit rules.

    A negative result splits into a financial part (interest and loan insurance
    exceeding revenue), always carried forward, and an other-charges part,
    imputed on global income up to the ceiling with the excess carried. A
    positive result is first offset by the carried deficit, within the ceiling.
    """

    regime = TaxRegime.REEL_FONCIER

    def initial_deficit(self, prop):
        return prop.tax_parameters.previous_deficit

    def compute(self, prop, year, prior, settings):
        revenue = recognized_revenue(prop, year, self.regime.rental_type)
        expenses = deductible_expenses(prop, year)
        result = revenue - expenses.total
        prior_deficit = self.prior_deficit(prop, prior)
        ceiling = prop.tax_parameters.deficit_ceiling
        if ceiling is None:
            ceiling = settings.default_deficit_ceiling

        if result >= 0:
            used = min(prior_deficit, result, ceiling)
            return self._result(
                prop,
                year,
                revenue,
                result - used,
                deductible_expenses=expenses.total,
                deficit_used=used,
                deficit_carried_forward=prior_deficit - used,
            )

        total_deficit = -result
        financial_deficit = max(0.0, expenses.financial - revenue)
        other_deficit = total_deficit - financial_deficit
        imputed = min(other_deficit, ceiling)
        return self._result(
            prop,
            year,
            revenue,
            0.0,
            deductible_expenses=expenses.total,
            deficit_carried_forward=prior_deficit + financial_deficit + other_deficit - imputed,
            deficit_imputed_on_global_income=imputed,
        )


class ReelBic(RegimeCalculator):
    """Real charges and amortization on furnished revenue.

    Amortization only brings a positive result down to zero; the unused part is
    dropped. Operating deficits carry forward without ceiling against future
    BIC income only.
    """

    regime = TaxRegime.REEL_BIC

    def initial_deficit(self, prop):
        return prop.tax_parameters.previous_bic_deficit

    def compute(self, prop, year, prior, settings):
        revenue = recognized_revenue(prop, year, self.regime.rental_type)
        expenses = deductible_expenses(prop, year)
        before_amortization = revenue - expenses.total
        breakdown = amortization_breakdown(prop, year)
        used_amortization = min(breakdown.total, max(0.0, before_amortization))
        breakdown = breakdown.model_copy(update={"used": used_amortization})
        after_amortization = before_amortization - used_amortization
        prior_deficit = self.prior_deficit(prop, prior)

        if after_amortization > 0:
            used = min(prior_deficit, after_amortization)
            taxable = after_amortization - used
            carried = prior_deficit - used
        else:
            used = 0.0
            taxable = 0.0
            carried = prior_deficit - after_amortization

        return self._result(
            prop,
            year,
            revenue,
            taxable,
            deductible_expenses=expenses.total,
            deficit_used=used,
            deficit_carried_forward=carried,
            amortization=breakdown,
        )


_CALCULATORS: dict[TaxRegime, RegimeCalculator] = {
    calc.regime: calc for calc in (MicroFoncier(), ReelFoncier(), MicroBic(), ReelBic())
}


def get_regime_calculator(regime: TaxRegime) -> RegimeCalculator:
    return _CALCULATORS[TaxRegime(regime)]


def regime_result_for_year(
    prop: Property,
    year: int,
    regime: TaxRegime,
    prior: RegimeResult | None = None,
    settings: EngineSettings | None = None,
) -> RegimeResult:
    """Result of a single regime for ``year``; ``prior`` None is the first year."""
    settings = settings or get_settings()
    return get_regime_calculator(regime).compute(prop, year, prior, settings)


def all_tax_regimes_for_year(
    prop: Property,
    year: int,
    prior_results: Mapping[TaxRegime, RegimeResult] | None = None,
    settings: EngineSettings | None = None,
) -> dict[TaxRegime, RegimeResult]:
    """Compute every regime for ``year``.

    Args:
        prop: Property record
        year: Calendar year
        prior_results: Previous year's results per regime; None for the first year
        settings: Rule parameters (defaults to ``get_settings()``)

    Returns:
        Dict keyed by regime, in canonical order
    """
    settings = settings or get_settings()
    prior_results = prior_results or {}
    return {
        regime: calc.compute(prop, year, prior_results.get(regime), settings)
        for regime, calc in _CALCULATORS.items()
    }


def tax_regimes_across_years(
    prop: Property,
    settings: EngineSettings | None = None,
) -> dict[int, dict[TaxRegime, RegimeResult]]:
    """Fold ``all_tax_regimes_for_year`` over the holding period."""
    settings = settings or get_settings()
    results: dict[int, dict[TaxRegime, RegimeResult]] = {}
    prior: dict[TaxRegime, RegimeResult] | None = None
    for year in prop.years:
        prior = all_tax_regimes_for_year(prop, year, prior, settings)
        results[year] = prior

    log.debug(
        "regime_results_computed",
        property_id=prop.id,
        first_year=prop.start_year,
        last_year=prop.end_year,
    )
    return results


def all_gross_yields_for_year(prop: Property, year: int) -> dict[TaxRegime, float]:
    """Gross yield (%) per regime: full-year revenue over the gross investment."""
    base = prop.gross_investment
    record = prop.expenses_for_year(year)
    return {
        regime: (full_year_revenue(record, regime.rental_type) / base * 100.0) if base > 0 else 0.0
        for regime in TaxRegime
    }


def is_micro_eligible(
    prop: Property,
    year: int,
    regime: TaxRegime,
    settings: EngineSettings | None = None,
) -> bool:
    """Whether recognized revenue stays under the micro threshold of ``regime``.

    Real regimes are always eligible. The engine computes micro regimes
    regardless; this is for the caller to flag.
    """
    settings = settings or get_settings()
    regime = TaxRegime(regime)
    if not regime.is_micro:
        return True
    threshold = (
        settings.micro_foncier_threshold
        if regime == TaxRegime.MICRO_FONCIER
        else settings.micro_bic_threshold
    )
    return recognized_revenue(prop, year, regime.rental_type) <= threshold


def accumulated_depreciation(
    prop: Property,
    through_year: int,
    settings: EngineSettings | None = None,
) -> float:
    """Depreciation taken under réel BIC from the first year through ``through_year``.

    A declared ``prop.accumulated_depreciation`` takes precedence.
    """
    if prop.accumulated_depreciation is not None:
        return prop.accumulated_depreciation

    settings = settings or get_settings()
    calc = get_regime_calculator(TaxRegime.REEL_BIC)
    total = 0.0
    prior: RegimeResult | None = None
    for year in range(prop.start_year, min(through_year, prop.end_year) + 1):
        prior = calc.compute(prop, year, prior, settings)
        total += prior.amortization.used if prior.amortization else 0.0
    return total
