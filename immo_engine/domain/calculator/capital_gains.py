"""Capital-gains taxation of a sale.

Holding-period discounts are piecewise-linear legal schedules evaluated as
pure functions of the number of years held.
"""

from __future__ import annotations

from immo_engine.core.settings import EngineSettings, get_settings
from immo_engine.core.tax_constants import (
    INCOME_TAX_DISCOUNT_PER_YEAR,
    INCOME_TAX_EXEMPTION_START,
    INCOME_TAX_FULL_EXEMPTION_AFTER,
    LMP_SHORT_TERM_MAX_YEARS,
    SOCIAL_DISCOUNT_SCHEDULE,
    SOCIAL_EXEMPTION_START,
    SOCIAL_FULL_EXEMPTION_AFTER,
)
from immo_engine.domain.models.sale import CapitalGainResult
from immo_engine.domain.models.tax import TaxRegime


def income_tax_discount(holding_years: int) -> float:
    """Income-tax discount fraction for ``holding_years`` full years of holding.

    0 up to 5 years, 6% per year from the 6th to the 21st, full exemption after.
    """
    if holding_years <= INCOME_TAX_EXEMPTION_START:
        return 0.0
    if holding_years > INCOME_TAX_FULL_EXEMPTION_AFTER:
        return 1.0
    return min(1.0, (holding_years - INCOME_TAX_EXEMPTION_START) * INCOME_TAX_DISCOUNT_PER_YEAR)


def social_discount(holding_years: int) -> float:
    """Social-charges discount fraction for ``holding_years`` full years of holding.

    1.65% per year from the 6th to the 21st year, 1.60% for the 22nd, 9% per
    year from the 23rd to the 30th, full exemption after 30.
    """
    if holding_years <= SOCIAL_EXEMPTION_START:
        return 0.0
    if holding_years > SOCIAL_FULL_EXEMPTION_AFTER:
        return 1.0
    discount = 0.0
    for step in SOCIAL_DISCOUNT_SCHEDULE:
        years_in_step = min(holding_years, step["last_year"]) - step["first_year"] + 1
        if years_in_step > 0:
            discount += years_in_step * step["rate_per_year"]
    return min(1.0, discount)


def revalued_price(purchase_price: float, annual_increase_pct: float, holding_years: int) -> float:
    """Purchase price compounded by the appreciation assumption."""
    return purchase_price * (1.0 + annual_increase_pct / 100.0) ** holding_years


def capital_gains_tax(
    gross_capital_gain: float,
    holding_years: int,
    regime: TaxRegime | None = None,
    *,
    marginal_rate_pct: float = 0.0,
    accumulated_depreciation: float = 0.0,
    is_lmp: bool = False,
    settings: EngineSettings | None = None,
) -> CapitalGainResult:
    """Tax on the gain of a directly held property.

    Unfurnished regimes use the standard schedules. Furnished regimes tax the
    part of the gain equal to the depreciation taken at the marginal rate and
    the remainder under the standard schedules; a professional (LMP) holding
    sold within two years is taxed entirely at the marginal rate.

    Args:
        gross_capital_gain: Net selling price minus corrected purchase price
        holding_years: Sale year minus acquisition year
        regime: Regime the property was let under (None for unfurnished rules)
        marginal_rate_pct: Business marginal rate used for recapture
        accumulated_depreciation: Depreciation taken over the holding period
        is_lmp: Professional furnished letting
        settings: Rule parameters (defaults to ``get_settings()``)

    Returns:
        CapitalGainResult
    """
    settings = settings or get_settings()
    ir_discount = income_tax_discount(holding_years)
    ps_discount = social_discount(holding_years)

    if gross_capital_gain <= 0:
        return CapitalGainResult(
            holding_years=holding_years,
            gross_capital_gain=gross_capital_gain,
            income_tax_discount=ir_discount,
            social_discount=ps_discount,
        )

    furnished = regime is not None and TaxRegime(regime).is_furnished
    short_term = 0.0
    if furnished and is_lmp and holding_years <= LMP_SHORT_TERM_MAX_YEARS:
        short_term = gross_capital_gain
    elif furnished and accumulated_depreciation > 0:
        short_term = min(accumulated_depreciation, gross_capital_gain)
    long_term = gross_capital_gain - short_term

    short_term_tax = short_term * marginal_rate_pct / 100.0
    income_tax = long_term * (1.0 - ir_discount) * settings.capital_gains_income_tax_pct / 100.0
    social_charges = long_term * (1.0 - ps_discount) * settings.capital_gains_social_pct / 100.0

    return CapitalGainResult(
        holding_years=holding_years,
        gross_capital_gain=gross_capital_gain,
        income_tax_discount=ir_discount,
        social_discount=ps_discount,
        short_term_gain=short_term,
        long_term_gain=long_term,
        short_term_tax=short_term_tax,
        income_tax=income_tax,
        social_charges=social_charges,
        total_tax=short_term_tax + income_tax + social_charges,
    )


def corporate_capital_gains_tax(
    gross_capital_gain: float,
    holding_years: int,
    settings: EngineSettings | None = None,
) -> CapitalGainResult:
    """Tax on a gain realized by a corporate vehicle: flat rate, no holding discount."""
    settings = settings or get_settings()
    tax = max(0.0, gross_capital_gain) * settings.sci_capital_gains_rate_pct / 100.0
    return CapitalGainResult(
        holding_years=holding_years,
        gross_capital_gain=gross_capital_gain,
        long_term_gain=max(0.0, gross_capital_gain),
        income_tax=tax,
        total_tax=tax,
    )
