"""Exit pricing: cash flows over the holding period and sale at a given year.

A holding is priced either under an individual regime or, when given a rental
type, as a member of a corporate vehicle taxed at the IS.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence
from dataclasses import dataclass
from math import isfinite

import numpy_financial as npf
import pandas as pd

from immo_engine.application.services.sci_tax import all_sci_tax_results_across_years
from immo_engine.core.exceptions import InvalidParameterError
from immo_engine.core.logging import get_logger
from immo_engine.core.settings import EngineSettings, get_settings
from immo_engine.domain.calculator.capital_gains import (
    capital_gains_tax,
    corporate_capital_gains_tax,
    revalued_price,
)
from immo_engine.domain.calculator.coverage import loan_info_for_year, year_coverage
from immo_engine.domain.calculator.expenses import recognized_revenue
from immo_engine.domain.calculator.financial import remaining_balance_at
from immo_engine.domain.calculator.regimes import (
    accumulated_depreciation,
    get_regime_calculator,
)
from immo_engine.domain.models.property import Property
from immo_engine.domain.models.sale import (
    BalanceYear,
    CapitalGainResult,
    ExitBalance,
    SaleParameters,
)
from immo_engine.domain.models.sci import SCI
from immo_engine.domain.models.tax import RegimeResult, RentalType, TaxRegime

log = get_logger(__name__)

Mode = TaxRegime | RentalType


@dataclass(frozen=True)
class YearCashFlow:
    """Cash flow of one holding year, before and after tax."""

    year: int
    before_tax: float
    tax: float

    @property
    def net(self) -> float:
        return self.before_tax - self.tax


def resolve_mode(mode: Mode | str) -> Mode:
    """Accept a regime, a rental type or their string values."""
    if isinstance(mode, (TaxRegime, RentalType)):
        return mode
    for enum in (TaxRegime, RentalType):
        try:
            return enum(mode)
        except ValueError:
            continue
    raise InvalidParameterError("mode", mode, "expected a tax regime or a rental type")


def _check_year(prop: Property, year: int) -> None:
    if year not in prop.years:
        raise InvalidParameterError(
            "year", year, f"outside the holding period {prop.start_year}-{prop.end_year}"
        )


def cash_flow_before_tax(prop: Property, year: int, rental_type: RentalType) -> float:
    """Revenue minus every charge, loan payments and insurance, for ``year``."""
    record = prop.expenses_for_year(year)
    coverage = year_coverage(prop, year)
    charges = (record.deductible_charges + record.other_non_deductible) * coverage
    loan = loan_info_for_year(prop, year)
    return recognized_revenue(prop, year, rental_type) - charges - loan.total


def yearly_cash_flows(
    prop: Property,
    mode: Mode | str,
    sci: SCI | None = None,
    members: Sequence[Property] | None = None,
    settings: EngineSettings | None = None,
) -> list[YearCashFlow]:
    """Cash flow of every holding year under ``mode``.

    Under a regime the tax is that regime's yearly result; under a rental type
    it is the IS the vehicle allocates to the property.
    """
    settings = settings or get_settings()
    mode = resolve_mode(mode)

    if isinstance(mode, TaxRegime):
        calc = get_regime_calculator(mode)
        flows = []
        prior: RegimeResult | None = None
        for year in prop.years:
            prior = calc.compute(prop, year, prior, settings)
            flows.append(YearCashFlow(year, cash_flow_before_tax(prop, year, mode.rental_type), prior.total_tax))
        return flows

    vehicle, vehicle_members = _vehicle_for(prop, mode, sci, members)
    sci_results = all_sci_tax_results_across_years(vehicle, vehicle_members, settings)
    return [
        YearCashFlow(
            year,
            cash_flow_before_tax(prop, year, mode),
            sci_results[year].allocated_is_for(prop.id) if year in sci_results else 0.0,
        )
        for year in prop.years
    ]


def _vehicle_for(
    prop: Property,
    rental_type: RentalType,
    sci: SCI | None,
    members: Sequence[Property] | None,
) -> tuple[SCI, list[Property]]:
    """Vehicle used to price a corporate holding.

    Without an explicit SCI, one is synthesized over every member (the property
    alone when no members are given).
    """
    members = list(members) if members else [prop]
    if all(m.id != prop.id for m in members):
        members.append(prop)
    if sci is None:
        sci = SCI(id=f"{prop.id}-sci", name=prop.name, property_ids=[m.id for m in members])
    return sci.model_copy(update={"rental_type": rental_type}), members


def sale_date_for(prop: Property, year: int) -> dt.date:
    """End of holding when selling in the last year, else December 31."""
    if year == prop.end_year:
        return prop.project_end_date
    return dt.date(year, 12, 31)


def capital_gain_for_sale(
    prop: Property,
    sale_params: SaleParameters,
    year: int,
    mode: Mode | str,
    settings: EngineSettings | None = None,
) -> CapitalGainResult:
    """Capital-gains tax if the property were sold in ``year`` under ``mode``."""
    settings = settings or get_settings()
    mode = resolve_mode(mode)
    holding_years = year - prop.start_year
    revalued = revalued_price(prop.purchase_price, sale_params.annual_increase_pct, holding_years)
    net_price = revalued - sale_params.agency_fees
    corrected_price = prop.purchase_price + prop.acquisition_fees + sale_params.improvement_works
    gross = net_price - corrected_price

    if isinstance(mode, RentalType):
        return corporate_capital_gains_tax(gross, holding_years, settings)

    if mode == TaxRegime.REEL_BIC:
        depreciation = accumulated_depreciation(prop, year, settings)
    elif mode.is_furnished:
        depreciation = prop.accumulated_depreciation or 0.0
    else:
        depreciation = 0.0

    return capital_gains_tax(
        gross,
        holding_years,
        mode,
        marginal_rate_pct=prop.tax_parameters.marginal_rate_pct,
        accumulated_depreciation=depreciation,
        is_lmp=prop.is_lmp,
        settings=settings,
    )


def price_exit(
    prop: Property,
    sale_params: SaleParameters,
    year: int,
    mode: Mode,
    cumulative_cash_flow: float,
    settings: EngineSettings,
) -> ExitBalance:
    """Exit position for a sale in ``year`` given the cash flow accumulated so far."""
    holding_years = year - prop.start_year
    revalued = revalued_price(prop.purchase_price, sale_params.annual_increase_pct, holding_years)
    net_price = revalued - sale_params.agency_fees
    remaining = remaining_balance_at(prop.loan, sale_date_for(prop, year))
    sale_balance = net_price - (remaining + sale_params.early_repayment_fees)
    capital_gain = capital_gain_for_sale(prop, sale_params, year, mode, settings)

    return ExitBalance(
        year=year,
        regime=mode if isinstance(mode, TaxRegime) else None,
        rental_type=mode if isinstance(mode, RentalType) else mode.rental_type,
        revalued_price=revalued,
        net_selling_price=net_price,
        remaining_balance=remaining,
        early_repayment_fees=sale_params.early_repayment_fees,
        sale_balance=sale_balance,
        cumulative_cash_flow=cumulative_cash_flow,
        capital_gain=capital_gain,
        down_payment=prop.initial_equity,
        total_gain=cumulative_cash_flow + sale_balance - capital_gain.total_tax - prop.initial_equity,
    )


def exit_balance(
    prop: Property,
    sale_params: SaleParameters,
    year: int,
    mode: Mode | str,
    sci: SCI | None = None,
    members: Sequence[Property] | None = None,
    settings: EngineSettings | None = None,
) -> ExitBalance:
    """Price a sale at the end of ``year``.

    Args:
        prop: Property sold
        sale_params: Sale assumptions
        year: Sale year, within the holding period
        mode: Tax regime (direct holding) or rental type (corporate holding)
        sci: Vehicle holding the property, for a rental type
        members: All members of ``sci``
        settings: Rule parameters (defaults to ``get_settings()``)

    Returns:
        ExitBalance

    Raises:
        InvalidParameterError: If ``year`` is outside the holding period.
    """
    settings = settings or get_settings()
    mode = resolve_mode(mode)
    _check_year(prop, year)
    flows = yearly_cash_flows(prop, mode, sci, members, settings)
    cumulative = sum(f.net for f in flows if f.year <= year)
    return price_exit(prop, sale_params, year, mode, cumulative, settings)


def yearly_balances(
    prop: Property,
    sale_params: SaleParameters,
    mode: Mode | str,
    sci: SCI | None = None,
    members: Sequence[Property] | None = None,
    settings: EngineSettings | None = None,
) -> list[BalanceYear]:
    """One BalanceYear per holding year, each priced as if sold that year."""
    settings = settings or get_settings()
    mode = resolve_mode(mode)
    balances = []
    cumulative_before_tax = cumulative_tax = 0.0
    for flow in yearly_cash_flows(prop, mode, sci, members, settings):
        cumulative_before_tax += flow.before_tax
        cumulative_tax += flow.tax
        cumulative = cumulative_before_tax - cumulative_tax
        exit_ = price_exit(prop, sale_params, flow.year, mode, cumulative, settings)
        balances.append(
            BalanceYear(
                year=flow.year,
                annual_cash_flow_before_tax=flow.before_tax,
                annual_tax=flow.tax,
                annual_cash_flow=flow.net,
                cumulative_cash_flow_before_tax=cumulative_before_tax,
                cumulative_tax=cumulative_tax,
                cumulative_cash_flow=cumulative,
                revalued_price=exit_.revalued_price,
                net_selling_price=exit_.net_selling_price,
                remaining_balance=exit_.remaining_balance,
                sale_balance=exit_.sale_balance,
                capital_gain_tax=exit_.capital_gain_tax,
                total_gain=exit_.total_gain,
            )
        )
    return balances


def balances_frame(
    prop: Property,
    sale_params: SaleParameters,
    mode: Mode | str,
    sci: SCI | None = None,
    members: Sequence[Property] | None = None,
    settings: EngineSettings | None = None,
) -> pd.DataFrame:
    """Tabular view of ``yearly_balances`` with French column labels."""
    balances = yearly_balances(prop, sale_params, mode, sci, members, settings)
    return pd.DataFrame([b.to_dict() for b in balances])


def irr_for_sale_year(
    prop: Property,
    sale_params: SaleParameters,
    year: int,
    mode: Mode | str,
    sci: SCI | None = None,
    members: Sequence[Property] | None = None,
    settings: EngineSettings | None = None,
) -> float:
    """Internal rate of return (%) of a holding sold in ``year``.

    Flows: equity invested at acquisition, yearly net cash flows, and the sale
    balance net of capital-gains tax added to the last year.
    """
    settings = settings or get_settings()
    mode = resolve_mode(mode)
    _check_year(prop, year)

    flows = [-prop.initial_equity]
    flows += [f.net for f in yearly_cash_flows(prop, mode, sci, members, settings) if f.year <= year]
    exit_ = exit_balance(prop, sale_params, year, mode, sci, members, settings)
    flows[-1] += exit_.sale_balance - exit_.capital_gain_tax

    irr = float(npf.irr(flows)) * 100.0
    if not isfinite(irr):
        log.warning("irr_non_finite", property_id=prop.id, year=year, mode=mode.value)
        return 0.0
    return irr
