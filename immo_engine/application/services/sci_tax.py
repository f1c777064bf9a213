"""Corporate income tax (IS) consolidation for an SCI.

Results of every member are summed, IS is computed once on the consolidated
result after the vehicle's carried deficit, then allocated back to members by
value-weighted prorata. Deficits carry forward without ceiling or expiry.
"""

from __future__ import annotations

from collections.abc import Sequence

from immo_engine.core.exceptions import InvalidParameterError
from immo_engine.core.logging import get_logger
from immo_engine.core.settings import EngineSettings, get_settings
from immo_engine.core.tax_constants import ALLOCATION_DECIMALS
from immo_engine.domain.calculator.coverage import year_coverage
from immo_engine.domain.calculator.expenses import deductible_expenses, recognized_revenue
from immo_engine.domain.calculator.regimes import asset_amortization
from immo_engine.domain.models.property import Property
from immo_engine.domain.models.sci import SCI, PropertyContribution, SCITaxResult

log = get_logger(__name__)


def _check_members(sci: SCI, members: Sequence[Property]) -> None:
    for prop in members:
        if prop.id not in sci.property_ids:
            raise InvalidParameterError(
                "members",
                prop.id,
                f"property is not a member of SCI '{sci.id}'",
            )


def _duration(prop: Property, field: str, sci: SCI) -> int:
    """Member's own amortization duration when declared, else the vehicle default."""
    if field in prop.tax_parameters.model_fields_set:
        return getattr(prop.tax_parameters, field)
    return getattr(sci, field)


def sci_property_amortization(
    sci: SCI,
    prop: Property,
    year: int,
    settings: EngineSettings | None = None,
) -> float:
    """Building, furniture and works amortization of one member for ``year``.

    Without a declared building value the depreciable share of the purchase
    price is used; without declared works the renovation costs are used.
    """
    settings = settings or get_settings()
    tp = prop.tax_parameters
    elapsed = year - prop.start_year
    coverage = year_coverage(prop, year)

    building_value = tp.building_value or prop.purchase_price * settings.sci_building_share_pct / 100.0
    works_value = tp.works_value or prop.renovation_costs

    return (
        asset_amortization(building_value, _duration(prop, "building_amortization_years", sci), elapsed, coverage)
        + asset_amortization(tp.furniture_value, _duration(prop, "furniture_amortization_years", sci), elapsed, coverage)
        + asset_amortization(works_value, _duration(prop, "works_amortization_years", sci), elapsed, coverage)
    )


def prorata_weights(members: Sequence[Property]) -> dict[str, float]:
    """Weight of each member in the vehicle: value over the sum of positive values."""
    total_value = sum(p.sci_value for p in members if p.sci_value > 0)
    return {
        p.id: (p.sci_value / total_value) if total_value > 0 and p.sci_value > 0 else 0.0
        for p in members
    }


def corporate_tax(sci: SCI, taxable_income: float) -> tuple[float, float]:
    """IS at the reduced and standard rates for ``taxable_income``."""
    if taxable_income <= 0:
        return 0.0, 0.0
    reduced = min(taxable_income, sci.reduced_rate_threshold) * sci.reduced_rate_pct / 100.0
    standard = max(0.0, taxable_income - sci.reduced_rate_threshold) * sci.standard_rate_pct / 100.0
    return reduced, standard


def sci_tax_results_for_year(
    sci: SCI,
    members: Sequence[Property],
    year: int,
    previous: SCITaxResult | None = None,
    settings: EngineSettings | None = None,
) -> SCITaxResult:
    """Consolidated IS of ``sci`` for ``year``.

    Args:
        sci: Corporate vehicle
        members: Member properties (each must be listed in ``sci.property_ids``)
        year: Calendar year
        previous: Previous year's result; None starts from ``sci.previous_deficit``
        settings: Rule parameters (defaults to ``get_settings()``)

    Returns:
        SCITaxResult with one contribution per member

    Raises:
        InvalidParameterError: If a property is not a member of the vehicle.
    """
    settings = settings or get_settings()
    _check_members(sci, members)
    weights = prorata_weights(members)

    contributions: dict[str, PropertyContribution] = {}
    total_revenues = 0.0
    total_expenses = 0.0
    total_amortization = 0.0

    for prop in members:
        revenues = recognized_revenue(prop, year, sci.rental_type)
        expenses = deductible_expenses(prop, year).total
        amortization = sci_property_amortization(sci, prop, year, settings)
        contributions[prop.id] = PropertyContribution(
            property_id=prop.id,
            property_name=prop.name,
            revenues=revenues,
            expenses=expenses,
            amortization=amortization,
            contribution_to_result=revenues - expenses - amortization,
            property_value=prop.sci_value,
            prorata_weight=weights[prop.id],
        )
        total_revenues += revenues
        total_expenses += expenses
        total_amortization += amortization

    # Vehicle running costs apply while at least one member is held
    max_coverage = max((year_coverage(p, year) for p in members), default=0.0)
    operating_expenses = sci.operating_expenses * max_coverage
    total_expenses += operating_expenses

    result_before_deficit = total_revenues - total_expenses - total_amortization
    prior_deficit = previous.deficit_carried_forward if previous is not None else sci.previous_deficit

    if result_before_deficit < 0:
        deficit_used = 0.0
        deficit_generated = -result_before_deficit
        taxable_income = 0.0
    else:
        deficit_used = min(prior_deficit, result_before_deficit)
        deficit_generated = 0.0
        taxable_income = result_before_deficit - deficit_used

    reduced, standard = corporate_tax(sci, taxable_income)
    total_is = reduced + standard

    for contribution in contributions.values():
        contribution.allocated_is = round(total_is * contribution.prorata_weight, ALLOCATION_DECIMALS)

    log.debug(
        "sci_tax_consolidated",
        sci_id=sci.id,
        year=year,
        members=len(members),
        taxable_income=round(taxable_income, 2),
        total_is=round(total_is, 2),
    )

    return SCITaxResult(
        year=year,
        total_revenues=total_revenues,
        total_deductible_expenses=total_expenses,
        operating_expenses=operating_expenses,
        total_amortization=total_amortization,
        result_before_deficit=result_before_deficit,
        deficit_used=deficit_used,
        deficit_generated=deficit_generated,
        deficit_carried_forward=prior_deficit - deficit_used + deficit_generated,
        taxable_income=taxable_income,
        is_at_reduced_rate=reduced,
        is_at_standard_rate=standard,
        total_is=total_is,
        property_contributions=contributions,
    )


def sci_years(members: Sequence[Property]) -> range:
    """Calendar years from the earliest member start to the latest member end."""
    if not members:
        return range(0)
    return range(min(p.start_year for p in members), max(p.end_year for p in members) + 1)


def all_sci_tax_results_across_years(
    sci: SCI,
    members: Sequence[Property],
    settings: EngineSettings | None = None,
) -> dict[int, SCITaxResult]:
    """Fold the consolidation over every year touched by a member."""
    settings = settings or get_settings()
    results: dict[int, SCITaxResult] = {}
    previous: SCITaxResult | None = None
    for year in sci_years(members):
        previous = sci_tax_results_for_year(sci, members, year, previous, settings)
        results[year] = previous
    return results
