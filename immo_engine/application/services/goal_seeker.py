"""Earliest-year goal search.

A bounded linear scan over the holding years for each candidate configuration.
Cumulative gain is not monotonic in general, so every year is evaluated and no
bisection is attempted.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from immo_engine.application.services.exit import (
    cash_flow_before_tax,
    price_exit,
    yearly_balances,
)
from immo_engine.application.services.sci_tax import (
    all_sci_tax_results_across_years,
    sci_years,
)
from immo_engine.core.exceptions import InvalidParameterError
from immo_engine.core.logging import get_logger
from immo_engine.core.settings import EngineSettings, get_settings
from immo_engine.domain.models.property import Property
from immo_engine.domain.models.sale import SaleParameters
from immo_engine.domain.models.sci import SCI
from immo_engine.domain.models.tax import RentalType, TaxRegime

log = get_logger(__name__)


class TargetKind(str, Enum):
    """Metric compared with the target value."""

    TOTAL_GAIN = "total_gain"  # gain if sold that year
    CUMULATIVE_CASH_FLOW = "cumulative_cash_flow"  # hold scenario
    ANNUAL_CASH_FLOW = "annual_cash_flow"  # target is a monthly amount


@dataclass(frozen=True)
class Candidate:
    """A holding configuration: a regime (direct holding) or a rental type alone (corporate)."""

    rental_type: RentalType
    regime: TaxRegime | None = None

    @property
    def mode(self) -> TaxRegime | RentalType:
        return self.regime if self.regime is not None else self.rental_type

    @property
    def is_corporate(self) -> bool:
        return self.regime is None


@dataclass(frozen=True)
class CandidateOutcome:
    candidate: Candidate
    year: int | None
    achieved_value: float


@dataclass(frozen=True)
class GoalResult:
    """Outcome of a goal search.

    ``year`` is None when no candidate reaches the target; ``achieved_value`` is
    then the best value reached by ``best_candidate`` over the horizon.
    """

    target_kind: TargetKind
    target_value: float
    year: int | None
    best_candidate: Candidate | None
    achieved_value: float
    outcomes: list[CandidateOutcome] = field(default_factory=list)

    @property
    def reached(self) -> bool:
        return self.year is not None


DEFAULT_INDIVIDUAL_CANDIDATES = tuple(Candidate(r.rental_type, r) for r in TaxRegime)
DEFAULT_CORPORATE_CANDIDATES = (Candidate(RentalType.UNFURNISHED), Candidate(RentalType.FURNISHED))


def _normalize_candidate(candidate: Candidate | TaxRegime | RentalType | str) -> Candidate:
    if isinstance(candidate, Candidate):
        if candidate.regime is not None and TaxRegime(candidate.regime).rental_type != candidate.rental_type:
            raise InvalidParameterError(
                "candidates",
                (candidate.regime, candidate.rental_type),
                "regime and rental type disagree",
            )
        return candidate
    if isinstance(candidate, TaxRegime):
        return Candidate(candidate.rental_type, candidate)
    if isinstance(candidate, RentalType):
        return Candidate(candidate)
    for enum in (TaxRegime, RentalType):
        try:
            return _normalize_candidate(enum(candidate))
        except ValueError:
            continue
    raise InvalidParameterError("candidates", candidate, "expected a regime, a rental type or a Candidate")


def _metric_series(
    kind: TargetKind,
    annual: Sequence[float],
    cumulative: Sequence[float],
    total_gain: Sequence[float],
) -> list[float]:
    if kind == TargetKind.TOTAL_GAIN:
        return list(total_gain)
    if kind == TargetKind.CUMULATIVE_CASH_FLOW:
        return list(cumulative)
    return list(annual)


def _property_series(
    prop: Property,
    candidate: Candidate,
    kind: TargetKind,
    sale_params: SaleParameters,
    years: range,
    sci: SCI | None,
    members: Sequence[Property] | None,
    settings: EngineSettings,
) -> list[float]:
    balances = [
        b
        for b in yearly_balances(prop, sale_params, candidate.mode, sci, members, settings)
        if b.year in years
    ]
    return _metric_series(
        kind,
        [b.annual_cash_flow for b in balances],
        [b.cumulative_cash_flow for b in balances],
        [b.total_gain for b in balances],
    )


def _sci_series(
    sci: SCI,
    members: Sequence[Property],
    candidate: Candidate,
    kind: TargetKind,
    sale_params: SaleParameters,
    years: range,
    settings: EngineSettings,
) -> list[float]:
    """Vehicle-wide metric: member cash flows less consolidated IS, exits priced per member."""
    vehicle = sci.model_copy(update={"rental_type": candidate.rental_type})
    results = all_sci_tax_results_across_years(vehicle, members, settings)

    annual, cumulative, total_gain = [], [], []
    running = 0.0
    for year in years:
        before_tax = sum(cash_flow_before_tax(m, year, candidate.rental_type) for m in members)
        net = before_tax - (results[year].total_is if year in results else 0.0)
        running += net
        exits = sum(
            price_exit(m, sale_params, min(year, m.end_year), candidate.rental_type, 0.0, settings).total_gain
            for m in members
            if m.start_year <= year
        )
        annual.append(net)
        cumulative.append(running)
        total_gain.append(running + exits)
    return _metric_series(kind, annual, cumulative, total_gain)


def find_earliest_year_for_target(
    subject: Property | SCI,
    target_kind: TargetKind | str,
    target_value: float,
    candidates: Iterable[Candidate | TaxRegime | RentalType | str] | None = None,
    *,
    sale_params: SaleParameters | None = None,
    members: Sequence[Property] | None = None,
    sci: SCI | None = None,
    settings: EngineSettings | None = None,
) -> GoalResult:
    """Find the earliest year at which a candidate reaches ``target_value``.

    Candidates are scanned in the order given (default: the four regimes in
    canonical order for a property, unfurnished then furnished for an SCI).
    The candidate reaching the target first wins; ties go to the earlier
    candidate. An unreachable target is a normal outcome with ``year`` None.

    Args:
        subject: A property (direct or corporate holding) or an SCI
        target_kind: Metric to compare
        target_value: Target amount; a monthly amount for ``ANNUAL_CASH_FLOW``
        candidates: Configurations to try
        sale_params: Sale assumptions for ``TOTAL_GAIN`` (defaults apply otherwise)
        members: Member properties, required for an SCI subject
        sci: Vehicle holding a property subject, for corporate candidates
        settings: Rule parameters (defaults to ``get_settings()``)

    Returns:
        GoalResult

    Raises:
        InvalidParameterError: On an unknown target kind, an inconsistent
            candidate, or an SCI subject without members.
    """
    settings = settings or get_settings()
    sale_params = sale_params or SaleParameters()
    try:
        kind = TargetKind(target_kind)
    except ValueError as e:
        raise InvalidParameterError("target_kind", target_kind, "unknown target kind") from e
    threshold = target_value * 12 if kind == TargetKind.ANNUAL_CASH_FLOW else target_value

    is_sci = isinstance(subject, SCI)
    if is_sci and not members:
        raise InvalidParameterError("members", members, "an SCI search needs its member properties")

    default = DEFAULT_CORPORATE_CANDIDATES if is_sci else DEFAULT_INDIVIDUAL_CANDIDATES
    pool = [_normalize_candidate(c) for c in (candidates if candidates is not None else default)]
    if is_sci and any(not c.is_corporate for c in pool):
        raise InvalidParameterError("candidates", pool, "an SCI is searched over rental types only")

    all_years = sci_years(members) if is_sci else subject.years
    years = all_years[: settings.max_horizon_years]

    outcomes: list[CandidateOutcome] = []
    for candidate in pool:
        if is_sci:
            series = _sci_series(subject, members, candidate, kind, sale_params, years, settings)
        else:
            series = _property_series(subject, candidate, kind, sale_params, years, sci, members, settings)

        reached = next((i for i, value in enumerate(series) if value >= threshold), None)
        if reached is not None:
            outcomes.append(CandidateOutcome(candidate, years[reached], series[reached]))
        else:
            outcomes.append(CandidateOutcome(candidate, None, max(series, default=0.0)))

    winners = [o for o in outcomes if o.year is not None]
    if winners:
        best = min(winners, key=lambda o: o.year)
    elif outcomes:
        best = max(outcomes, key=lambda o: o.achieved_value)
    else:
        best = None

    result = GoalResult(
        target_kind=kind,
        target_value=target_value,
        year=best.year if best else None,
        best_candidate=best.candidate if best else None,
        achieved_value=best.achieved_value if best else 0.0,
        outcomes=outcomes,
    )
    log.debug(
        "goal_search_completed",
        target_kind=kind.value,
        target_value=target_value,
        candidates=len(pool),
        year=result.year,
        reached=result.reached,
    )
    return result
