"""Application services: corporate consolidation, exit pricing and goal search."""

from .exit import balances_frame, exit_balance, irr_for_sale_year, yearly_balances
from .goal_seeker import Candidate, GoalResult, TargetKind, find_earliest_year_for_target
from .sci_tax import all_sci_tax_results_across_years, sci_tax_results_for_year

__all__ = [
    "Candidate",
    "GoalResult",
    "TargetKind",
    "all_sci_tax_results_across_years",
    "balances_frame",
    "exit_balance",
    "find_earliest_year_for_target",
    "irr_for_sale_year",
    "sci_tax_results_for_year",
    "yearly_balances",
]
