"""Tax constants - single source of truth for legal schedules.

Holding-period discount schedules for real-estate capital gains and a few
fixed numeric conventions. Rates that a caller may want to vary live in
``EngineSettings``; the piecewise schedules below are fixed by law and are
only ever read.
"""

from typing import TypedDict


class DiscountStep(TypedDict):
    """One linear segment of a holding-period discount schedule."""
    first_year: int
    last_year: int
    rate_per_year: float


# Income-tax discount: 6% per year from year 6 to 21, full exemption after 21
INCOME_TAX_EXEMPTION_START = 5
INCOME_TAX_FULL_EXEMPTION_AFTER = 21
INCOME_TAX_DISCOUNT_PER_YEAR = 0.06

# Social-charges discount:
#   1.65% per year from year 6 to 21
#   1.60% for year 22
#   9% per year from year 23 to 30, full exemption after 30
SOCIAL_EXEMPTION_START = 5
SOCIAL_FULL_EXEMPTION_AFTER = 30

SOCIAL_DISCOUNT_SCHEDULE: list[DiscountStep] = [
    {"first_year": 6, "last_year": 21, "rate_per_year": 0.0165},
    {"first_year": 22, "last_year": 22, "rate_per_year": 0.016},
    {"first_year": 23, "last_year": 30, "rate_per_year": 0.09},
]

# Professional furnished rental (LMP): short-term gains below this holding period
LMP_SHORT_TERM_MAX_YEARS = 2

# Rounding applied to prorata allocations (cents)
ALLOCATION_DECIMALS = 2

# Tolerance for the final balance of an amortization schedule
BALANCE_EPSILON = 0.01
