"""
immo_engine - French rental real-estate simulation engine

Pure computation core for leveraged rental holdings: loan amortization with
deferral, the four individual rental-income tax regimes, SCI corporate tax
consolidation, exit pricing with capital-gains tax, and earliest-year goal
search.

Modules:
    - core: Settings, logging, exceptions and legal schedules
    - domain.models: Pydantic records (loan, property, sale, SCI, tax results)
    - domain.calculator: Amortization, coverage, regimes, capital gains
    - application.services: SCI consolidation, exit pricing, goal search
"""

__version__ = "1.0.0"
