"""Data models for immo_engine."""

from .loan import AmortizationRow, AmortizationSchedule, DeferralType, LoanTerms
from .property import Property, TaxParameters, YearlyExpenseRecord
from .sale import BalanceYear, CapitalGainResult, ExitBalance, SaleParameters
from .sci import SCI, PropertyContribution, SCITaxResult
from .tax import AmortizationBreakdown, RegimeResult, RentalType, TaxRegime

__all__ = [
    "AmortizationBreakdown",
    "AmortizationRow",
    "AmortizationSchedule",
    "BalanceYear",
    "CapitalGainResult",
    "DeferralType",
    "ExitBalance",
    "LoanTerms",
    "Property",
    "PropertyContribution",
    "RegimeResult",
    "RentalType",
    "SaleParameters",
    "SCI",
    "SCITaxResult",
    "TaxParameters",
    "TaxRegime",
    "YearlyExpenseRecord",
]
