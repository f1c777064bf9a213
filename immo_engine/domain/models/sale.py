"""Exit (sale) parameters and results."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from .tax import RentalType, TaxRegime


class SaleParameters(BaseModel):
    """Assumptions used only when pricing an exit."""

    annual_increase_pct: float = Field(default=2.0, ge=-100, description="Annual price appreciation %")
    agency_fees: float = Field(default=0.0, ge=0, description="Agency fee paid at sale in €")
    early_repayment_fees: float = Field(default=0.0, ge=0, description="Indemnités de remboursement anticipé")
    improvement_works: float = Field(default=0.0, ge=0, description="Works not deducted from rental income")


class CapitalGainResult(BaseModel):
    """Capital-gains taxation of a sale."""

    holding_years: int
    gross_capital_gain: float = Field(..., description="Net selling price minus corrected purchase price")
    income_tax_discount: float = 0.0
    social_discount: float = 0.0
    short_term_gain: float = Field(default=0.0, description="Part taxed at the business marginal rate")
    long_term_gain: float = Field(default=0.0, description="Part taxed under the real-estate rules")
    short_term_tax: float = 0.0
    income_tax: float = 0.0
    social_charges: float = 0.0
    total_tax: float = 0.0

    @property
    def net_capital_gain(self) -> float:
        return self.gross_capital_gain - self.total_tax


class BalanceYear(BaseModel):
    """Position of a holding if it were sold at the end of ``year``."""

    year: int
    annual_cash_flow_before_tax: float
    annual_tax: float
    annual_cash_flow: float
    cumulative_cash_flow_before_tax: float
    cumulative_tax: float
    cumulative_cash_flow: float
    revalued_price: float
    net_selling_price: float
    remaining_balance: float
    sale_balance: float = Field(..., description="Net selling price minus outstanding debt")
    capital_gain_tax: float
    total_gain: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "Année": self.year,
            "Cash-Flow Avant Impôt": self.annual_cash_flow_before_tax,
            "Impôt": self.annual_tax,
            "Cash-Flow Net": self.annual_cash_flow,
            "Cash-Flow Cumulé Avant Impôt": self.cumulative_cash_flow_before_tax,
            "Impôt Cumulé": self.cumulative_tax,
            "Cash-Flow Cumulé": self.cumulative_cash_flow,
            "Prix Revalorisé": self.revalued_price,
            "Prix Net Vendeur": self.net_selling_price,
            "Capital Restant Dû": self.remaining_balance,
            "Solde de Revente": self.sale_balance,
            "Impôt Plus-Value": self.capital_gain_tax,
            "Gain Total": self.total_gain,
        }


class ExitBalance(BaseModel):
    """Full exit pricing for one sale year under one regime or rental type."""

    year: int
    regime: TaxRegime | None = None
    rental_type: RentalType | None = None
    revalued_price: float
    net_selling_price: float
    remaining_balance: float
    early_repayment_fees: float
    sale_balance: float
    cumulative_cash_flow: float
    capital_gain: CapitalGainResult
    down_payment: float
    total_gain: float

    @property
    def capital_gain_tax(self) -> float:
        return self.capital_gain.total_tax
