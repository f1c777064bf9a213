"""Property data models.

A property record owns its loan, its yearly expense records and its tax
parameters. Records are created by the host application and handed to the
engine as plain data.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field, computed_field, model_validator

from .loan import LoanTerms


class YearlyExpenseRecord(BaseModel):
    """Revenues and charges declared for one calendar year (full-year amounts)."""

    year: int = Field(..., description="Calendar year")

    # Charges
    property_tax: float = Field(default=0.0, ge=0, description="Taxe foncière")
    condo_fees: float = Field(default=0.0, ge=0, description="Charges de copropriété")
    property_insurance: float = Field(default=0.0, ge=0, description="Assurance propriétaire (PNO)")
    management_fees: float = Field(default=0.0, ge=0, description="Frais de gestion")
    unpaid_rent_insurance: float = Field(default=0.0, ge=0, description="Garantie loyers impayés")
    repairs: float = Field(default=0.0, ge=0, description="Travaux d'entretien")
    other_deductible: float = Field(default=0.0, ge=0)
    other_non_deductible: float = Field(default=0.0, ge=0)

    # Revenues
    rent: float = Field(default=0.0, ge=0, description="Unfurnished rent")
    furnished_rent: float = Field(default=0.0, ge=0, description="Furnished rent")
    tenant_charges: float = Field(default=0.0, ge=0, description="Charges recharged to the tenant")
    tax_benefit: float = Field(default=0.0, ge=0, description="Regime-specific tax benefit")

    @computed_field
    @property
    def deductible_charges(self) -> float:
        """Full-year deductible charges, loan costs excluded."""
        return (
            self.property_tax
            + self.condo_fees
            + self.property_insurance
            + self.management_fees
            + self.unpaid_rent_insurance
            + self.repairs
            + self.other_deductible
        )


class TaxParameters(BaseModel):
    """Per-property tax parameters for the individual regimes."""

    marginal_rate_pct: float = Field(default=30.0, ge=0, le=100, description="Tranche marginale d'imposition %")
    social_charges_rate_pct: float = Field(default=17.2, ge=0, le=100, description="Prélèvements sociaux %")

    # Depreciable bases (réel BIC)
    building_value: float = Field(default=0.0, ge=0, description="Building value, land excluded")
    building_amortization_years: int = Field(default=25, ge=1)
    furniture_value: float = Field(default=0.0, ge=0)
    furniture_amortization_years: int = Field(default=10, ge=1)
    works_value: float = Field(default=0.0, ge=0)
    works_amortization_years: int = Field(default=10, ge=1)
    other_value: float = Field(default=0.0, ge=0)
    other_amortization_years: int = Field(default=5, ge=1)

    # Deficits
    previous_deficit: float = Field(default=0.0, ge=0, description="Foncier deficit carried into the first year")
    previous_bic_deficit: float = Field(default=0.0, ge=0, description="BIC deficit carried into the first year")
    deficit_ceiling: float | None = Field(
        default=None, ge=0, description="Foncier deficit ceiling; None uses the configured default"
    )


class Property(BaseModel):
    """Investment property held directly or through a corporate vehicle."""

    id: str = Field(..., description="Property identifier")
    name: str = Field(default="", description="Display name")

    # Holding period
    project_start_date: dt.date = Field(..., description="Acquisition date")
    project_end_date: dt.date = Field(..., description="Planned end of holding")

    # Acquisition
    purchase_price: float = Field(..., ge=0, description="Purchase price in €")
    agency_fees: float = Field(default=0.0, ge=0)
    notary_fees: float = Field(default=0.0, ge=0)
    bank_fees: float = Field(default=0.0, ge=0)
    bank_guarantee_fees: float = Field(default=0.0, ge=0)
    mandatory_diagnostics: float = Field(default=0.0, ge=0)
    renovation_costs: float = Field(default=0.0, ge=0)
    down_payment: float | None = Field(
        default=None, ge=0, description="Apport personnel; None derives it from costs net of the loan"
    )

    # Financing
    loan: LoanTerms | None = Field(default=None, description="None for a cash purchase")

    # Operations
    expenses: list[YearlyExpenseRecord] = Field(default_factory=list)
    vacancy_rate_pct: float = Field(default=0.0, ge=0, le=100, description="Vacance locative %")
    tax_parameters: TaxParameters = Field(default_factory=TaxParameters)

    # Furnished specifics
    is_lmp: bool = Field(default=False, description="Loueur en meublé professionnel")
    accumulated_depreciation: float | None = Field(
        default=None, ge=0, description="Declared depreciation taken; None derives it from réel BIC results"
    )

    # Corporate vehicle
    sci_property_value: float | None = Field(default=None, ge=0, description="Value used for IS prorata")

    @model_validator(mode="after")
    def _check_consistency(self) -> Property:
        if self.project_end_date < self.project_start_date:
            raise ValueError(
                f"project_end_date {self.project_end_date} is before project_start_date {self.project_start_date}"
            )
        years = [e.year for e in self.expenses]
        if len(years) != len(set(years)):
            raise ValueError("expenses must hold at most one record per year")
        return self

    @property
    def start_year(self) -> int:
        return self.project_start_date.year

    @property
    def end_year(self) -> int:
        return self.project_end_date.year

    @property
    def years(self) -> range:
        """Calendar years touched by the holding period."""
        return range(self.start_year, self.end_year + 1)

    @property
    def acquisition_fees(self) -> float:
        return self.notary_fees + self.agency_fees

    @property
    def gross_investment(self) -> float:
        """Base of the gross yield: price, agency fees and renovation."""
        return self.purchase_price + self.agency_fees + self.renovation_costs

    @property
    def total_acquisition_cost(self) -> float:
        return (
            self.purchase_price
            + self.agency_fees
            + self.notary_fees
            + self.bank_fees
            + self.bank_guarantee_fees
            + self.mandatory_diagnostics
            + self.renovation_costs
        )

    @property
    def initial_equity(self) -> float:
        """Cash put in at acquisition, both for the total gain and the IRR."""
        if self.down_payment is not None:
            return self.down_payment
        borrowed = self.loan.principal if self.loan is not None else 0.0
        return max(0.0, self.total_acquisition_cost - borrowed)

    @property
    def sci_value(self) -> float:
        """Value weighting this property in its corporate vehicle."""
        if self.sci_property_value is not None:
            return self.sci_property_value
        return self.purchase_price

    def expenses_for_year(self, year: int) -> YearlyExpenseRecord:
        """Record for ``year``; an all-zero record when none was declared."""
        for record in self.expenses:
            if record.year == year:
                return record
        return YearlyExpenseRecord(year=year)
