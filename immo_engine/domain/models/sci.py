"""Corporate vehicle (SCI à l'IS) models.

An SCI references its member properties by id; it does not own them. Tax is
computed on the consolidated result and allocated back to each member by
value-weighted prorata.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, computed_field

from .tax import RentalType


class SCI(BaseModel):
    """Société civile immobilière subject to corporate income tax (IS)."""

    id: str = Field(..., description="Vehicle identifier")
    name: str = Field(default="")
    capital: float = Field(default=1000.0, ge=0, description="Share capital in €")

    # IS brackets
    standard_rate_pct: float = Field(default=25.0, ge=0, le=100, description="Taux normal")
    reduced_rate_pct: float = Field(default=15.0, ge=0, le=100, description="Taux réduit PME")
    reduced_rate_threshold: float = Field(default=42_500.0, ge=0, description="Ceiling of the reduced bracket")

    # Deficits carried into the first year (no ceiling, no expiry)
    previous_deficit: float = Field(default=0.0, ge=0)

    # Default amortization durations (years) when a member declares none
    building_amortization_years: int = Field(default=25, ge=1)
    furniture_amortization_years: int = Field(default=10, ge=1)
    works_amortization_years: int = Field(default=10, ge=1)

    # Annual operating expenses of the vehicle itself
    accounting_fees: float = Field(default=0.0, ge=0)
    legal_fees: float = Field(default=0.0, ge=0)
    bank_fees: float = Field(default=0.0, ge=0)
    insurance_fees: float = Field(default=0.0, ge=0)
    other_expenses: float = Field(default=0.0, ge=0)

    rental_type: RentalType = Field(default=RentalType.UNFURNISHED, description="Revenue recognition for all members")
    property_ids: list[str] = Field(default_factory=list)

    @computed_field
    @property
    def operating_expenses(self) -> float:
        """Full-year operating expenses of the vehicle."""
        return (
            self.accounting_fees
            + self.legal_fees
            + self.bank_fees
            + self.insurance_fees
            + self.other_expenses
        )


class PropertyContribution(BaseModel):
    """One member's share of a consolidated year."""

    property_id: str
    property_name: str = ""
    revenues: float = 0.0
    expenses: float = 0.0
    amortization: float = 0.0
    contribution_to_result: float = Field(default=0.0, description="Informational, not taxed on its own")
    property_value: float = 0.0
    prorata_weight: float = Field(default=0.0, ge=0, le=1)
    allocated_is: float = 0.0


class SCITaxResult(BaseModel):
    """Consolidated IS computation of a vehicle for one year."""

    year: int
    total_revenues: float = 0.0
    total_deductible_expenses: float = Field(default=0.0, description="Member expenses plus vehicle operating expenses")
    operating_expenses: float = 0.0
    total_amortization: float = 0.0
    result_before_deficit: float = 0.0
    deficit_used: float = 0.0
    deficit_generated: float = 0.0
    deficit_carried_forward: float = Field(default=0.0, ge=0)
    taxable_income: float = 0.0
    is_at_reduced_rate: float = 0.0
    is_at_standard_rate: float = 0.0
    total_is: float = 0.0
    property_contributions: dict[str, PropertyContribution] = Field(default_factory=dict)

    def allocated_is_for(self, property_id: str) -> float:
        contribution = self.property_contributions.get(property_id)
        return contribution.allocated_is if contribution else 0.0
