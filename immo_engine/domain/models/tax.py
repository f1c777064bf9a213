"""Tax regime and yearly tax result models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class RentalType(str, Enum):
    """Letting mode, which drives revenue recognition."""

    UNFURNISHED = "unfurnished"  # location nue
    FURNISHED = "furnished"  # location meublée


class TaxRegime(str, Enum):
    """Individual rental-income tax treatments.

    Declaration order is the canonical enumeration order used for tie-breaks.
    """

    MICRO_FONCIER = "micro-foncier"
    REEL_FONCIER = "reel-foncier"
    MICRO_BIC = "micro-bic"
    REEL_BIC = "reel-bic"

    @property
    def rental_type(self) -> RentalType:
        if self in (TaxRegime.MICRO_BIC, TaxRegime.REEL_BIC):
            return RentalType.FURNISHED
        return RentalType.UNFURNISHED

    @property
    def is_furnished(self) -> bool:
        return self.rental_type == RentalType.FURNISHED

    @property
    def is_micro(self) -> bool:
        return self in (TaxRegime.MICRO_FONCIER, TaxRegime.MICRO_BIC)


class AmortizationBreakdown(BaseModel):
    """Depreciation of a furnished property for one year (réel BIC)."""

    building: float = 0.0
    furniture: float = 0.0
    works: float = 0.0
    other: float = 0.0
    used: float = Field(default=0.0, description="Part that actually reduced the taxable result")

    @property
    def total(self) -> float:
        return self.building + self.furniture + self.works + self.other

    @property
    def dropped(self) -> float:
        """Amortization left unused this year (not carried forward)."""
        return self.total - self.used


class RegimeResult(BaseModel):
    """Outcome of one regime for one year.

    ``deficit_carried_forward`` is the only state the next year reads.
    """

    regime: TaxRegime
    year: int
    revenue: float = Field(default=0.0, description="Coverage-adjusted recognized revenue")
    deductible_expenses: float = Field(default=0.0, description="Charges deducted (0 for micro regimes)")
    taxable_income: float = 0.0
    income_tax: float = 0.0
    social_charges: float = 0.0
    total_tax: float = 0.0
    net_income: float = Field(default=0.0, description="Revenue minus total tax (informational)")
    deficit_used: float = Field(default=0.0, description="Prior deficit imputed this year")
    deficit_carried_forward: float = Field(default=0.0, ge=0)
    deficit_imputed_on_global_income: float = Field(
        default=0.0, description="Foncier deficit deducted from global income within the ceiling"
    )
    amortization: AmortizationBreakdown | None = None

    model_config = {
        "frozen": True,
    }
