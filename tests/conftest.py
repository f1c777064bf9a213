"""Pytest fixtures for immo_engine tests."""

import datetime as dt
import os
import sys

import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from immo_engine.core.settings import EngineSettings
from immo_engine.domain.models import (
    SCI,
    LoanTerms,
    Property,
    SaleParameters,
    TaxParameters,
    YearlyExpenseRecord,
)


def make_expenses(start_year: int, end_year: int, **amounts) -> list[YearlyExpenseRecord]:
    """Same full-year amounts for every year of the range."""
    return [YearlyExpenseRecord(year=y, **amounts) for y in range(start_year, end_year + 1)]


def make_property(**overrides) -> Property:
    """Full-year holding 2024-2033 with no loan and no charges unless overridden."""
    data = {
        "id": "p1",
        "name": "T2 Lyon",
        "project_start_date": dt.date(2024, 1, 1),
        "project_end_date": dt.date(2033, 12, 31),
        "purchase_price": 200_000.0,
    }
    data.update(overrides)
    return Property(**data)


@pytest.fixture
def settings():
    """Default rule parameters, independent of the environment."""
    return EngineSettings(_env_file=None)


@pytest.fixture
def standard_loan():
    """200k€ at 3% over 20 years, no deferral."""
    return LoanTerms(
        principal=200_000,
        annual_rate_pct=3.0,
        duration_years=20,
        insurance_rate_pct=0.36,
        disbursement_date=dt.date(2024, 1, 15),
    )


@pytest.fixture
def rented_property(standard_loan):
    """Unfurnished flat with a loan, charges and rent over 2024-2033."""
    return make_property(
        agency_fees=5_000,
        notary_fees=15_000,
        down_payment=20_000,
        loan=standard_loan,
        expenses=make_expenses(
            2024,
            2033,
            property_tax=1_000,
            condo_fees=1_200,
            property_insurance=200,
            other_non_deductible=100,
            rent=12_000,
            furnished_rent=15_000,
            tenant_charges=600,
        ),
        tax_parameters=TaxParameters(
            marginal_rate_pct=30,
            building_value=150_000,
            furniture_value=10_000,
        ),
    )


@pytest.fixture
def partial_year_property():
    """Held from 2024-07-01 to 2027-06-30."""
    return make_property(
        project_start_date=dt.date(2024, 7, 1),
        project_end_date=dt.date(2027, 6, 30),
        expenses=make_expenses(2024, 2027, rent=12_000, furnished_rent=12_000),
    )


@pytest.fixture
def sale_params():
    return SaleParameters(annual_increase_pct=2.0, agency_fees=5_000)


@pytest.fixture
def sci_members():
    """Two members valued 200k and 300k, no loan."""
    a = make_property(
        id="a",
        purchase_price=200_000,
        expenses=make_expenses(2024, 2033, rent=20_000),
    )
    b = make_property(
        id="b",
        purchase_price=300_000,
        expenses=make_expenses(2024, 2033, rent=30_000),
    )
    return [a, b]


@pytest.fixture
def sci():
    return SCI(id="sci-1", name="SCI Famille", property_ids=["a", "b"])


@pytest.fixture
def property_factory():
    """Build a Property from ``make_property`` defaults plus overrides."""
    return make_property


@pytest.fixture
def expenses_factory():
    """Build identical yearly expense records over a year range."""
    return make_expenses
