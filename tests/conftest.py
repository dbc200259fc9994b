"""Shared test fixtures — the FY26 rate card and a few representative areas."""

from __future__ import annotations

from pathlib import Path

import pytest

from cpq_engine.config import (
    CeilingArea,
    LandscapeArea,
    QuoteInput,
    RateConfiguration,
    StandardArea,
)

REPO_ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def rates() -> RateConfiguration:
    return RateConfiguration()


@pytest.fixture
def office() -> StandardArea:
    """5,000 sqft office, architecture only, LOD 300, full scope."""
    return StandardArea(
        id="office",
        name="Office",
        building_type="1",
        square_feet=5_000,
        disciplines=["arch"],
        lod="300",
        scope="full",
    )


@pytest.fixture
def lawn() -> LandscapeArea:
    return LandscapeArea(id="lawn", name="Lawn", building_type="15", acres=3, lod="200")


@pytest.fixture
def ceilings() -> CeilingArea:
    return CeilingArea(id="act", name="Ceilings", square_feet=5_000)


@pytest.fixture
def office_quote(office) -> QuoteInput:
    """Office only, 30 miles from a standard origin, owner terms."""
    return QuoteInput(
        areas=[office],
        dispatch_origin="WOODSTOCK",
        distance_miles=30,
        payment_term="owner",
    )


@pytest.fixture
def sample_quote_path() -> Path:
    return REPO_ROOT / "examples" / "sample_quote.yaml"


@pytest.fixture
def default_rates_path() -> Path:
    return REPO_ROOT / "rates" / "default.yaml"
