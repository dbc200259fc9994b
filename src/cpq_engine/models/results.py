"""Result types — the contract between the engine, a UI, and persistence.

A ``QuoteResult`` is display-ready and storage-ready as produced: currency
values are rounded to cents when a model is built, so no consumer has to
do further math on them.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from cpq_engine.config.codes import Discipline, Lod, PaymentTerm, Scope


def round_currency(value: float) -> float:
    """Round to whole cents."""
    return round(value + 0.0, 2)


class LineCategory(str, Enum):
    MODELING = "modeling"
    TRAVEL = "travel"
    SERVICE = "service"
    ELEVATION = "elevation"


class IntegrityStatus(str, Enum):
    """Margin guardrail verdict.  Callers must refuse to save ``blocked`` quotes."""

    PASSED = "passed"
    WARNING = "warning"
    BLOCKED = "blocked"


Severity = Literal["info", "warning", "error"]


# ═══════════════════════════════════════════════════════════════════════════
# Per-calculator outputs
# ═══════════════════════════════════════════════════════════════════════════

class AreaPricing(BaseModel):
    """Output of one area/specialty calculator call."""

    client_price: float
    cost_basis: float
    effective_sqft: float
    """Billable size after the minimum floor (acres for landscape)."""


class TravelResult(BaseModel):
    """One travel computation for the whole quote.

    Travel is a pass-through cost centre: ``cost_basis`` equals
    ``total_cost`` unless a flat manual override replaced the price.
    """

    algorithm: Literal["standard", "tiered", "custom"]
    base_cost: float
    extra_miles_cost: float = 0.0
    scan_day_fee: float = 0.0
    total_cost: float
    """What the client is billed for travel."""
    cost_basis: float
    """What the travel actually costs us (algorithmic total)."""
    label: str
    tier: str | None = None
    """tierA/tierB/tierC for the tiered algorithm, 'custom' for overrides."""


# ═══════════════════════════════════════════════════════════════════════════
# Line items
# ═══════════════════════════════════════════════════════════════════════════

class LineItem(BaseModel):
    """One priced line.  Immutable once computed; the solver builds new ones."""

    model_config = ConfigDict(frozen=True)

    id: str
    area_id: str
    area_name: str
    label: str
    discipline: Discipline | None = None
    """Modeling discipline; None for specialty, elevation and travel lines."""
    category: LineCategory
    building_type: str = ""
    sqft: float = 0.0
    effective_sqft: float = 0.0
    size_band: str = ""
    lod: Lod | None = None
    scope: Scope | None = None
    client_price: float
    cost_basis: float
    risk_multiplier: float = 1.0

    @property
    def margin(self) -> float:
        return round_currency(self.client_price - self.cost_basis)

    @property
    def has_negative_margin(self) -> bool:
        return self.client_price < self.cost_basis


class CategorySubtotals(BaseModel):
    """Client-price subtotals by line category."""

    modeling: float = 0.0
    travel: float = 0.0
    services: float = 0.0
    elevations: float = 0.0

    @property
    def total(self) -> float:
        return round_currency(self.modeling + self.travel + self.services + self.elevations)


class IntegrityFlag(BaseModel):
    code: str
    message: str
    severity: Severity


# ═══════════════════════════════════════════════════════════════════════════
# Quote
# ═══════════════════════════════════════════════════════════════════════════

class QuoteResult(BaseModel):
    """Full output of the assembler (and of the margin solver)."""

    line_items: list[LineItem]
    travel: TravelResult
    subtotals: CategorySubtotals

    total_cost_basis: float
    total_client_price: float
    """Sum of line client prices, before the payment-term premium."""
    gross_margin: float
    gross_margin_pct: float
    """gross_margin / total_client_price × 100; 0 when nothing is priced."""

    integrity_status: IntegrityStatus
    integrity_flags: list[IntegrityFlag] = Field(default_factory=list)

    payment_term: PaymentTerm
    payment_term_premium: float
    grand_total: float

    total_project_sqft: float
    """Footprint across all areas, landscape acres converted to sqft."""
    is_tier_a: bool
    """Large project, needs manual review; does not change pricing."""

    applied_target_margin_pct: float | None = None
    """Margin the solver priced to, after clamping; None if never retargeted."""
    rates_version: str = ""

    @property
    def can_save(self) -> bool:
        return self.integrity_status is not IntegrityStatus.BLOCKED

    def lines_for_area(self, area_id: str) -> list[LineItem]:
        return [li for li in self.line_items if li.area_id == area_id]
