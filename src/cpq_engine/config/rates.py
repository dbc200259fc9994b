"""Rate configuration — every constant the pricing engine reads.

The field defaults ARE the compiled-in rate card.  A persisted record
(see ``config.loader``) is merged over them to produce a new immutable
snapshot; the engine never mutates one.  Pass the same snapshot through
an entire assemble/retarget cycle so a quote never mixes rate versions.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from cpq_engine.config.building_types import BUILT_LANDSCAPE, NATURAL_LANDSCAPE
from cpq_engine.config.codes import (
    Discipline,
    DispatchOrigin,
    DispatchOriginCode,
    Lod,
    LodCode,
    PaymentTerm,
    RiskCode,
    Scope,
)


# ═══════════════════════════════════════════════════════════════════════════
# Sub-tables
# ═══════════════════════════════════════════════════════════════════════════

class TravelRates(BaseModel):
    """Mileage rates for both dispatch algorithms."""

    model_config = ConfigDict(frozen=True)

    # --- Standard algorithm ---
    standard_rate_per_mile: float = Field(default=3.0, ge=0, description="$/mile, one-way distance")
    scan_day_fee_threshold_miles: float = Field(
        default=75.0, ge=0,
        description="At or beyond this one-way distance travel eats a full field day.",
    )
    scan_day_fee: float = Field(default=300.0, ge=0, description="Flat fee for the lost field day")

    # --- Tiered (short-haul) algorithm ---
    tiered_origin: DispatchOriginCode = Field(
        default=DispatchOrigin.BROOKLYN,
        description="The one dispatch origin that uses the tiered algorithm.",
    )
    tiered_rate_per_mile: float = Field(default=4.0, ge=0, description="$/mile beyond the free allowance")
    tiered_free_miles: float = Field(default=20.0, ge=0, description="Miles included in the base fee")
    tiered_base_fees: dict[str, float] = Field(
        default_factory=lambda: {"tierA": 0.0, "tierB": 300.0, "tierC": 150.0},
        description="Flat base fee per project-size tier.  Large projects justify dispatch on their own.",
    )
    tier_b_min_sqft: float = Field(default=10_000, ge=0, description="Total sqft at which tier B starts")
    tier_a_min_sqft: float = Field(default=50_000, ge=0, description="Total sqft at which tier A starts")

    @model_validator(mode="after")
    def _tiers_ordered(self) -> "TravelRates":
        if self.tier_b_min_sqft > self.tier_a_min_sqft:
            raise ValueError("tier_b_min_sqft must not exceed tier_a_min_sqft")
        for tier in ("tierA", "tierB", "tierC"):
            if self.tiered_base_fees.get(tier, 0.0) < 0:
                raise ValueError(f"tiered base fee for {tier} must be >= 0")
        return self


class ElevationBracket(BaseModel):
    """One progressive bracket: counts up to ``ceiling`` (inclusive) bill at ``rate``."""

    model_config = ConfigDict(frozen=True)

    ceiling: int | None = Field(default=None, ge=1, description="Inclusive count ceiling; None = unbounded")
    rate: float = Field(ge=0, description="$ per elevation inside this bracket")


class MarginGuardrails(BaseModel):
    """Margin thresholds, all in percent (40.0 = 40%)."""

    model_config = ConfigDict(frozen=True)

    floor_pct: float = Field(default=40.0, ge=0, lt=100, description="Below this the quote is blocked")
    guardrail_pct: float = Field(default=45.0, ge=0, lt=100, description="Below this the quote warns")
    slider_min_pct: float = Field(default=35.0, ge=0, lt=100, description="Lowest retarget margin")
    slider_max_pct: float = Field(default=60.0, ge=0, lt=100, description="Highest retarget margin")
    default_target_pct: float = Field(default=45.0, ge=0, lt=100, description="Suggested retarget margin")

    @model_validator(mode="after")
    def _ordered(self) -> "MarginGuardrails":
        if self.floor_pct > self.guardrail_pct:
            raise ValueError("floor_pct must not exceed guardrail_pct")
        if self.slider_min_pct >= self.slider_max_pct:
            raise ValueError("slider_min_pct must be below slider_max_pct")
        if not self.slider_min_pct <= self.default_target_pct <= self.slider_max_pct:
            raise ValueError("default_target_pct must sit inside the slider bounds")
        return self


def _type_key(value: Any) -> Any:
    return str(value).strip() if isinstance(value, (int, str)) else value


# YAML reads an unquoted `15:` key as an int.
BuildingTypeKey = Annotated[str, BeforeValidator(_type_key)]


def _default_landscape_rates() -> dict[str, dict[Lod, list[float]]]:
    # Per-acre rates for acreage tiers [<5, 5-20, 20-50, 50-100, 100+]
    return {
        BUILT_LANDSCAPE: {
            Lod.LOD_200: [875, 625, 375, 250, 160],
            Lod.LOD_300: [1000, 750, 500, 375, 220],
            Lod.LOD_350: [1250, 1000, 750, 500, 260],
        },
        NATURAL_LANDSCAPE: {
            Lod.LOD_200: [625, 375, 250, 200, 140],
            Lod.LOD_300: [750, 500, 375, 275, 200],
            Lod.LOD_350: [1000, 750, 500, 325, 240],
        },
    }


def _default_elevation_brackets() -> list[ElevationBracket]:
    return [
        ElevationBracket(ceiling=10, rate=25),
        ElevationBracket(ceiling=20, rate=20),
        ElevationBracket(ceiling=100, rate=15),
        ElevationBracket(ceiling=300, rate=10),
        ElevationBracket(ceiling=None, rate=5),
    ]


# ═══════════════════════════════════════════════════════════════════════════
# Rate card
# ═══════════════════════════════════════════════════════════════════════════

class RateConfiguration(BaseModel):
    """Complete, versioned rate card for one quote calculation."""

    model_config = ConfigDict(frozen=True)

    version: str = Field(default="FY26", description="Rate-card version label")

    # --- Per-discipline modeling rates ---
    base_rates: dict[Discipline, float] = Field(
        default_factory=lambda: {
            Discipline.ARCH: 0.25,
            Discipline.MEPF: 0.30,
            Discipline.STRUCTURE: 0.20,
            Discipline.SITE: 0.15,
        },
        description="Client $/sqft per discipline before LOD multiplier.",
    )
    lod_multipliers: dict[LodCode, float] = Field(
        default_factory=lambda: {Lod.LOD_200: 1.0, Lod.LOD_300: 1.3, Lod.LOD_350: 1.5},
    )
    risk_premiums: dict[RiskCode, float] = Field(
        default_factory=lambda: {
            RiskCode.OCCUPIED: 0.15,
            RiskCode.HAZARDOUS: 0.25,
            RiskCode.NO_POWER: 0.20,
        },
        description="Additive loading per risk code (0.15 = +15%).",
    )
    scope_portions: dict[Scope, float] = Field(
        default_factory=lambda: {Scope.FULL: 1.0, Scope.INTERIOR: 0.65, Scope.EXTERIOR: 0.35},
        description="Fraction of an area's surface documented for each scope.",
    )
    scope_discounts: dict[Scope, float] = Field(
        default_factory=lambda: {
            Scope.FULL: 0.0,
            Scope.INTERIOR: 0.35,
            Scope.EXTERIOR: 0.65,
            Scope.MIXED: 0.0,
        },
        description="Discount applied to an already-calculated price by scope.",
    )
    payment_term_premiums: dict[PaymentTerm, float] = Field(
        default_factory=lambda: {
            PaymentTerm.PARTNER: 0.0,
            PaymentTerm.OWNER: 0.0,
            PaymentTerm.NET30: 0.05,
            PaymentTerm.NET60: 0.10,
            PaymentTerm.NET90: 0.15,
        },
    )

    # --- Travel, specialty, brackets ---
    travel: TravelRates = Field(default_factory=TravelRates)
    landscape_rates: dict[BuildingTypeKey, dict[LodCode, list[float]]] = Field(
        default_factory=_default_landscape_rates,
        description="[building type][LOD] → per-acre rate for each acreage tier.",
    )
    landscape_acreage_breakpoints: list[float] = Field(
        default_factory=lambda: [5.0, 20.0, 50.0, 100.0],
        description="Lower bounds of acreage tiers 1..n; tier 0 is everything below the first.",
    )
    elevation_brackets: list[ElevationBracket] = Field(default_factory=_default_elevation_brackets)
    margins: MarginGuardrails = Field(default_factory=MarginGuardrails)

    # --- Scalars ---
    min_billable_sqft: float = Field(default=3_000, ge=0, description="Area floor applied before rates")
    fallback_cost_ratio: float = Field(
        default=0.65, ge=0, le=1.0,
        description="Cost basis as a fraction of client price when no cost rate is configured.",
    )
    sqft_per_acre: float = Field(default=43_560, gt=0)
    tier_a_threshold_sqft: float = Field(default=50_000, ge=0, description="Large-project review threshold")
    ceiling_rate_per_sqft: float = Field(default=0.20, ge=0, description="Above-ceiling-tile capture $/sqft")
    walkthrough_rate_per_sqft: float = Field(default=0.01, ge=0, description="Walkthrough overlay $/sqft")

    @model_validator(mode="after")
    def _check_tables(self) -> "RateConfiguration":
        for table_name in ("base_rates", "lod_multipliers", "risk_premiums", "scope_portions",
                           "scope_discounts", "payment_term_premiums"):
            for key, value in getattr(self, table_name).items():
                if value < 0:
                    raise ValueError(f"{table_name}[{key}] must be >= 0")

        breakpoints = self.landscape_acreage_breakpoints
        if any(b <= a for a, b in zip(breakpoints, breakpoints[1:])):
            raise ValueError("landscape_acreage_breakpoints must be strictly increasing")
        n_tiers = len(breakpoints) + 1
        for bt, by_lod in self.landscape_rates.items():
            for lod, tier_rates in by_lod.items():
                if len(tier_rates) != n_tiers:
                    raise ValueError(
                        f"landscape_rates[{bt}][{lod}] needs {n_tiers} tier rates, got {len(tier_rates)}"
                    )

        brackets = self.elevation_brackets
        if not brackets:
            raise ValueError("elevation_brackets must not be empty")
        ceilings = [b.ceiling for b in brackets]
        if any(c is None for c in ceilings[:-1]):
            raise ValueError("only the last elevation bracket may be unbounded")
        bounded = [c for c in ceilings if c is not None]
        if any(b <= a for a, b in zip(bounded, bounded[1:])):
            raise ValueError("elevation bracket ceilings must be strictly increasing")
        return self

    # ── Lookups ──────────────────────────────────────────────────────────
    # Unknown codes price at zero; unknown scope falls back to a full portion.

    def base_rate(self, discipline: Discipline) -> float:
        return self.base_rates.get(discipline, 0.0)

    def lod_multiplier(self, lod: Lod) -> float:
        return self.lod_multipliers.get(lod, 0.0)

    def risk_premium(self, risk: RiskCode) -> float:
        return self.risk_premiums.get(risk, 0.0)

    def scope_portion(self, scope: Scope) -> float:
        return self.scope_portions.get(scope, 1.0)

    def scope_discount(self, scope: Scope) -> float:
        return self.scope_discounts.get(scope, 0.0)

    def payment_term_premium(self, term: PaymentTerm) -> float:
        return self.payment_term_premiums.get(term, 0.0)

    def landscape_tier_rates(self, building_type: str, lod: Lod) -> list[float] | None:
        return self.landscape_rates.get(str(building_type), {}).get(lod)
