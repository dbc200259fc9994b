"""Quote assembler — areas → line items → guarded totals.

Two halves:
  ``build_line_items``  expands every area into priced lines (per
                        discipline, specialty, elevation, walkthrough add-on)
  ``summarize_quote``   the aggregation half: subtotals, payment term,
                        margin, integrity flags, Tier A.  The margin solver
                        re-runs only this half.

Entry point: ``assemble_quote(quote_input, rates)``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from cpq_engine.config.building_types import building_type_name
from cpq_engine.config.codes import Discipline, Lod, PaymentTerm, RiskCode, Scope
from cpq_engine.config.quote_input import (
    Area,
    CeilingArea,
    LandscapeArea,
    QuoteInput,
    StandardArea,
    WalkthroughArea,
)
from cpq_engine.config.rates import RateConfiguration
from cpq_engine.engine.area_pricing import price_area, size_band
from cpq_engine.engine.elevations import elevation_price
from cpq_engine.engine.risk import combine_risks, discipline_risk_multiplier
from cpq_engine.engine.specialty import price_ceiling, price_landscape, price_walkthrough
from cpq_engine.engine.travel import compute_travel
from cpq_engine.models.results import (
    AreaPricing,
    CategorySubtotals,
    IntegrityFlag,
    IntegrityStatus,
    LineCategory,
    LineItem,
    QuoteResult,
    TravelResult,
    round_currency,
)

logger = logging.getLogger(__name__)

_DISCIPLINE_LABELS = {
    Discipline.ARCH: "Architecture",
    Discipline.MEPF: "MEPF",
    Discipline.STRUCTURE: "Structure",
    Discipline.SITE: "Site/Civil",
}

TRAVEL_AREA_ID = "travel"


# ═══════════════════════════════════════════════════════════════════════════
# Project-level helpers
# ═══════════════════════════════════════════════════════════════════════════

def total_project_sqft(areas: Iterable[Area], rates: RateConfiguration) -> float:
    """Footprint across all areas; landscape acres convert to square feet."""
    total = 0.0
    for area in areas:
        if isinstance(area, LandscapeArea):
            total += area.acres * rates.sqft_per_acre
        else:
            total += area.square_feet
    return total


def is_tier_a(total_sqft: float, rates: RateConfiguration) -> bool:
    return total_sqft >= rates.tier_a_threshold_sqft


def apply_payment_term_premium(subtotal: float, term: PaymentTerm, rates: RateConfiguration) -> float:
    """``subtotal × (1 + premium[term])``."""
    return subtotal * (1 + rates.payment_term_premium(term))


def evaluate_integrity(
    margin_pct: float,
    line_items: list[LineItem],
    tier_a: bool,
    rates: RateConfiguration,
) -> tuple[IntegrityStatus, list[IntegrityFlag]]:
    """Integrity verdict from the (unrounded) gross-margin percentage.

    Status is decided only by the margin thresholds; the other flags are
    informational.
    """
    m = rates.margins
    flags: list[IntegrityFlag] = []

    if margin_pct < m.floor_pct:
        status = IntegrityStatus.BLOCKED
        flags.append(IntegrityFlag(
            code="MARGIN_FLOOR",
            message=f"Gross margin {margin_pct:.1f}% is below the {rates.version} floor of {m.floor_pct:g}%",
            severity="error",
        ))
    elif margin_pct < m.guardrail_pct:
        status = IntegrityStatus.WARNING
        flags.append(IntegrityFlag(
            code="MARGIN_GUARDRAIL",
            message=f"Gross margin {margin_pct:.1f}% is below the guardrail of {m.guardrail_pct:g}%",
            severity="warning",
        ))
    else:
        status = IntegrityStatus.PASSED

    negative = [li for li in line_items if li.has_negative_margin]
    if negative:
        flags.append(IntegrityFlag(
            code="NEGATIVE_MARGIN_ITEMS",
            message=f"{len(negative)} line item(s) priced below cost",
            severity="info",
        ))
    if tier_a:
        flags.append(IntegrityFlag(
            code="TIER_A_REVIEW",
            message=(
                f"Project is at or above {rates.tier_a_threshold_sqft:,.0f} sqft "
                "and needs manual review"
            ),
            severity="info",
        ))
    return status, flags


# ═══════════════════════════════════════════════════════════════════════════
# Line item expansion
# ═══════════════════════════════════════════════════════════════════════════

class _LineBuilder:
    """Accumulates line items with sequential ids ``li-1``, ``li-2``, …"""

    def __init__(self) -> None:
        self.items: list[LineItem] = []

    def add(
        self,
        area: Area,
        label: str,
        category: LineCategory,
        pricing: AreaPricing,
        *,
        sqft: float = 0.0,
        discipline: Discipline | None = None,
        lod: Lod | None = None,
        scope: Scope | None = None,
        band: str = "",
        risk_multiplier: float = 1.0,
        client_price: float | None = None,
    ) -> LineItem:
        item = LineItem(
            id=f"li-{len(self.items) + 1}",
            area_id=area.id,
            area_name=area.display_name,
            label=label,
            discipline=discipline,
            category=category,
            building_type=area.building_type,
            sqft=sqft,
            effective_sqft=pricing.effective_sqft,
            size_band=band,
            lod=lod,
            scope=scope,
            client_price=round_currency(pricing.client_price if client_price is None else client_price),
            cost_basis=round_currency(pricing.cost_basis),
            risk_multiplier=risk_multiplier,
        )
        self.items.append(item)
        return item


def _line_label(*parts: str) -> str:
    return " - ".join(p for p in parts if p)


def _expand_standard(
    area: StandardArea,
    project_risks: list[RiskCode],
    rates: RateConfiguration,
    out: _LineBuilder,
) -> None:
    bt_name = building_type_name(area.building_type)
    band = size_band(area.square_feet)
    risks = combine_risks(area.risks, project_risks)

    for discipline in area.disciplines:
        override = area.discipline_overrides.get(discipline)
        lod = override.lod if override and override.lod is not None else area.lod
        scope = override.scope if override and override.scope is not None else area.scope
        lod_is_explicit = bool(override and override.lod is not None)

        if scope is Scope.MIXED:
            parts = [
                (Scope.INTERIOR, lod if lod_is_explicit else (area.mixed_interior_lod or lod)),
                (Scope.EXTERIOR, lod if lod_is_explicit else (area.mixed_exterior_lod or lod)),
            ]
        else:
            parts = [(scope, lod)]

        multiplier = discipline_risk_multiplier(discipline, risks, rates)
        for part_scope, part_lod in parts:
            pricing = price_area(
                area.square_feet,
                discipline,
                part_lod,
                rates.scope_portion(part_scope),
                rates,
                negotiated=area.negotiated_rates.get(discipline),
            )
            label = _line_label(
                _DISCIPLINE_LABELS.get(discipline, discipline.value),
                bt_name,
                f"{area.square_feet:,.0f} SF",
                f"LoD {part_lod.value}",
                f"{part_scope.value.title()} Scope",
            )
            out.add(
                area, label, LineCategory.MODELING, pricing,
                sqft=area.square_feet, discipline=discipline, lod=part_lod,
                scope=part_scope, band=band, risk_multiplier=multiplier,
                client_price=pricing.client_price * multiplier,
            )

    if area.include_walkthrough:
        pricing = price_walkthrough(area.square_feet, rates)
        out.add(
            area, _line_label("Walkthrough", area.display_name), LineCategory.SERVICE, pricing,
            sqft=area.square_feet, band=band,
        )


def _expand_area(
    area: Area,
    project_risks: list[RiskCode],
    rates: RateConfiguration,
    out: _LineBuilder,
) -> None:
    bt_name = building_type_name(area.building_type)

    if isinstance(area, StandardArea):
        _expand_standard(area, project_risks, rates, out)
    elif isinstance(area, LandscapeArea):
        pricing = price_landscape(area.building_type, area.acres, area.lod, rates)
        out.add(
            area, _line_label(bt_name, f"{area.acres:g} ac", f"LoD {area.lod.value}"),
            LineCategory.MODELING, pricing, sqft=area.acres, lod=area.lod,
        )
    elif isinstance(area, CeilingArea):
        pricing = price_ceiling(area.square_feet, rates, rates.scope_portion(area.scope))
        out.add(
            area,
            _line_label(bt_name, f"{area.square_feet:,.0f} SF", f"{area.scope.value.title()} Scope"),
            LineCategory.SERVICE, pricing,
            sqft=area.square_feet, scope=area.scope, band=size_band(area.square_feet),
        )
    elif isinstance(area, WalkthroughArea):
        pricing = price_walkthrough(area.square_feet, rates)
        out.add(
            area, _line_label(bt_name, f"{area.square_feet:,.0f} SF"),
            LineCategory.SERVICE, pricing,
            sqft=area.square_feet, band=size_band(area.square_feet),
        )

    if area.additional_elevations > 0:
        price = elevation_price(area.additional_elevations, rates)
        pricing = AreaPricing(
            client_price=price,
            cost_basis=price * rates.fallback_cost_ratio,
            effective_sqft=0.0,
        )
        out.add(
            area,
            _line_label("Additional Elevations", area.display_name, f"{area.additional_elevations} ea"),
            LineCategory.ELEVATION, pricing,
        )


def build_line_items(quote_input: QuoteInput, rates: RateConfiguration) -> list[LineItem]:
    """Every non-travel line item, in area order."""
    out = _LineBuilder()
    for area in quote_input.areas:
        before = len(out.items)
        _expand_area(area, quote_input.risks, rates, out)
        logger.debug("Area %s (%s) → %d line item(s)", area.id, area.kind, len(out.items) - before)
    return out.items


def travel_line_item(travel: TravelResult, line_id: str) -> LineItem:
    return LineItem(
        id=line_id,
        area_id=TRAVEL_AREA_ID,
        area_name="Travel",
        label=travel.label,
        category=LineCategory.TRAVEL,
        client_price=travel.total_cost,
        cost_basis=travel.cost_basis,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Aggregation half
# ═══════════════════════════════════════════════════════════════════════════

def summarize_quote(
    line_items: list[LineItem],
    travel: TravelResult,
    payment_term: PaymentTerm,
    project_sqft: float,
    rates: RateConfiguration,
    applied_target_margin_pct: float | None = None,
) -> QuoteResult:
    """Aggregate already-priced line items into a guarded quote."""
    by_category = {category: 0.0 for category in LineCategory}
    for li in line_items:
        by_category[li.category] += li.client_price

    subtotals = CategorySubtotals(
        modeling=round_currency(by_category[LineCategory.MODELING]),
        travel=round_currency(by_category[LineCategory.TRAVEL]),
        services=round_currency(by_category[LineCategory.SERVICE]),
        elevations=round_currency(by_category[LineCategory.ELEVATION]),
    )

    total_client = sum(li.client_price for li in line_items)
    total_cost = sum(li.cost_basis for li in line_items)
    gross_margin = total_client - total_cost
    margin_pct = (gross_margin / total_client * 100) if total_client > 0 else 0.0

    grand_total = apply_payment_term_premium(total_client, payment_term, rates)
    tier_a = is_tier_a(project_sqft, rates)
    status, flags = evaluate_integrity(margin_pct, line_items, tier_a, rates)

    if status is IntegrityStatus.BLOCKED:
        logger.warning("Quote blocked: gross margin %.2f%% < floor %.2f%%", margin_pct, rates.margins.floor_pct)

    return QuoteResult(
        line_items=line_items,
        travel=travel,
        subtotals=subtotals,
        total_cost_basis=round_currency(total_cost),
        total_client_price=round_currency(total_client),
        gross_margin=round_currency(gross_margin),
        gross_margin_pct=round(margin_pct, 2),
        integrity_status=status,
        integrity_flags=flags,
        payment_term=payment_term,
        payment_term_premium=round_currency(grand_total - total_client),
        grand_total=round_currency(grand_total),
        total_project_sqft=round(project_sqft, 2),
        is_tier_a=tier_a,
        applied_target_margin_pct=applied_target_margin_pct,
        rates_version=rates.version,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Public entry point
# ═══════════════════════════════════════════════════════════════════════════

def assemble_quote(quote_input: QuoteInput, rates: RateConfiguration) -> QuoteResult:
    """Price a quote input at rate-card prices (no margin retargeting)."""
    line_items = build_line_items(quote_input, rates)

    project_sqft = total_project_sqft(quote_input.areas, rates)
    travel = compute_travel(quote_input, project_sqft, rates)
    # A zero flat override still carries the algorithmic cost.
    if travel.total_cost > 0 or travel.cost_basis > 0:
        line_items.append(travel_line_item(travel, f"li-{len(line_items) + 1}"))

    return summarize_quote(line_items, travel, quote_input.payment_term, project_sqft, rates)
