"""Specialty calculators — landscape, ceiling-only, and walkthrough.

Each is a sibling of ``price_area``, selected by building-type
classification.  An area goes through exactly one calculator.
"""

from __future__ import annotations

import logging
from bisect import bisect_right

from cpq_engine.config.codes import Lod
from cpq_engine.config.rates import RateConfiguration
from cpq_engine.engine.area_pricing import effective_sqft
from cpq_engine.models.results import AreaPricing

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# Landscape (per acre)
# ═══════════════════════════════════════════════════════════════════════════

def landscape_tier_index(acres: float, rates: RateConfiguration) -> int:
    """Acreage tier: each breakpoint opens a new tier, top tier unbounded.

    With breakpoints [5, 20, 50, 100]: 4.99 → 0, 5 → 1, 100 → 4.
    """
    return bisect_right(rates.landscape_acreage_breakpoints, acres)


def landscape_price(building_type: str, acres: float, lod: Lod, rates: RateConfiguration) -> float:
    """Client price for a landscape area: ``acres × rate[type][lod][tier]``."""
    tier_rates = rates.landscape_tier_rates(building_type, lod)
    if not tier_rates:
        logger.warning(
            "No landscape rate for type=%s lod=%s in rate card %s, pricing at zero",
            building_type, lod.value, rates.version,
        )
        return 0.0
    acres = max(acres, 0.0)
    return acres * tier_rates[landscape_tier_index(acres, rates)]


def price_landscape(building_type: str, acres: float, lod: Lod, rates: RateConfiguration) -> AreaPricing:
    client_price = landscape_price(building_type, acres, lod, rates)
    return AreaPricing(
        client_price=client_price,
        cost_basis=client_price * rates.fallback_cost_ratio,
        effective_sqft=max(acres, 0.0),
    )


# ═══════════════════════════════════════════════════════════════════════════
# Flat-rate capture modes
# ═══════════════════════════════════════════════════════════════════════════

def price_ceiling(sqft: float, rates: RateConfiguration, scope_portion: float = 1.0) -> AreaPricing:
    """Above-ceiling-tile capture: floor → flat rate → scope portion, no LOD."""
    eff = effective_sqft(sqft, rates)
    client_price = eff * rates.ceiling_rate_per_sqft * scope_portion
    return AreaPricing(
        client_price=client_price,
        cost_basis=client_price * rates.fallback_cost_ratio,
        effective_sqft=eff,
    )


def price_walkthrough(sqft: float, rates: RateConfiguration) -> AreaPricing:
    """Photogrammetry walkthrough: floor → flat rate.  Always the full area."""
    eff = effective_sqft(sqft, rates)
    client_price = eff * rates.walkthrough_rate_per_sqft
    return AreaPricing(
        client_price=client_price,
        cost_basis=client_price * rates.fallback_cost_ratio,
        effective_sqft=eff,
    )
