"""Engine — per-item calculators, quote assembler and margin solver."""

from cpq_engine.engine.area_pricing import apply_scope_discount, effective_sqft, price_area, size_band
from cpq_engine.engine.specialty import (
    landscape_price,
    landscape_tier_index,
    price_ceiling,
    price_landscape,
    price_walkthrough,
)
from cpq_engine.engine.elevations import elevation_price
from cpq_engine.engine.risk import apply_risk_premium, combine_risks, risk_multiplier
from cpq_engine.engine.travel import compute_travel, standard_travel, tiered_travel, tiered_travel_tier
from cpq_engine.engine.assembler import (
    apply_payment_term_premium,
    assemble_quote,
    build_line_items,
    evaluate_integrity,
    is_tier_a,
    summarize_quote,
    total_project_sqft,
)
from cpq_engine.engine.solver import clamp_target_margin, retarget
from cpq_engine.engine.orchestrator import price_quote

__all__ = [
    "apply_scope_discount",
    "effective_sqft",
    "price_area",
    "size_band",
    "landscape_price",
    "landscape_tier_index",
    "price_ceiling",
    "price_landscape",
    "price_walkthrough",
    "elevation_price",
    "apply_risk_premium",
    "combine_risks",
    "risk_multiplier",
    "compute_travel",
    "standard_travel",
    "tiered_travel",
    "tiered_travel_tier",
    "apply_payment_term_premium",
    "assemble_quote",
    "build_line_items",
    "evaluate_integrity",
    "is_tier_a",
    "summarize_quote",
    "total_project_sqft",
    "clamp_target_margin",
    "retarget",
    "price_quote",
]
