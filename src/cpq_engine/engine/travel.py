"""Travel cost calculator — one travel result per quote.

Two mutually exclusive algorithms, chosen by dispatch origin:

  standard  miles × $/mile, plus a flat scan-day fee once the one-way
            distance reaches the threshold (a full lost field day)
  tiered    the short-haul origin: flat base fee by project-size tier, plus
            $/mile beyond a free allowance; never a scan-day fee

Manual overrides from the quote input take precedence and are labelled
"custom".  Travel is billed at cost, so ``cost_basis == total_cost`` except
when a flat override replaces the billed total.
"""

from __future__ import annotations

import logging

from cpq_engine.config.codes import DispatchOrigin
from cpq_engine.config.quote_input import QuoteInput
from cpq_engine.config.rates import RateConfiguration
from cpq_engine.models.results import TravelResult, round_currency

logger = logging.getLogger(__name__)


def _money(value: float) -> str:
    if float(value).is_integer():
        return f"${value:,.0f}"
    return f"${value:,.2f}"


def _miles(value: float) -> str:
    return f"{value:g} mi"


# ═══════════════════════════════════════════════════════════════════════════
# Standard algorithm
# ═══════════════════════════════════════════════════════════════════════════

def standard_travel(
    miles: float,
    rates: RateConfiguration,
    rate_per_mile: float | None = None,
    scan_day_fee: float | None = None,
) -> TravelResult:
    """Mileage plus scan-day fee.

    ``rate_per_mile`` / ``scan_day_fee`` replace the rate-card amounts when
    given (manual overrides); the threshold itself is never overridden.
    """
    t = rates.travel
    miles = max(miles, 0.0)
    per_mile = t.standard_rate_per_mile if rate_per_mile is None else rate_per_mile
    fee_amount = t.scan_day_fee if scan_day_fee is None else scan_day_fee

    base_cost = round_currency(miles * per_mile)
    fee = fee_amount if miles >= t.scan_day_fee_threshold_miles else 0.0
    total = round_currency(base_cost + fee)

    label = f"Travel - {_miles(miles)} @ {_money(per_mile)}/mi"
    if fee > 0:
        label += f" + {_money(fee)} scan day fee"

    return TravelResult(
        algorithm="standard",
        base_cost=base_cost,
        scan_day_fee=round_currency(fee),
        total_cost=total,
        cost_basis=total,
        label=label,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Tiered algorithm
# ═══════════════════════════════════════════════════════════════════════════

def tiered_travel_tier(total_sqft: float, rates: RateConfiguration) -> str:
    """Project-size tier for the short-haul origin: tierA / tierB / tierC."""
    t = rates.travel
    if total_sqft >= t.tier_a_min_sqft:
        return "tierA"
    if total_sqft >= t.tier_b_min_sqft:
        return "tierB"
    return "tierC"


def tiered_travel(miles: float, total_sqft: float, rates: RateConfiguration) -> TravelResult:
    t = rates.travel
    miles = max(miles, 0.0)
    tier = tiered_travel_tier(total_sqft, rates)
    base_fee = t.tiered_base_fees.get(tier, 0.0)
    extra_miles = max(0.0, miles - t.tiered_free_miles)
    extra_cost = round_currency(extra_miles * t.tiered_rate_per_mile)
    total = round_currency(base_fee + extra_cost)

    label = f"Travel - {tier} base {_money(base_fee)}"
    if extra_miles > 0:
        label += f" + {_miles(extra_miles)} @ {_money(t.tiered_rate_per_mile)}/mi"

    return TravelResult(
        algorithm="tiered",
        base_cost=round_currency(base_fee),
        extra_miles_cost=extra_cost,
        total_cost=total,
        cost_basis=total,
        label=label,
        tier=tier,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Entry point
# ═══════════════════════════════════════════════════════════════════════════

def _as_custom(result: TravelResult) -> TravelResult:
    return result.model_copy(update={
        "algorithm": "custom",
        "tier": "custom",
        "label": result.label.replace("Travel - ", "Travel - custom: ", 1),
    })


def compute_travel(quote_input: QuoteInput, total_sqft: float, rates: RateConfiguration) -> TravelResult:
    """Travel for a whole quote, honouring manual overrides.

    Precedence:
      1. ``mileage_rate_override``: standard-shaped mileage at the given
         rate, for any origin (scan-day fee rule still applies).
      2. otherwise the origin picks the tiered or the standard algorithm;
         ``scan_day_fee_override`` replaces the standard fee amount and
         marks the result custom.
      3. ``travel_cost_override`` then replaces the billed total outright.
         Its cost basis stays the algorithmic cost.
    """
    miles = quote_input.distance_miles
    origin = quote_input.dispatch_origin

    if quote_input.mileage_rate_override is not None:
        result = standard_travel(
            miles, rates,
            rate_per_mile=quote_input.mileage_rate_override,
            scan_day_fee=quote_input.scan_day_fee_override,
        )
        result = _as_custom(result)
    elif origin is rates.travel.tiered_origin:
        result = tiered_travel(miles, total_sqft, rates)
    else:
        if origin is DispatchOrigin.UNKNOWN:
            logger.warning("Unknown dispatch origin, using standard travel")
        result = standard_travel(miles, rates, scan_day_fee=quote_input.scan_day_fee_override)
        if quote_input.scan_day_fee_override is not None:
            result = _as_custom(result)

    if quote_input.travel_cost_override is not None:
        flat = round_currency(quote_input.travel_cost_override)
        result = result.model_copy(update={
            "algorithm": "custom",
            "tier": "custom",
            "total_cost": flat,
            "label": f"Travel - custom flat {_money(flat)}",
        })

    logger.debug(
        "Travel origin=%s miles=%s → %s total=%.2f",
        origin.value, miles, result.algorithm, result.total_cost,
    )
    return result
