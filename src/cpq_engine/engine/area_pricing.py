"""Area pricing — one discipline's modeling work for one area.

floor → rate → scope portion.  Never raises: sizes are floored and unknown
codes price at zero, because a half-edited draft must still produce a quote.
"""

from __future__ import annotations

import logging

from cpq_engine.config.codes import Discipline, Lod, Scope
from cpq_engine.config.quote_input import NegotiatedRate
from cpq_engine.config.rates import RateConfiguration
from cpq_engine.models.results import AreaPricing

logger = logging.getLogger(__name__)

# (exclusive upper bound, label); the last band is open-ended.
_SIZE_BANDS: tuple[tuple[float, str], ...] = (
    (3_000, "0-3k"),
    (5_000, "3k-5k"),
    (10_000, "5k-10k"),
    (25_000, "10k-25k"),
    (50_000, "25k-50k"),
    (75_000, "50k-75k"),
    (100_000, "75k-100k"),
)


def effective_sqft(sqft: float, rates: RateConfiguration) -> float:
    """Billable size: the nominal size, floored at the minimum billable area."""
    return max(sqft, rates.min_billable_sqft)


def size_band(sqft: float) -> str:
    """Size band label used for rate lookups and reporting."""
    for upper, label in _SIZE_BANDS:
        if sqft < upper:
            return label
    return "100k+"


def price_area(
    sqft: float,
    discipline: Discipline,
    lod: Lod,
    scope_portion: float,
    rates: RateConfiguration,
    negotiated: NegotiatedRate | None = None,
) -> AreaPricing:
    """Price one discipline for one area.

    With a negotiated client rate the rate already encodes LOD, so the
    price is ``eff × client_rate × portion``.  Otherwise the rate card
    applies: ``eff × base_rate × lod_multiplier × portion``.  The cost side
    follows a negotiated cost rate when given, else the fallback cost ratio
    of the client price.  Both sides scale by the scope portion, so the
    unit margin percentage does not depend on scope.
    """
    eff = effective_sqft(sqft, rates)

    client_rate = negotiated.client_rate if negotiated else None
    cost_rate = negotiated.cost_rate if negotiated else None

    if client_rate is not None and client_rate > 0:
        client_price = eff * client_rate * scope_portion
    else:
        base_rate = rates.base_rate(discipline)
        lod_multiplier = rates.lod_multiplier(lod)
        if base_rate == 0 or lod_multiplier == 0:
            logger.warning(
                "No rate for discipline=%s lod=%s in rate card %s, pricing at zero",
                discipline.value, lod.value, rates.version,
            )
        client_price = eff * base_rate * lod_multiplier * scope_portion

    if cost_rate is not None and cost_rate > 0:
        cost_basis = eff * cost_rate * scope_portion
    else:
        cost_basis = client_price * rates.fallback_cost_ratio

    return AreaPricing(client_price=client_price, cost_basis=cost_basis, effective_sqft=eff)


def apply_scope_discount(price: float, scope: Scope, rates: RateConfiguration) -> float:
    """Discount an already-calculated price by scope: ``price × (1 − discount)``.

    Kept alongside the scope-portion rule in ``price_area``; the two tables
    are maintained separately on the rate card.
    """
    return price * (1 - rates.scope_discount(scope))
