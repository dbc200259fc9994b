"""Additional-elevation surcharge — progressive brackets.

Works like a tax-bracket table: each bracket bills only the elevations
that fall inside it, so the per-unit rate falls as the count grows.
"""

from __future__ import annotations

from cpq_engine.config.rates import RateConfiguration


def elevation_price(count: int, rates: RateConfiguration) -> float:
    """Total charge for ``count`` additional elevations."""
    remaining = max(int(count), 0)
    total = 0.0
    prev_ceiling = 0

    for bracket in rates.elevation_brackets:
        if remaining <= 0:
            break
        if bracket.ceiling is None:
            width = remaining
        else:
            width = bracket.ceiling - prev_ceiling
            prev_ceiling = bracket.ceiling
        qty = min(remaining, width)
        total += qty * bracket.rate
        remaining -= qty

    return total
