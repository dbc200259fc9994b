"""Margin-target solver — reprice every line to a target margin.

Cost-plus inversion of the margin formula:

    price = cost / (1 − m/100)

Cost bases never move; travel lines (billed at cost) and lines with no
cost are left alone.  Only the aggregation half of the assembler is re-run.
"""

from __future__ import annotations

import logging

from cpq_engine.config.rates import RateConfiguration
from cpq_engine.engine.assembler import summarize_quote
from cpq_engine.models.results import LineCategory, LineItem, QuoteResult, round_currency

logger = logging.getLogger(__name__)


def clamp_target_margin(target_pct: float, rates: RateConfiguration) -> float:
    """Clamp a requested margin into the configured slider bounds."""
    m = rates.margins
    clamped = min(max(target_pct, m.slider_min_pct), m.slider_max_pct)
    if clamped != target_pct:
        logger.debug("Target margin %.2f%% clamped to %.2f%%", target_pct, clamped)
    return clamped


def price_for_margin(cost_basis: float, target_pct: float) -> float:
    return round_currency(cost_basis / (1 - target_pct / 100))


def _retarget_line(li: LineItem, target_pct: float) -> LineItem:
    if li.category is LineCategory.TRAVEL or li.cost_basis <= 0:
        return li
    return li.model_copy(update={"client_price": price_for_margin(li.cost_basis, target_pct)})


def retarget(quote: QuoteResult, target_pct: float, rates: RateConfiguration) -> QuoteResult:
    """Return a new quote whose non-travel lines sit at ``target_pct`` margin.

    Idempotent: the same target applied twice yields the same quote.
    """
    target = clamp_target_margin(target_pct, rates)
    line_items = [_retarget_line(li, target) for li in quote.line_items]
    return summarize_quote(
        line_items,
        quote.travel,
        quote.payment_term,
        quote.total_project_sqft,
        rates,
        applied_target_margin_pct=target,
    )
