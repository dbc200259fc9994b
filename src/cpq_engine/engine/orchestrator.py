"""Orchestrator — the one-call pricing entry point.

``price_quote(quote_input, rates)`` assembles at rate-card prices, then
retargets to ``quote_input.target_margin_pct`` when one is set.
"""

from __future__ import annotations

from cpq_engine.config.loader import default_rates
from cpq_engine.config.quote_input import QuoteInput
from cpq_engine.config.rates import RateConfiguration
from cpq_engine.engine.assembler import assemble_quote
from cpq_engine.engine.solver import retarget
from cpq_engine.models.results import QuoteResult


def price_quote(quote_input: QuoteInput, rates: RateConfiguration | None = None) -> QuoteResult:
    """Price a quote end to end.

    ``rates`` defaults to the compiled-in rate card.  The same snapshot is
    used for assembly and retargeting.
    """
    rates = rates if rates is not None else default_rates()
    quote = assemble_quote(quote_input, rates)
    if quote_input.target_margin_pct is not None:
        quote = retarget(quote, quote_input.target_margin_pct, rates)
    return quote
