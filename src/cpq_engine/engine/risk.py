"""Risk premium engine.

Premiums add, they do not compound: occupied + hazardous = 1 + 0.15 + 0.25.
Only the architecture line carries the loading: occupied spaces, hazmat
and no-power sites slow down the lead capture discipline, not the
mechanical, structural or site overlays.
"""

from __future__ import annotations

from collections.abc import Iterable

from cpq_engine.config.codes import Discipline, RiskCode
from cpq_engine.config.rates import RateConfiguration

RISK_BEARING_DISCIPLINES: frozenset[Discipline] = frozenset({Discipline.ARCH})


def combine_risks(*groups: Iterable[RiskCode]) -> list[RiskCode]:
    """Union of risk lists, first occurrence order kept."""
    return list(dict.fromkeys(r for group in groups for r in group))


def risk_multiplier(risks: Iterable[RiskCode], rates: RateConfiguration) -> float:
    """``1 + Σ premium`` over the given risks.  No risks → 1.0.

    Pass the output of :func:`combine_risks`, which drops duplicates.
    """
    return 1.0 + sum(rates.risk_premium(r) for r in risks)


def discipline_risk_multiplier(
    discipline: Discipline,
    risks: Iterable[RiskCode],
    rates: RateConfiguration,
) -> float:
    """The multiplier a given discipline's line absorbs (1.0 if exempt)."""
    if discipline not in RISK_BEARING_DISCIPLINES:
        return 1.0
    return risk_multiplier(risks, rates)


def apply_risk_premium(
    discipline: Discipline,
    amount: float,
    risks: Iterable[RiskCode],
    rates: RateConfiguration,
) -> float:
    return amount * discipline_risk_multiplier(discipline, risks, rates)
