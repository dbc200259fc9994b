"""Result models — quote output contracts."""

from cpq_engine.models.results import (
    AreaPricing,
    CategorySubtotals,
    IntegrityFlag,
    IntegrityStatus,
    LineCategory,
    LineItem,
    QuoteResult,
    TravelResult,
)

__all__ = [
    "AreaPricing",
    "CategorySubtotals",
    "IntegrityFlag",
    "IntegrityStatus",
    "LineCategory",
    "LineItem",
    "QuoteResult",
    "TravelResult",
]
