"""Configuration models — rate card, codes, building types, quote input."""

from cpq_engine.config.codes import (
    Discipline,
    DispatchOrigin,
    Lod,
    PaymentTerm,
    RiskCode,
    Scope,
)
from cpq_engine.config.building_types import (
    BUILDING_TYPES,
    AreaKind,
    classify_building_type,
    is_landscape_type,
)
from cpq_engine.config.rates import (
    ElevationBracket,
    MarginGuardrails,
    RateConfiguration,
    TravelRates,
)
from cpq_engine.config.quote_input import (
    Area,
    CeilingArea,
    DisciplineOverride,
    LandscapeArea,
    NegotiatedRate,
    QuoteInput,
    StandardArea,
    WalkthroughArea,
    area_from_record,
)
from cpq_engine.config.loader import default_rates, load_quote_input, load_rates

__all__ = [
    "Discipline",
    "DispatchOrigin",
    "Lod",
    "PaymentTerm",
    "RiskCode",
    "Scope",
    "BUILDING_TYPES",
    "AreaKind",
    "classify_building_type",
    "is_landscape_type",
    "ElevationBracket",
    "MarginGuardrails",
    "RateConfiguration",
    "TravelRates",
    "Area",
    "CeilingArea",
    "DisciplineOverride",
    "LandscapeArea",
    "NegotiatedRate",
    "QuoteInput",
    "StandardArea",
    "WalkthroughArea",
    "area_from_record",
    "default_rates",
    "load_quote_input",
    "load_rates",
]
