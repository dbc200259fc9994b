"""Quote input — the structured project description the engine prices.

Areas are a tagged union on ``kind``: each variant carries exactly the
fields its calculator needs.  Numeric fields are clamped, never rejected,
so an in-progress draft always prices.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, Field, TypeAdapter, field_validator

from cpq_engine.config.building_types import (
    BUILT_LANDSCAPE,
    CEILING_ONLY,
    WALKTHROUGH_ONLY,
    AreaKind,
    classify_building_type,
)
from cpq_engine.config.codes import (
    DisciplineCode,
    DispatchOrigin,
    DispatchOriginCode,
    Lod,
    LodCode,
    PaymentTerm,
    PaymentTermCode,
    RiskCodeField,
    Scope,
    ScopeCode,
)


def _clamped(convert):
    """Before-validator: convert, then floor at zero.

    Values that do not convert pass through untouched so pydantic reports
    them as type errors.
    """

    def _validate(value: Any) -> Any:
        if value is None:
            return 0
        try:
            number = convert(value)
        except (TypeError, ValueError):
            return value
        return max(0, number)

    return _validate


NonNegativeFloat = Annotated[float, BeforeValidator(_clamped(float))]
NonNegativeInt = Annotated[int, BeforeValidator(_clamped(int))]


# ═══════════════════════════════════════════════════════════════════════════
# Per-area options
# ═══════════════════════════════════════════════════════════════════════════

class DisciplineOverride(BaseModel):
    """Per-discipline LOD and/or scope that wins over the area's own."""

    lod: LodCode | None = None
    scope: ScopeCode | None = None


class NegotiatedRate(BaseModel):
    """Catalog or negotiated $/sqft rates that already encode LOD pricing.

    A rate of 0 (or missing) falls back to the rate-card calculation for
    that side only.
    """

    client_rate: float | None = Field(default=None, ge=0, description="Client $/sqft")
    cost_rate: float | None = Field(default=None, ge=0, description="Delivery cost $/sqft")


# ═══════════════════════════════════════════════════════════════════════════
# Area variants
# ═══════════════════════════════════════════════════════════════════════════

class _AreaBase(BaseModel):
    id: str = Field(min_length=1)
    name: str = ""
    building_type: str = "1"
    additional_elevations: NonNegativeInt = Field(default=0, description="Extra building elevations")

    @field_validator("building_type", mode="before")
    @classmethod
    def _type_as_str(cls, v: Any) -> str:
        return str(v).strip() if v is not None else "1"

    @property
    def display_name(self) -> str:
        return self.name or self.id


class StandardArea(_AreaBase):
    """A building priced per square foot, one line per discipline."""

    kind: Literal["standard"] = "standard"
    square_feet: NonNegativeFloat = 0.0
    disciplines: list[DisciplineCode] = Field(min_length=1)
    lod: LodCode = Lod.LOD_300
    scope: ScopeCode = Scope.FULL
    mixed_interior_lod: LodCode | None = None
    mixed_exterior_lod: LodCode | None = None
    discipline_overrides: dict[DisciplineCode, DisciplineOverride] = Field(default_factory=dict)
    negotiated_rates: dict[DisciplineCode, NegotiatedRate] = Field(default_factory=dict)
    risks: list[RiskCodeField] = Field(default_factory=list)
    include_walkthrough: bool = Field(default=False, description="Add a walkthrough overlay line")

    @field_validator("disciplines")
    @classmethod
    def _dedupe(cls, v: list) -> list:
        return list(dict.fromkeys(v))


class LandscapeArea(_AreaBase):
    """Open ground priced per acre, tiered by acreage."""

    kind: Literal["landscape"] = "landscape"
    building_type: str = BUILT_LANDSCAPE
    acres: NonNegativeFloat = 0.0
    lod: LodCode = Lod.LOD_300


class CeilingArea(_AreaBase):
    """Above-ceiling-tile capture only. Flat rate, no LOD."""

    kind: Literal["ceiling"] = "ceiling"
    building_type: str = CEILING_ONLY
    square_feet: NonNegativeFloat = 0.0
    scope: ScopeCode = Scope.FULL


class WalkthroughArea(_AreaBase):
    """Photogrammetry walkthrough only. Flat rate, always full scope."""

    kind: Literal["walkthrough"] = "walkthrough"
    building_type: str = WALKTHROUGH_ONLY
    square_feet: NonNegativeFloat = 0.0


Area = Annotated[
    Union[StandardArea, LandscapeArea, CeilingArea, WalkthroughArea],
    Field(discriminator="kind"),
]

_AREA_ADAPTER: TypeAdapter = TypeAdapter(Area)


def _tag_record(record: dict[str, Any]) -> dict[str, Any]:
    """Add the ``kind`` tag to a flat upstream record.

    Records that already carry ``kind`` pass through.  Otherwise the
    building-type code decides; landscape records may give their size as
    ``square_feet`` (the upstream form reuses that field for acres).
    Fields the chosen variant does not declare are ignored on validation.
    """
    data = dict(record)
    if "kind" not in data:
        kind = classify_building_type(data.get("building_type"))
        data["kind"] = kind.value
        if kind is AreaKind.LANDSCAPE and "acres" not in data and "square_feet" in data:
            data["acres"] = data.pop("square_feet")
    return data


def area_from_record(record: dict[str, Any]) -> Area:
    """Build the right Area variant from a flat upstream record."""
    return _AREA_ADAPTER.validate_python(_tag_record(record))


# ═══════════════════════════════════════════════════════════════════════════
# Quote input
# ═══════════════════════════════════════════════════════════════════════════

class QuoteInput(BaseModel):
    """Everything one quote calculation needs besides the rate card."""

    areas: list[Area] = Field(default_factory=list)
    dispatch_origin: DispatchOriginCode = DispatchOrigin.WOODSTOCK
    distance_miles: NonNegativeFloat = Field(default=0.0, description="One-way travel distance")
    target_margin_pct: float | None = Field(
        default=None,
        description="Desired gross margin in percent. None = keep rate-card prices.",
    )
    payment_term: PaymentTermCode = PaymentTerm.OWNER
    risks: list[RiskCodeField] = Field(default_factory=list, description="Project-wide risk flags")

    # --- Manual travel overrides ---
    mileage_rate_override: float | None = Field(default=None, ge=0, description="$/mile replacing the rate card")
    scan_day_fee_override: float | None = Field(default=None, ge=0, description="Replaces the standard scan-day fee")
    travel_cost_override: float | None = Field(default=None, ge=0, description="Flat travel total")

    @field_validator("areas", mode="before")
    @classmethod
    def _classify_areas(cls, v: Any) -> Any:
        if not isinstance(v, list):
            return v
        return [_tag_record(a) if isinstance(a, dict) else a for a in v]
