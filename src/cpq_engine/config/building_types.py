"""Building-type catalog — maps type codes "1"–"17" to a pricing method."""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple


class AreaKind(str, Enum):
    """Which calculator prices an area."""

    STANDARD = "standard"        # per-sqft, per discipline
    LANDSCAPE = "landscape"      # per-acre, tiered by acreage
    CEILING = "ceiling"          # above-ceiling-tile capture only
    WALKTHROUGH = "walkthrough"  # photogrammetry walkthrough only


class BuildingType(NamedTuple):
    code: str
    name: str
    kind: AreaKind


BUILDING_TYPES: dict[str, BuildingType] = {
    bt.code: bt
    for bt in (
        BuildingType("1", "Office Building", AreaKind.STANDARD),
        BuildingType("2", "Educational", AreaKind.STANDARD),
        BuildingType("3", "Healthcare", AreaKind.STANDARD),
        BuildingType("4", "Industrial", AreaKind.STANDARD),
        BuildingType("5", "Residential Multi-Family", AreaKind.STANDARD),
        BuildingType("6", "Residential Single-Family", AreaKind.STANDARD),
        BuildingType("7", "Retail", AreaKind.STANDARD),
        BuildingType("8", "Hospitality", AreaKind.STANDARD),
        BuildingType("9", "Mixed-Use", AreaKind.STANDARD),
        BuildingType("10", "Warehouse", AreaKind.STANDARD),
        BuildingType("11", "Religious", AreaKind.STANDARD),
        BuildingType("12", "Government", AreaKind.STANDARD),
        BuildingType("13", "Parking Structure", AreaKind.STANDARD),
        BuildingType("14", "Built Landscape", AreaKind.LANDSCAPE),
        BuildingType("15", "Natural Landscape", AreaKind.LANDSCAPE),
        BuildingType("16", "ACT Ceilings Only", AreaKind.CEILING),
        BuildingType("17", "Matterport Only", AreaKind.WALKTHROUGH),
    )
}

BUILT_LANDSCAPE = "14"
NATURAL_LANDSCAPE = "15"
CEILING_ONLY = "16"
WALKTHROUGH_ONLY = "17"


def classify_building_type(code: str | int | None) -> AreaKind:
    """Resolve a building-type code to its calculator.

    Codes outside the catalog are priced as standard buildings.
    """
    bt = BUILDING_TYPES.get(str(code).strip()) if code is not None else None
    return bt.kind if bt else AreaKind.STANDARD


def is_landscape_type(code: str | int | None) -> bool:
    return classify_building_type(code) is AreaKind.LANDSCAPE


def building_type_name(code: str | int | None) -> str:
    bt = BUILDING_TYPES.get(str(code).strip()) if code is not None else None
    return bt.name if bt else f"Type {code}"
