"""Closed code enumerations — disciplines, LOD, scope, risks, terms, origins.

Upstream extraction hands us free-form strings.  Each enumeration carries an
explicit ``UNKNOWN`` member so that a not-yet-classified code survives
validation and prices at zero rather than rejecting the whole draft.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any

from pydantic import BeforeValidator


class _CodeEnum(str, Enum):
    """``str`` enum with a lenient ``coerce`` that never raises."""

    @classmethod
    def coerce(cls, value: Any):
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.UNKNOWN
        key = str(value).strip()
        member = cls._value2member_map_.get(key)
        if member is None:
            member = cls._value2member_map_.get(key.lower())
        if member is None:
            member = cls._value2member_map_.get(key.upper())
        return member if member is not None else cls.UNKNOWN

    def __str__(self) -> str:
        return self.value


class Discipline(_CodeEnum):
    ARCH = "arch"
    MEPF = "mepf"
    STRUCTURE = "structure"
    SITE = "site"
    UNKNOWN = "unknown"


class Lod(_CodeEnum):
    """Level of development, the documentation fidelity tier."""

    LOD_200 = "200"
    LOD_300 = "300"
    LOD_350 = "350"
    UNKNOWN = "unknown"


class Scope(_CodeEnum):
    FULL = "full"
    INTERIOR = "interior"
    EXTERIOR = "exterior"
    MIXED = "mixed"
    UNKNOWN = "unknown"


class RiskCode(_CodeEnum):
    OCCUPIED = "occupied"
    HAZARDOUS = "hazardous"
    NO_POWER = "no_power"
    UNKNOWN = "unknown"


class PaymentTerm(_CodeEnum):
    PARTNER = "partner"
    OWNER = "owner"
    NET30 = "net30"
    NET60 = "net60"
    NET90 = "net90"
    UNKNOWN = "unknown"


class DispatchOrigin(_CodeEnum):
    TROY = "TROY"
    WOODSTOCK = "WOODSTOCK"
    BOISE = "BOISE"
    BROOKLYN = "BROOKLYN"
    UNKNOWN = "UNKNOWN"


# Lenient field types for pydantic models; unknown strings become UNKNOWN.
DisciplineCode = Annotated[Discipline, BeforeValidator(Discipline.coerce)]
LodCode = Annotated[Lod, BeforeValidator(Lod.coerce)]
ScopeCode = Annotated[Scope, BeforeValidator(Scope.coerce)]
RiskCodeField = Annotated[RiskCode, BeforeValidator(RiskCode.coerce)]
PaymentTermCode = Annotated[PaymentTerm, BeforeValidator(PaymentTerm.coerce)]
DispatchOriginCode = Annotated[DispatchOrigin, BeforeValidator(DispatchOrigin.coerce)]
