"""
Shared types and enums for asrun-ingest.

This module contains the closed sets of codes that are decided once at decode
or filename-parse time and used across the domain, persistence and CLI layers.
"""

from __future__ import annotations

from enum import Enum


class Region(str, Enum):
    """Broadcast regions with their own AS-RUN logs."""

    SYD = "SYD"
    MEL = "MEL"
    BNE = "BNE"
    PER = "PER"
    ADL = "ADL"


class Channel(str, Enum):
    """Channels tracked in the broadcast store."""

    CH9 = "CH9"
    GO = "GO"
    GEM = "GEM"


class BroadcastStatus(str, Enum):
    """Lifecycle of a broadcast record through downstream analysis."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class MaterialType(str, Enum):
    """Kind of item an AS-RUN line describes."""

    INTERSTITIAL = "interstitial"
    PROGRAM_SEGMENT = "program_segment"
    OTHER = "other"

    @classmethod
    def from_code(cls, code: str) -> MaterialType:
        if code == "I":
            return cls.INTERSTITIAL
        if code in ("M", "S"):
            return cls.PROGRAM_SEGMENT
        return cls.OTHER


class BillboardKind(str, Enum):
    """Billboard position within a program, from the title prefix."""

    OPEN = "Open Billboard"
    MIDDLE = "Middle Billboard"
    CLOSE = "Close Billboard"
    NONE = "None"

    @classmethod
    def classify(cls, material_type: MaterialType, title: str) -> BillboardKind:
        if material_type is not MaterialType.INTERSTITIAL or not title:
            return cls.NONE
        return _BILLBOARD_PREFIXES.get(title[:2], cls.NONE)


_BILLBOARD_PREFIXES: dict[str, BillboardKind] = {
    "OB": BillboardKind.OPEN,
    "MB": BillboardKind.MIDDLE,
    "CB": BillboardKind.CLOSE,
}
