"""Enumerated string constants of the pass descriptor.

Values are the raw ``PK*`` identifiers used in ``pass.json``.
"""
from __future__ import annotations

from enum import Enum


class BarcodeFormat(str, Enum):
    """Barcode symbology.  CODE128 is only valid inside ``barcodes``."""

    AZTEC = "PKBarcodeFormatAztec"
    CODE128 = "PKBarcodeFormatCode128"
    PDF417 = "PKBarcodeFormatPDF417"
    QR = "PKBarcodeFormatQR"


class DateStyle(str, Enum):
    """Style of a date or time value (used for both dateStyle and timeStyle)."""

    FULL = "PKDateStyleFull"
    LONG = "PKDateStyleLong"
    MEDIUM = "PKDateStyleMedium"
    NONE = "PKDateStyleNone"
    SHORT = "PKDateStyleShort"


class NumberStyle(str, Enum):
    """Number formatter style of a numeric field."""

    DECIMAL = "PKNumberStyleDecimal"
    PERCENT = "PKNumberStylePercent"
    SCIENTIFIC = "PKNumberStyleScientific"
    SPELL_OUT = "PKNumberStyleSpellOut"


class EventType(str, Enum):
    """Semantic event category of an event ticket."""

    CONFERENCE = "PKEventTypeConference"
    CONVENTION = "PKEventTypeConvention"
    GENERIC = "PKEventTypeGeneric"
    LIVE_PERFORMANCE = "PKEventTypeLivePerformance"
    MOVIE = "PKEventTypeMovie"
    SOCIAL_GATHERING = "PKEventTypeSocialGathering"
    SPORTS = "PKEventTypeSports"
    WORKSHOP = "PKEventTypeWorkshop"


class TextAlignment(str, Enum):
    """Alignment of a field's contents.  Not allowed on primary or back fields."""

    CENTER = "PKTextAlignmentCenter"
    LEFT = "PKTextAlignmentLeft"
    NATURAL = "PKTextAlignmentNatural"
    RIGHT = "PKTextAlignmentRight"


class TransitType(str, Enum):
    """Vehicle type of a boarding pass."""

    AIR = "PKTransitTypeAir"
    BOAT = "PKTransitTypeBoat"
    BUS = "PKTransitTypeBus"
    GENERIC = "PKTransitTypeGeneric"
    TRAIN = "PKTransitTypeTrain"


__all__ = [
    "BarcodeFormat",
    "DateStyle",
    "EventType",
    "NumberStyle",
    "TextAlignment",
    "TransitType",
]
