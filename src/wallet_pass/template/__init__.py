"""Pass descriptor (``pass.json``) schema."""
from __future__ import annotations

from wallet_pass.template.enums import (
    BarcodeFormat,
    DateStyle,
    EventType,
    NumberStyle,
    TextAlignment,
    TransitType,
)
from wallet_pass.template.models import (
    Barcode,
    Beacon,
    BoardingPass,
    CurrencyAmount,
    Details,
    FieldValue,
    Location,
    Nfc,
    PassField,
    PersonNameComponents,
    Seat,
    Semantics,
    Template,
)

__all__ = [
    "Barcode",
    "BarcodeFormat",
    "Beacon",
    "BoardingPass",
    "CurrencyAmount",
    "DateStyle",
    "Details",
    "EventType",
    "FieldValue",
    "Location",
    "Nfc",
    "NumberStyle",
    "PassField",
    "PersonNameComponents",
    "Seat",
    "Semantics",
    "Template",
    "TextAlignment",
    "TransitType",
]
