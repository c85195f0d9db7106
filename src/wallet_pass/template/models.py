"""Pydantic models of the ``pass.json`` descriptor.

Field names are snake_case in Python and camelCase on the wire; irregular
keys (``appLaunchURL``, ``webServiceURL``, ``proximityUUID``,
``artistIDs``) carry explicit aliases.  Unknown top-level keys are rejected;
unknown keys inside nested records are dropped.  Unset optional keys are
omitted from the serialised output.

Classes
-------
- Template               Top-level pass descriptor.
- Details                Field groups of a coupon / event ticket / generic / store card.
- BoardingPass           Field groups plus the mandatory transit type.
- PassField              A single displayed key/value field.
- Barcode, Beacon, Location, Nfc
- Semantics, CurrencyAmount, PersonNameComponents, Seat
"""
from __future__ import annotations

import json
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from wallet_pass.template.enums import (
    BarcodeFormat,
    DateStyle,
    EventType,
    NumberStyle,
    TextAlignment,
    TransitType,
)

# Number-or-string field value.
FieldValue = Union[float, str]


class _PassModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_dict(self) -> dict[str, Any]:
        """Return the wire-format dict (camelCase keys, no unset values)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Leaf records
# ---------------------------------------------------------------------------


class Barcode(_PassModel):
    """Barcode shown on the pass."""

    alt_text: str | None = None
    format: BarcodeFormat
    message: str
    message_encoding: str = "iso-8859-1"


class Beacon(_PassModel):
    """Bluetooth LE beacon that makes the pass relevant."""

    major: int | None = None
    minor: int | None = None
    proximity_uuid: str = Field(alias="proximityUUID")
    relevant_text: str | None = None


class Location(_PassModel):
    """Geographic location that makes the pass relevant."""

    altitude: float | None = None
    latitude: float
    longitude: float
    relevant_text: str | None = None


class Nfc(_PassModel):
    """NFC payload for contactless readers."""

    encryption_public_key: str | None = None
    message: str


class CurrencyAmount(_PassModel):
    amount: str | None = None
    currency_code: str | None = None


class PersonNameComponents(_PassModel):
    family_name: str | None = None
    given_name: str | None = None
    middle_name: str | None = None
    name_prefix: str | None = None
    name_suffix: str | None = None
    nickname: str | None = None
    phonetic_representation: PersonNameComponents | None = None


class Seat(_PassModel):
    seat_description: str | None = None
    seat_identifier: str | None = None
    seat_number: str | None = None
    seat_row: str | None = None
    seat_section: str | None = None
    seat_type: str | None = None


class Semantics(_PassModel):
    """Machine-readable metadata the system uses to offer suggestions."""

    airline_code: str | None = None
    artist_ids: list[str] | None = Field(default=None, alias="artistIDs")
    away_team_abbreviation: str | None = None
    away_team_location: str | None = None
    away_team_name: str | None = None
    balance: CurrencyAmount | None = None
    boarding_group: str | None = None
    boarding_sequence_number: str | None = None
    car_number: str | None = None
    confirmation_number: str | None = None
    current_arrival_date: str | None = None
    current_boarding_date: str | None = None
    current_departure_date: str | None = None
    departure_airport_code: str | None = None
    departure_airport_name: str | None = None
    departure_gate: str | None = None
    departure_location: Location | None = None
    departure_location_description: str | None = None
    departure_platform: str | None = None
    departure_station_name: str | None = None
    departure_terminal: str | None = None
    destination_airport_code: str | None = None
    destination_airport_name: str | None = None
    destination_gate: str | None = None
    destination_location: Location | None = None
    destination_location_description: str | None = None
    destination_platform: str | None = None
    destination_station_name: str | None = None
    destination_terminal: str | None = None
    duration: float | None = None
    event_end_date: str | None = None
    event_name: str | None = None
    event_start_date: str | None = None
    event_type: EventType | None = None
    flight_code: str | None = None
    flight_number: float | None = None
    genre: str | None = None
    home_team_abbreviation: str | None = None
    home_team_location: str | None = None
    home_team_name: str | None = None
    league_abbreviation: str | None = None
    league_name: str | None = None
    membership_program_name: str | None = None
    membership_program_number: str | None = None
    original_arrival_date: str | None = None
    original_boarding_date: str | None = None
    original_departure_date: str | None = None
    passenger_name: PersonNameComponents | None = None
    performer_names: list[str] | None = None
    priority_status: str | None = None
    seats: list[Seat] | None = None
    security_screening: str | None = None
    silence_requested: bool | None = None
    sport_name: str | None = None
    total_price: CurrencyAmount | None = None
    transit_provider: str | None = None
    transit_status: str | None = None
    transit_status_reason: str | None = None
    vehicle_name: str | None = None
    vehicle_number: str | None = None
    vehicle_type: str | None = None
    venue_entrance: str | None = None
    venue_location: Location | None = None
    venue_name: str | None = None
    venue_phone_number: str | None = None
    venue_room: str | None = None


# ---------------------------------------------------------------------------
# Fields and field groups
# ---------------------------------------------------------------------------


class PassField(_PassModel):
    """A key/value pair displayed on the front or back of the pass.

    ``value`` is either a number or a string; numbers keep their numeric
    JSON type so ``number_style`` and ``currency_code`` apply.
    """

    attributed_value: FieldValue | None = None
    change_message: str | None = None
    currency_code: str | None = None
    data_detector_types: list[str] | None = None
    date_style: DateStyle | None = None
    ignores_time_zone: bool | None = None
    is_relative: bool | None = None
    key: str
    label: str | None = None
    number_style: NumberStyle | None = None
    semantics: Semantics | None = None
    text_alignment: TextAlignment | None = None
    time_style: DateStyle | None = None
    value: FieldValue


class _FieldGroups(_PassModel):
    auxiliary_fields: list[PassField] | None = None
    back_fields: list[PassField] | None = None
    header_fields: list[PassField] | None = None
    primary_fields: list[PassField] | None = None
    secondary_fields: list[PassField] | None = None

    def add_auxiliary_field(self, field: PassField) -> None:
        self.auxiliary_fields = [*(self.auxiliary_fields or []), field]

    def add_back_field(self, field: PassField) -> None:
        self.back_fields = [*(self.back_fields or []), field]

    def add_header_field(self, field: PassField) -> None:
        self.header_fields = [*(self.header_fields or []), field]

    def add_primary_field(self, field: PassField) -> None:
        self.primary_fields = [*(self.primary_fields or []), field]

    def add_secondary_field(self, field: PassField) -> None:
        self.secondary_fields = [*(self.secondary_fields or []), field]


class Details(_FieldGroups):
    """Field groups for coupon, event ticket, generic and store card styles."""

    transit_type: TransitType | None = None


class BoardingPass(_FieldGroups):
    """Field groups for the boarding pass style."""

    transit_type: TransitType


# ---------------------------------------------------------------------------
# Top-level descriptor
# ---------------------------------------------------------------------------


class Template(_PassModel):
    """The ``pass.json`` descriptor.

    Only ``description``, ``organization_name``, ``pass_type_identifier``
    and ``serial_number`` are required.  Exactly one style key
    (``boarding_pass``, ``coupon``, ``event_ticket``, ``generic`` or
    ``store_card``) is expected by Wallet, but that is not enforced here.

    Example
    -------
    >>> template = Template(
    ...     description="Store card",
    ...     organization_name="Store",
    ...     pass_type_identifier="pass.com.store.generic",
    ...     serial_number="1234567890",
    ... )
    >>> template.add_barcode(Barcode(format=BarcodeFormat.QR, message="QR Code"))
    """

    model_config = ConfigDict(extra="forbid")

    app_launch_url: str | None = Field(default=None, alias="appLaunchURL")
    associated_store_identifiers: list[float] | None = None
    authentication_token: str | None = None
    background_color: str | None = None
    barcode: Barcode | None = None
    barcodes: list[Barcode] | None = None
    beacons: list[Beacon] | None = None
    boarding_pass: BoardingPass | None = None
    coupon: Details | None = None
    description: str
    event_ticket: Details | None = None
    expiration_date: str | None = None
    foreground_color: str | None = None
    format_version: int | None = None
    generic: Details | None = None
    grouping_identifier: str | None = None
    label_color: str | None = None
    locations: list[Location] | None = None
    logo_text: str | None = None
    max_distance: float | None = None
    nfc: Nfc | None = None
    organization_name: str
    pass_type_identifier: str
    relevant_date: str | None = None
    serial_number: str
    store_card: Details | None = None
    suppress_strip_shine: bool | None = None
    team_identifier: str | None = None
    user_info: dict[str, Any] | None = None
    voided: bool | None = None
    web_service_url: str | None = Field(default=None, alias="webServiceURL")

    # ------------------------------------------------------------------
    # List / mapping helpers
    # ------------------------------------------------------------------

    def add_associated_store_identifier(self, identifier: float) -> None:
        self.associated_store_identifiers = [
            *(self.associated_store_identifiers or []),
            identifier,
        ]

    def add_barcode(self, barcode: Barcode) -> None:
        """Append to ``barcodes``; Wallet uses the first valid entry."""
        self.barcodes = [*(self.barcodes or []), barcode]

    def add_beacon(self, beacon: Beacon) -> None:
        self.beacons = [*(self.beacons or []), beacon]

    def add_location(self, location: Location) -> None:
        self.locations = [*(self.locations or []), location]

    def add_user_info(self, key: str, value: Any) -> None:
        self.user_info = {**(self.user_info or {}), key: value}

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_json(self, indent: int = 2) -> bytes:
        """Serialise to pretty-printed UTF-8 JSON bytes.

        Parameters
        ----------
        indent:
            JSON indentation level.  Default: 2.
        """
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False).encode("utf-8")

    @classmethod
    def from_json(cls, data: bytes | str) -> "Template":
        """Parse a descriptor from JSON.

        Raises
        ------
        pydantic.ValidationError
            If the JSON is malformed or does not match the schema.
        """
        return cls.model_validate_json(data)


__all__ = [
    "Barcode",
    "Beacon",
    "BoardingPass",
    "CurrencyAmount",
    "Details",
    "FieldValue",
    "Location",
    "Nfc",
    "PassField",
    "PersonNameComponents",
    "Seat",
    "Semantics",
    "Template",
]
