"""Pydantic API schemas."""

from __future__ import annotations

import base64
import binascii
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pyproj import CRS
from pyproj.exceptions import CRSError

from gisdto.src.address import Address
from gisdto.src.feature import Envelope
from gisdto.src.image import Image
from gisdto.src.position import DEFAULT_DATUM, Position


def resolve_datum(datum: str) -> CRS:
    try:
        return CRS.from_user_input(datum)
    except CRSError as exc:
        raise ValueError(f"Unknown datum: {datum}") from exc


class PositionDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    latitude: float
    longitude: float
    name: str | None = None
    elevation: float | None = None
    heading: float | None = None
    speed: float | None = Field(default=None, ge=0)
    datum: str = DEFAULT_DATUM
    accuracy_horizontal: float | None = Field(default=None, ge=0)
    accuracy_vertical: float | None = Field(default=None, ge=0)
    haat: float | None = None
    radial_haat: dict[float, float] = Field(default_factory=dict)
    timestamp_millis: int | None = None

    @field_validator("datum")
    @classmethod
    def _known_datum(cls, value: str) -> str:
        resolve_datum(value)
        return value

    @classmethod
    def from_domain(cls, position: Position) -> PositionDocument:
        return cls(
            latitude=position.latitude,
            longitude=position.longitude,
            name=position.name,
            elevation=position.elevation,
            heading=position.heading,
            speed=position.speed,
            datum=position.datum or DEFAULT_DATUM,
            accuracy_horizontal=position.accuracy_horizontal,
            accuracy_vertical=position.accuracy_vertical,
            haat=position.haat,
            radial_haat=position.radial_haat,
            timestamp_millis=position.timestamp_millis,
        )

    def to_domain(self) -> Position:
        position = Position.get_instance(
            self.latitude,
            self.longitude,
            elevation=self.elevation,
            datum=self.datum,
            accuracy_vertical=self.accuracy_vertical,
            accuracy_horizontal=self.accuracy_horizontal,
        )
        position.name = self.name
        position.heading = self.heading
        position.speed = self.speed
        position.haat = self.haat
        position.set_radial_haat(self.radial_haat)
        position.timestamp_millis = self.timestamp_millis
        return position


class AddressDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    street: str | None = None
    city: str | None = None
    county: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None

    @classmethod
    def from_domain(cls, address: Address) -> AddressDocument:
        return cls(
            street=address.street,
            city=address.city,
            county=address.county,
            state=address.state,
            postal_code=address.postal_code,
            country=address.country,
        )

    def to_domain(self) -> Address:
        return Address(
            street=self.street,
            city=self.city,
            county=self.county,
            state=self.state,
            postal_code=self.postal_code,
            country=self.country,
        )


class FormattedAddressResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    formatted: str
    complete: bool


class EnvelopeDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def to_domain(self) -> Envelope:
        return Envelope(self.min_x, self.min_y, self.max_x, self.max_y)


class ImageDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str
    name: str | None = None
    description: str | None = None
    category: str | None = None
    date_created: datetime | None = None
    mime_type: str | None = None
    width: int | None = Field(default=None, ge=0)
    height: int | None = Field(default=None, ge=0)
    size: int | None = Field(default=None, ge=0)
    url: str | None = None
    envelope: EnvelopeDocument | None = None
    image: str | None = None

    @field_validator("image")
    @classmethod
    def _base64_payload(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                base64.b64decode(value, validate=True)
            except binascii.Error as exc:
                raise ValueError("image must be base64 encoded") from exc
        return value

    @classmethod
    def from_domain(cls, image: Image) -> ImageDocument:
        envelope = None
        if image.envelope is not None:
            envelope = EnvelopeDocument(
                min_x=image.envelope.min_x,
                min_y=image.envelope.min_y,
                max_x=image.envelope.max_x,
                max_y=image.envelope.max_y,
            )
        return cls(
            id=image.id,
            name=image.name,
            description=image.description,
            category=image.category,
            date_created=image.date_created,
            mime_type=image.mime_type,
            width=image.width,
            height=image.height,
            size=image.size,
            url=image.url,
            envelope=envelope,
            image=base64.b64encode(image.image).decode("ascii") if image.image is not None else None,
        )

    def to_domain(self) -> Image:
        return Image(
            id=self.id,
            name=self.name,
            description=self.description,
            category=self.category,
            date_created=self.date_created,
            mime_type=self.mime_type,
            width=self.width,
            height=self.height,
            size=self.size,
            url=self.url,
            envelope=self.envelope.to_domain() if self.envelope is not None else None,
            image=base64.b64decode(self.image) if self.image is not None else None,
        )


class ErrorResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    detail: str
    code: str
