"""Georeferenced raster images and their feature representation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from io import BytesIO
from typing import BinaryIO

from PIL import Image as PILImage

from gisdto.src.feature import Envelope, Feature


IMAGE_FEATURE_TYPE = "image"
FORMAT_ALIASES = {"JPG": "JPEG", "TIF": "TIFF"}


@dataclass(slots=True, eq=False)
class Image:
    """Binary raster payload plus the envelope it covers.

    Compared by `id`; an image without an id is only equal to itself.
    """

    id: str | None = None
    name: str | None = None
    description: str | None = None
    category: str | None = None
    date_created: datetime | None = None
    mime_type: str | None = None
    width: int | None = None
    height: int | None = None
    size: int | None = None
    url: str | None = None
    envelope: Envelope | None = None
    image: bytes | None = None

    def read_image_data(self, stream: BinaryIO, format_name: str) -> None:
        """Decode `stream` and store it re-encoded as `format_name` (png, jpeg, ...)."""
        pil_format = FORMAT_ALIASES.get(format_name.upper(), format_name.upper())
        with PILImage.open(stream) as decoded:
            decoded.load()
            output = BytesIO()
            decoded.save(output, format=pil_format)
            self.width, self.height = decoded.size
        self.image = output.getvalue()
        self.size = len(self.image)
        self.mime_type = PILImage.MIME.get(pil_format, self.mime_type)

    @property
    def north(self) -> float:
        return self.envelope.max_y

    @property
    def south(self) -> float:
        return self.envelope.min_y

    @property
    def east(self) -> float:
        return self.envelope.max_x

    @property
    def west(self) -> float:
        return self.envelope.min_x

    def as_feature(self) -> Feature:
        feature = Feature(
            id=self.id,
            feature_type=IMAGE_FEATURE_TYPE,
            name=self.name,
        )
        feature.description = self.description
        feature.properties.set("category", self.category)
        feature.properties.set("dateCreated", self.date_created)
        feature.properties.set("mimeType", self.mime_type)
        feature.properties.set("width", self.width)
        feature.properties.set("height", self.height)
        feature.properties.set("size", self.size)
        feature.properties.set("url", self.url)
        feature.geometry = self.envelope.to_polygon() if self.envelope is not None else None
        return feature

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Image):
            return NotImplemented
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return self.url or ""


@dataclass(slots=True, eq=False)
class ImageCollection:
    description: str | None = None
    category: str | None = None
    images: list[Image] = field(default_factory=list)

    def add_images(self, *images: Image) -> None:
        self.images.extend(images)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImageCollection):
            return NotImplemented
        return set(self.images) == set(other.images)

    __hash__ = None
