"""Feature and feature collection entities with style metadata."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, NamedTuple

from shapely.geometry import Point, Polygon
from shapely.geometry.base import BaseGeometry

from gisdto.src.address import Address
from gisdto.src.position import Position
from gisdto.src.properties import PropertyBag


DEFAULT_MARKER_SIZE = "medium"
DEFAULT_MARKER_COLOR = "7e7e7e"
DEFAULT_STROKE = "555555"
DEFAULT_STROKE_OPACITY = 1.0
DEFAULT_STROKE_WIDTH = 2.0
DEFAULT_FILL = "555555"
DEFAULT_FILL_OPACITY = 0.6
CSS_STROKE = "999999"


class Envelope(NamedTuple):
    """Axis-aligned bounding box in geometry x/y order."""

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_geometry(cls, geometry: BaseGeometry) -> Envelope:
        min_x, min_y, max_x, max_y = geometry.bounds
        return cls(min_x, min_y, max_x, max_y)

    @property
    def north(self) -> float:
        return self.max_y

    @property
    def south(self) -> float:
        return self.min_y

    @property
    def east(self) -> float:
        return self.max_x

    @property
    def west(self) -> float:
        return self.min_x

    def to_polygon(self) -> Polygon:
        return Polygon(
            [
                (self.min_x, self.min_y),
                (self.max_x, self.min_y),
                (self.max_x, self.max_y),
                (self.min_x, self.max_y),
                (self.min_x, self.min_y),
            ]
        )


class Style:
    """Rendering hints stored in a property bag, with simplestyle-like defaults."""

    __slots__ = ("_properties",)

    def __init__(self, properties: PropertyBag) -> None:
        self._properties = properties

    def apply_defaults(self) -> None:
        self.marker_size = DEFAULT_MARKER_SIZE
        self.marker_color = DEFAULT_MARKER_COLOR
        self.stroke = CSS_STROKE
        self.stroke_opacity = DEFAULT_STROKE_OPACITY
        self.stroke_width = DEFAULT_STROKE_WIDTH
        self.fill = DEFAULT_FILL
        self.fill_opacity = DEFAULT_FILL_OPACITY

    @property
    def title(self) -> str | None:
        return self._properties.get("title")

    @title.setter
    def title(self, value: str | None) -> None:
        self._properties.set("title", value)

    @property
    def marker_size(self) -> str:
        return self._properties.get("markerSize", DEFAULT_MARKER_SIZE)

    @marker_size.setter
    def marker_size(self, value: str | None) -> None:
        self._properties.set("markerSize", value)

    @property
    def marker_symbol(self) -> str | None:
        return self._properties.get("markerSymbol")

    @marker_symbol.setter
    def marker_symbol(self, value: str | None) -> None:
        self._properties.set("markerSymbol", value)

    @property
    def marker_color(self) -> str:
        return self._properties.get("markerColor", DEFAULT_MARKER_COLOR)

    @marker_color.setter
    def marker_color(self, value: str | None) -> None:
        self._properties.set("markerColor", value)

    @property
    def stroke(self) -> str:
        return self._properties.get("stroke", DEFAULT_STROKE)

    @stroke.setter
    def stroke(self, value: str | None) -> None:
        self._properties.set("stroke", value)

    @property
    def stroke_opacity(self) -> float:
        return self._properties.get_double("strokeOpacity", DEFAULT_STROKE_OPACITY)

    @stroke_opacity.setter
    def stroke_opacity(self, value: float | None) -> None:
        self._properties.set("strokeOpacity", value)

    @property
    def stroke_width(self) -> float:
        return self._properties.get_double("strokeWidth", DEFAULT_STROKE_WIDTH)

    @stroke_width.setter
    def stroke_width(self, value: float | None) -> None:
        self._properties.set("strokeWidth", value)

    @property
    def fill(self) -> str:
        return self._properties.get("fill", DEFAULT_FILL)

    @fill.setter
    def fill(self, value: str | None) -> None:
        self._properties.set("fill", value)

    @property
    def fill_opacity(self) -> float:
        return self._properties.get_double("fillOpacity", DEFAULT_FILL_OPACITY)

    @fill_opacity.setter
    def fill_opacity(self, value: float | None) -> None:
        self._properties.set("fillOpacity", value)


@dataclass(slots=True, eq=False)
class Feature:
    """A geometry with identity, style properties and optional address/position.

    Features compare and hash by `id`. A feature without an id is only equal to
    itself, so unnamed placemarks stay distinct inside a collection.
    """

    id: str | None = None
    feature_type: str | None = None
    name: str | None = None
    properties: PropertyBag = field(default_factory=PropertyBag)
    address: Address | None = None
    position: Position | None = None
    geometry: BaseGeometry | None = None

    @classmethod
    def get_instance(cls, name: str | None, geometry: BaseGeometry | None) -> Feature:
        return cls(name=name, geometry=geometry)

    @classmethod
    def get_instance_full(
        cls,
        feature_type: str | None,
        name: str | None,
        address: Address | None,
        position: Position | None,
        geometry: BaseGeometry | None,
    ) -> Feature:
        return cls(
            feature_type=feature_type,
            name=name,
            address=address,
            position=position,
            geometry=geometry,
        )

    @classmethod
    def with_css(cls) -> Feature:
        feature = cls()
        feature.style.apply_defaults()
        return feature

    @property
    def style(self) -> Style:
        return Style(self.properties)

    @property
    def description(self) -> str | None:
        return self.properties.get("description")

    @description.setter
    def description(self, value: str | None) -> None:
        self.properties.set("description", value)

    @property
    def envelope(self) -> Envelope | None:
        if self.geometry is None or isinstance(self.geometry, Point):
            return None
        return Envelope.from_geometry(self.geometry)

    @property
    def iso2(self) -> str | None:
        return self.properties.get("iso2")

    @iso2.setter
    def iso2(self, value: str | None) -> None:
        self.properties.set("iso2", value)

    def is_set_address(self) -> bool:
        return self.address is not None

    def is_set_position(self) -> bool:
        return self.position is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Feature):
            return NotImplemented
        if self.id is None or other.id is None:
            return self is other
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


@dataclass(slots=True, eq=False)
class FeatureCollection:
    """A styled group of features; equality ignores feature order."""

    id: str | None = None
    feature_type: str | None = None
    name: str | None = None
    properties: PropertyBag = field(default_factory=PropertyBag)
    features: list[Feature] = field(default_factory=list)

    @classmethod
    def get_instance(
        cls,
        id: str | None,
        feature_type: str | None,
        name: str | None,
        features: Iterable[Feature] | None = None,
    ) -> FeatureCollection:
        return cls(id=id, feature_type=feature_type, name=name, features=list(features or []))

    @classmethod
    def with_css(cls) -> FeatureCollection:
        collection = cls()
        collection.style.apply_defaults()
        return collection

    @property
    def style(self) -> Style:
        return Style(self.properties)

    @property
    def description(self) -> str | None:
        return self.properties.get("description")

    @description.setter
    def description(self, value: str | None) -> None:
        self.properties.set("description", value)

    def add_features(self, *features: Feature) -> None:
        self.features.extend(features)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FeatureCollection):
            return NotImplemented
        return set(self.features) == set(other.features)

    __hash__ = None
