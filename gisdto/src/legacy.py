"""Earlier class names kept importable for existing callers."""

from __future__ import annotations

from gisdto.src.address import Address as GISAddress
from gisdto.src.feature import Feature as GISFeature
from gisdto.src.feature import FeatureCollection as GISFeatureCollection
from gisdto.src.image import ImageCollection as GISImages
from gisdto.src.image import ImageCollection as Images
from gisdto.src.position import Position as GISPosition


__all__ = [
    "GISAddress",
    "GISFeature",
    "GISFeatureCollection",
    "GISImages",
    "GISPosition",
    "Images",
]
