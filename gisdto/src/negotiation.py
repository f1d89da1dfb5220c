"""GeoJSON content negotiation: response writer and request body readers."""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.responses import Response

from gisdto.src.errors import ApiError, MalformedGeoJSONError
from gisdto.src.feature import Feature, FeatureCollection
from gisdto.src.geojson import (
    DEFAULT_DECIMALS,
    read_feature,
    read_feature_collection,
    write_feature,
    write_feature_collection,
    write_image,
)
from gisdto.src.image import Image


GEOJSON_MEDIA_TYPES = ("application/json", "application/geo+json", "application/geojson")
DEFAULT_MEDIA_TYPE = "application/geo+json"


def _media_ranges(header: str) -> list[str]:
    weighted: list[tuple[float, int, str]] = []
    for index, item in enumerate(header.split(",")):
        parts = [part.strip() for part in item.split(";")]
        media_range = parts[0].lower()
        if not media_range:
            continue
        quality = 1.0
        for param in parts[1:]:
            name, _, value = param.partition("=")
            if name.strip() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if quality > 0:
            weighted.append((-quality, index, media_range))
    return [media_range for _, _, media_range in sorted(weighted)]


def negotiate_media_type(accept: str | None) -> str:
    """Pick the response media type for an Accept header."""
    if not accept or not accept.strip():
        return DEFAULT_MEDIA_TYPE
    for media_range in _media_ranges(accept):
        if media_range in GEOJSON_MEDIA_TYPES:
            return media_range
        if media_range in {"*/*", "application/*"}:
            return DEFAULT_MEDIA_TYPE
    raise ApiError(
        detail=f"Cannot produce any of: {accept}",
        code="NOT_ACCEPTABLE",
        status_code=406,
    )


class GeoJSONResponse(Response):
    """Renders features, collections and images as GeoJSON text."""

    media_type = DEFAULT_MEDIA_TYPE

    def __init__(self, content: Any, decimals: int | None = DEFAULT_DECIMALS, **kwargs: Any) -> None:
        self.decimals = decimals
        super().__init__(content, **kwargs)

    def render(self, content: Any) -> bytes:
        if isinstance(content, FeatureCollection):
            text = write_feature_collection(content, self.decimals)
        elif isinstance(content, Feature):
            text = write_feature(content, self.decimals)
        elif isinstance(content, Image):
            text = write_image(content, self.decimals)
        else:
            raise TypeError(f"Cannot render {type(content).__name__} as GeoJSON")
        return text.encode("utf-8")


def geojson_response(request: Request, content: Feature | FeatureCollection | Image) -> GeoJSONResponse:
    return GeoJSONResponse(
        content,
        decimals=getattr(request.app.state, "geojson_decimals", DEFAULT_DECIMALS),
        media_type=negotiate_media_type(request.headers.get("accept")),
    )


def max_upload_bytes(request: Request) -> int:
    value = getattr(request.app.state, "max_upload_bytes", 1024 * 1024 * 1024)
    return int(value)


async def _read_geojson_body(request: Request) -> bytes:
    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type not in GEOJSON_MEDIA_TYPES:
        raise ApiError(
            detail=f"Unsupported content type: {content_type or 'missing'}",
            code="UNSUPPORTED_MEDIA_TYPE",
            status_code=415,
        )
    body = await request.body()
    if len(body) > max_upload_bytes(request):
        raise ApiError(
            detail="Request body exceeds configured limit (MAX_UPLOAD_MB).",
            code="PAYLOAD_TOO_LARGE",
            status_code=413,
        )
    return body


def _malformed(exc: MalformedGeoJSONError) -> ApiError:
    return ApiError(detail=str(exc), code="MALFORMED_GEOJSON", status_code=400)


async def read_feature_body(request: Request) -> Feature:
    body = await _read_geojson_body(request)
    try:
        return read_feature(body)
    except MalformedGeoJSONError as exc:
        raise _malformed(exc) from exc


async def read_feature_collection_body(request: Request) -> FeatureCollection:
    body = await _read_geojson_body(request)
    try:
        return read_feature_collection(body)
    except MalformedGeoJSONError as exc:
        raise _malformed(exc) from exc
