"""GeoJSON feature endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from gisdto.src.feature import Feature, FeatureCollection
from gisdto.src.negotiation import (
    GeoJSONResponse,
    geojson_response,
    read_feature_body,
    read_feature_collection_body,
)
from gisdto.src.schemas import ImageDocument


router = APIRouter(prefix="/api", tags=["features"])


@router.post("/features/geojson", response_class=GeoJSONResponse)
def encode_feature(
    request: Request,
    feature: Annotated[Feature, Depends(read_feature_body)],
) -> GeoJSONResponse:
    return geojson_response(request, feature)


@router.post("/feature-collections/geojson", response_class=GeoJSONResponse)
def encode_feature_collection(
    request: Request,
    collection: Annotated[FeatureCollection, Depends(read_feature_collection_body)],
) -> GeoJSONResponse:
    return geojson_response(request, collection)


@router.post("/images/geojson", response_class=GeoJSONResponse)
def encode_image(request: Request, payload: ImageDocument) -> GeoJSONResponse:
    return geojson_response(request, payload.to_domain())
