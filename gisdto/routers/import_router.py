"""KML import endpoints."""

from __future__ import annotations

from io import BytesIO
from typing import Annotated
import zipfile

from fastapi import APIRouter, File, Request, UploadFile
from loguru import logger

from gisdto.src.errors import ApiError
from gisdto.src.feature import Feature, FeatureCollection
from gisdto.src.kml import import_kml
from gisdto.src.negotiation import GeoJSONResponse, geojson_response, max_upload_bytes


router = APIRouter(prefix="/api", tags=["import"])


def _too_large(detail: str) -> ApiError:
    return ApiError(detail=detail, code="PAYLOAD_TOO_LARGE", status_code=413)


def _expand_upload(upload: UploadFile, payload: bytes, limit: int) -> bytes:
    if upload.filename and upload.filename.lower().endswith(".kmz"):
        try:
            with zipfile.ZipFile(BytesIO(payload)) as archive:
                for info in archive.infolist():
                    if info.is_dir() or not info.filename.lower().endswith(".kml"):
                        continue
                    if info.file_size > limit:
                        raise _too_large("Expanded upload exceeds configured limit (MAX_UPLOAD_MB).")
                    with archive.open(info) as entry:
                        expanded = entry.read(limit + 1)
                    if len(expanded) > limit:
                        raise _too_large("Expanded upload exceeds configured limit (MAX_UPLOAD_MB).")
                    return expanded
        except zipfile.BadZipFile as exc:
            raise ValueError(f"Invalid KMZ archive: {upload.filename}") from exc
        raise ValueError(f"KMZ archive contains no KML document: {upload.filename}")
    return payload


def _flatten(entities: list[Feature | FeatureCollection]) -> list[Feature]:
    features: list[Feature] = []
    for entity in entities:
        if isinstance(entity, FeatureCollection):
            features.extend(entity.features)
        else:
            features.append(entity)
    return features


@router.post("/kml/import", response_class=GeoJSONResponse)
async def import_kml_file(
    request: Request,
    file: Annotated[UploadFile, File(description="A .kml document or a .kmz archive")],
) -> GeoJSONResponse:
    payload = await file.read()
    limit = max_upload_bytes(request)
    if len(payload) > limit:
        raise _too_large("Upload exceeds configured limit (MAX_UPLOAD_MB).")
    if not payload:
        raise ValueError("Uploaded file is empty.")

    entities = import_kml(_expand_upload(file, payload, limit))
    features = _flatten(entities)
    logger.info("Imported {} placemarks from {}", len(features), file.filename or "upload")

    collection = FeatureCollection(id=None, name=file.filename)
    collection.add_features(*features)
    return geojson_response(request, collection)
