"""FastAPI entrypoint for the GeoJSON/KML service."""

from __future__ import annotations

from contextlib import asynccontextmanager
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from gisdto.routers.features_router import router as features_router
from gisdto.routers.import_router import router as import_router
from gisdto.routers.locations_router import router as locations_router
from gisdto.src.errors import ApiError, UnsupportedKindError
from gisdto.src.geojson import DEFAULT_DECIMALS
from gisdto.src.logging_setup import configure_logging
from gisdto.src.schemas import ErrorResponse


def _load_max_upload_bytes() -> int:
    max_upload_mb = float(os.getenv("MAX_UPLOAD_MB", "1024"))
    if max_upload_mb <= 0:
        raise ValueError("MAX_UPLOAD_MB must be greater than 0")
    return int(max_upload_mb * 1024 * 1024)


def _load_geojson_decimals() -> int | None:
    raw = os.getenv("GEOJSON_DECIMALS", str(DEFAULT_DECIMALS)).strip()
    if raw.lower() in {"", "full", "none"}:
        return None
    decimals = int(raw)
    if decimals < 0:
        raise ValueError("GEOJSON_DECIMALS must not be negative")
    return decimals


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))
    app.state.max_upload_bytes = _load_max_upload_bytes()
    app.state.geojson_decimals = _load_geojson_decimals()
    logger.info(
        "Service started (geojson_decimals={}, max_upload_bytes={})",
        app.state.geojson_decimals,
        app.state.max_upload_bytes,
    )
    yield


app = FastAPI(title="GIS DTO GeoJSON API", lifespan=lifespan)

cors_origins = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[item.strip() for item in cors_origins.split(",") if item.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(features_router)
app.include_router(import_router)
app.include_router(locations_router)


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.exception_handler(ApiError)
async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    payload = ErrorResponse(detail=exc.detail, code=exc.code)
    return JSONResponse(status_code=exc.status_code, content=payload.model_dump())


@app.exception_handler(ValueError)
async def value_error_handler(_: Request, exc: ValueError) -> JSONResponse:
    payload = ErrorResponse(detail=str(exc), code="BAD_REQUEST")
    return JSONResponse(status_code=400, content=payload.model_dump())


@app.exception_handler(UnsupportedKindError)
async def unsupported_kind_handler(_: Request, exc: UnsupportedKindError) -> JSONResponse:
    payload = ErrorResponse(detail=str(exc), code="UNSUPPORTED_KIND")
    return JSONResponse(status_code=422, content=payload.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    payload = ErrorResponse(detail=str(exc), code="VALIDATION_ERROR")
    return JSONResponse(status_code=422, content=payload.model_dump())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    payload = ErrorResponse(detail="Unexpected server error", code="INTERNAL_ERROR")
    return JSONResponse(status_code=500, content=payload.model_dump())
