"""Error types shared by the codecs, the KML importer and the API."""

from __future__ import annotations


class UnsupportedKindError(NotImplementedError):
    """Raised when a geometry or feature kind has no mapping in this codebase."""

    def __init__(self, kind: str, context: str) -> None:
        self.kind = kind
        self.context = context
        super().__init__(f"{context}: {kind} is not supported.")


class MalformedGeoJSONError(ValueError):
    """Raised when a GeoJSON document cannot be read into a feature."""


class MalformedKmlError(ValueError):
    """Raised when a KML document cannot be read into features."""


class GeoJSONEncodingError(RuntimeError):
    """Raised when an in-memory GeoJSON write fails."""


class ApiError(Exception):
    """Typed application error for consistent API responses."""

    def __init__(self, detail: str, code: str, status_code: int) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        super().__init__(detail)
