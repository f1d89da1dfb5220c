"""Position and address endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from gisdto.src.schemas import AddressDocument, FormattedAddressResponse, PositionDocument


router = APIRouter(prefix="/api", tags=["locations"])


@router.post("/positions/normalize", response_model=PositionDocument)
def normalize_position(payload: PositionDocument) -> PositionDocument:
    return PositionDocument.from_domain(payload.to_domain())


@router.post("/addresses/format", response_model=FormattedAddressResponse)
def format_address(payload: AddressDocument) -> FormattedAddressResponse:
    address = payload.to_domain()
    return FormattedAddressResponse(formatted=address.format(), complete=address.is_complete())
