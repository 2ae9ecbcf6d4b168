"""
Claim API endpoints.
"""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import PlainTextResponse

from . import schemas, service
from .dependencies import get_claim_store
from .repository import ClaimStore

router = APIRouter()


@router.post(
    "/claim",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.ClaimCreatedResponse,
)
@router.post(
    "/submit-claim",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.ClaimCreatedResponse,
    include_in_schema=False,
)
async def submit_claim(
    payload: schemas.ClaimRequest,
    store: ClaimStore = Depends(get_claim_store),
) -> schemas.ClaimCreatedResponse:
    """
    Record one giveaway claim and return its tracking identifier.
    """
    return await service.submit_claim(store, payload)


@router.get("/claims", response_model=None)
async def list_claims(
    output_format: Literal["json", "text"] = Query("json", alias="format"),
    store: ClaimStore = Depends(get_claim_store),
) -> schemas.ClaimListResponse | PlainTextResponse:
    """
    List all claims, newest first, as JSON or a plain-text report.
    """
    records = await service.list_claims(store)
    if output_format == "text":
        return PlainTextResponse(service.render_text(records))
    return service.claims_response(records)
