"""
Claim business logic.

Scope:
- record a validated submission and hand back its tracking identifier
- list recorded claims as JSON-ready dicts or a plain-text report
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from core import settings
from core.errors import StorageError

from . import schemas
from .repository import ClaimStore

logger = logging.getLogger(__name__)

CLAIM_RECORDED_MESSAGE = "Claim successfully recorded in the PostgreSQL database!"
CLAIM_FAILED_MESSAGE = "Claim failed due to a database error. Check server logs for details."
LIST_FAILED_MESSAGE = "Could not load claims due to a database error. Check server logs for details."
NO_CLAIMS_MESSAGE = "No claims found."


def tracking_id_for(claim_id: int, *, prefix: str | None = None) -> str:
    # Derived from the primary key, so it cannot collide.
    prefix = (prefix or settings.tracking_id_prefix()).rstrip("-")
    return f"{prefix}-{int(claim_id)}"


async def submit_claim(store: ClaimStore, payload: schemas.ClaimRequest) -> schemas.ClaimCreatedResponse:
    try:
        row = await store.insert(
            full_name=payload.full_name,
            email=payload.email,
            phone=payload.phone,
            city=payload.city,
            full_address=payload.full_address,
            selected_prizes=payload.prizes_payload(),
            total_fee=payload.total_fee,
        )
    except StorageError as exc:
        logger.error("claim_insert_failed error=%s", exc.error or exc.message)
        raise StorageError(CLAIM_FAILED_MESSAGE, error=exc.error or exc.message) from exc

    claim_id = int(row["id"])
    logger.info("claim_recorded claim_id=%s prizes=%s", claim_id, len(payload.selected_prizes))
    return schemas.ClaimCreatedResponse(
        message=CLAIM_RECORDED_MESSAGE,
        tracking_id=tracking_id_for(claim_id),
        claim_id=claim_id,
        total_fee=payload.total_fee,
        claim_date=row.get("claim_date"),
    )


def _to_record(row: dict[str, Any]) -> schemas.ClaimRecord:
    # Rows migrated from older tables may carry NULLs in mandatory columns.
    return schemas.ClaimRecord(
        id=int(row["id"]),
        tracking_id=tracking_id_for(int(row["id"])),
        full_name=str(row.get("full_name") or ""),
        email=str(row.get("email") or ""),
        phone=row.get("phone"),
        city=row.get("city"),
        full_address=str(row.get("full_address") or ""),
        selected_prizes=list(row.get("selected_prizes") or []),
        total_fee=int(row.get("total_fee") or 0),
        claim_date=row.get("claim_date"),
    )


async def list_claims(store: ClaimStore) -> list[schemas.ClaimRecord]:
    try:
        rows = await store.list_claims()
    except StorageError as exc:
        logger.error("claim_list_failed error=%s", exc.error or exc.message)
        raise StorageError(LIST_FAILED_MESSAGE, error=exc.error or exc.message) from exc
    return [_to_record(row) for row in rows]


def claims_response(records: list[schemas.ClaimRecord]) -> schemas.ClaimListResponse:
    return schemas.ClaimListResponse(
        count=len(records),
        claims=records,
        message=None if records else NO_CLAIMS_MESSAGE,
    )


def _prize_names(prizes: list[Any]) -> str:
    names = []
    for prize in prizes:
        if isinstance(prize, dict):
            names.append(str(prize.get("name") or "?"))
        else:
            names.append(str(prize))
    return ", ".join(names) or "-"


def _format_date(value: datetime | None) -> str:
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M:%S %Z").strip()


def render_text(records: list[schemas.ClaimRecord]) -> str:
    """
    Preformatted, human-readable listing (newest first).
    """
    if not records:
        return NO_CLAIMS_MESSAGE + "\n"

    lines = [f"Claims ({len(records)})", "=" * 40]
    for record in records:
        lines.extend(
            [
                f"{record.tracking_id}  [{_format_date(record.claim_date)}]",
                f"  Name:    {record.full_name}",
                f"  Email:   {record.email}",
                f"  Phone:   {record.phone or '-'}",
                f"  City:    {record.city or '-'}",
                f"  Address: {record.full_address}",
                f"  Prizes:  {_prize_names(record.selected_prizes)}",
                f"  Fee:     {record.total_fee}",
                "-" * 40,
            ]
        )
    return "\n".join(lines) + "\n"
