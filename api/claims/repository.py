"""
Claim persistence.
This module is where claim-related SQL lives.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from core.db import Database
from core.errors import StorageError

logger = logging.getLogger(__name__)

CLAIM_COLUMNS = (
    "id, full_name, email, phone, city, full_address, "
    "selected_prizes, total_fee, claim_date"
)

CREATE_CLAIMS_TABLE = """
CREATE TABLE IF NOT EXISTS claims (
    id SERIAL PRIMARY KEY,
    full_name VARCHAR(255) NOT NULL,
    email VARCHAR(255) NOT NULL,
    phone VARCHAR(50),
    city VARCHAR(100),
    full_address TEXT NOT NULL,
    selected_prizes JSONB NOT NULL,
    total_fee INTEGER NOT NULL CHECK (total_fee >= 0),
    claim_date TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
)
"""

CREATE_CLAIM_DATE_INDEX = """
CREATE INDEX IF NOT EXISTS claims_claim_date_idx
ON claims (claim_date DESC, id DESC)
"""


def _json_arg(value: list[Any]) -> str:
    """
    asyncpg does not automatically encode Python lists for json/jsonb parameters.
    We pass JSON as a string and cast to jsonb in SQL.
    """
    return json.dumps(value, ensure_ascii=True)


def _decode_prizes(raw: Any) -> list[Any]:
    # jsonb comes back from asyncpg as text unless a codec is registered.
    if isinstance(raw, (bytes, str)):
        raw = json.loads(raw)
    return list(raw or [])


def _row_to_claim(row: dict[str, Any]) -> dict[str, Any]:
    claim = dict(row)
    claim["selected_prizes"] = _decode_prizes(claim.get("selected_prizes"))
    return claim


class ClaimStore:
    """
    Append-only claim store: create the table, insert rows, list rows.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    async def init_schema(self) -> None:
        """
        Create the claims table and its listing index if they are absent.
        Existing rows are never touched.
        """
        await self.database.execute(CREATE_CLAIMS_TABLE)
        await self.database.execute(CREATE_CLAIM_DATE_INDEX)
        logger.info("claims_schema_ready")

    async def insert(
        self,
        *,
        full_name: str,
        email: str,
        full_address: str,
        selected_prizes: list[Any],
        total_fee: int,
        phone: str | None = None,
        city: str | None = None,
    ) -> dict[str, Any]:
        """
        Insert one claim. Returns `{"id": ..., "claim_date": ...}`.
        """
        row = await self.database.fetch_one(
            """
            INSERT INTO claims (full_name, email, phone, city, full_address, selected_prizes, total_fee)
            VALUES ($1, $2, $3, $4, $5, $6::jsonb, $7)
            RETURNING id, claim_date
            """,
            full_name,
            email,
            phone,
            city,
            full_address,
            _json_arg(selected_prizes),
            int(total_fee),
        )
        if row is None:
            raise StorageError("Failed to insert claim.", error="INSERT returned no row")
        return row

    async def list_claims(self) -> list[dict[str, Any]]:
        """
        All claims, most recent first.
        """
        rows = await self.database.fetch_all(
            f"""
            SELECT {CLAIM_COLUMNS}
            FROM claims
            ORDER BY claim_date DESC NULLS LAST, id DESC
            """
        )
        return [_row_to_claim(row) for row in rows]

    async def count(self) -> int:
        row = await self.database.fetch_one("SELECT count(*) AS n FROM claims")
        return int(row["n"]) if row is not None else 0
