"""
Operator-triggered claims table migration.

Brings a `claims` table created by an older deployment up to the current
column set. Every step is additive: legacy columns are renamed only when the
current name is missing, absent columns are added, nothing is dropped.

Usage:
    python -m claims.migrations [--dry-run]

Exit codes:
    0: migrated (or nothing to do)
    1: database unconfigured or a statement failed
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from core import settings
from core.db import Database
from core.errors import ServiceError

from .repository import CREATE_CLAIM_DATE_INDEX, CREATE_CLAIMS_TABLE, ClaimStore

logger = logging.getLogger(__name__)

# legacy name -> current name
LEGACY_COLUMN_RENAMES = {
    "name": "full_name",
    "address": "full_address",
    "prizes": "selected_prizes",
    "fee": "total_fee",
    "created_at": "claim_date",
}

# Columns that may be missing from older tables, checked after the renames.
# Mandatory ones are added nullable so existing rows stay valid.
ADDITIVE_COLUMNS = {
    "full_name": "VARCHAR(255)",
    "email": "VARCHAR(255)",
    "full_address": "TEXT",
    "selected_prizes": "JSONB",
    "total_fee": "INTEGER",
    "phone": "VARCHAR(50)",
    "city": "VARCHAR(100)",
    "claim_date": "TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP",
}


async def existing_columns(database: Database) -> set[str]:
    rows = await database.fetch_all(
        """
        SELECT column_name
        FROM information_schema.columns
        WHERE table_schema = current_schema()
          AND table_name = 'claims'
        """
    )
    return {str(row["column_name"]) for row in rows}


def plan_statements(columns: set[str]) -> list[str]:
    """
    SQL statements needed to migrate a table with `columns`.
    An empty column set means the table does not exist yet.
    """
    if not columns:
        return [CREATE_CLAIMS_TABLE.strip(), CREATE_CLAIM_DATE_INDEX.strip()]

    statements: list[str] = []
    present = set(columns)
    for legacy, current in LEGACY_COLUMN_RENAMES.items():
        if legacy in present and current not in present:
            statements.append(f"ALTER TABLE claims RENAME COLUMN {legacy} TO {current}")
            present.discard(legacy)
            present.add(current)

    for column, ddl in ADDITIVE_COLUMNS.items():
        if column not in present:
            statements.append(f"ALTER TABLE claims ADD COLUMN IF NOT EXISTS {column} {ddl}")
            present.add(column)

    if "claim_date" in present:
        statements.append(CREATE_CLAIM_DATE_INDEX.strip())
    return statements


async def migrate(database: Database, *, dry_run: bool = False) -> list[str]:
    statements = plan_statements(await existing_columns(database))
    for statement in statements:
        logger.info("claims_migration_step dry_run=%s sql=%s", dry_run, " ".join(statement.split()))
        if not dry_run:
            await database.execute(statement)
    return statements


async def _run(dry_run: bool) -> int:
    database = Database.from_env()
    if not database.is_configured:
        logger.error("claims_migration_failed error=%s", "DATABASE_URL is not set")
        return 1

    await database.open()
    try:
        statements = await migrate(database, dry_run=dry_run)
        total = await ClaimStore(database).count() if not dry_run else None
    except ServiceError as exc:
        logger.error("claims_migration_failed error=%s detail=%s", exc.message, exc.error)
        return 1
    finally:
        await database.close()

    logger.info("claims_migration_done steps=%s claims=%s", len(statements), total)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="claims.migrations",
        description="Additively migrate the claims table to the current schema.",
    )
    parser.add_argument("--dry-run", action="store_true", help="Print the plan without executing it.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=settings.log_level(), format="%(asctime)s %(levelname)s %(name)s %(message)s")
    return asyncio.run(_run(args.dry_run))


if __name__ == "__main__":
    sys.exit(main())
