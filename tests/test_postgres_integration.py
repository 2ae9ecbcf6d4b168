"""
ClaimStore against a real PostgreSQL database.

Runs only when TEST_DATABASE_URL points at a disposable database; the
fixture resets the claims table there.
"""

import os

import pytest
import pytest_asyncio

from claims.repository import ClaimStore
from core.db import Database

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "").strip()

pytestmark = [
    pytest.mark.asyncio,
    pytest.mark.skipif(not TEST_DATABASE_URL, reason="TEST_DATABASE_URL is not set"),
]


@pytest_asyncio.fixture
async def store():
    database = Database(TEST_DATABASE_URL, min_size=1, max_size=2)
    await database.open()
    await database.execute("DROP TABLE IF EXISTS claims")
    claim_store = ClaimStore(database)
    await claim_store.init_schema()
    try:
        yield claim_store
    finally:
        await database.close()


async def _insert(store, name, prizes=None):
    return await store.insert(
        full_name=name,
        email=f"{name.lower()}@example.com",
        full_address="1 Main St",
        selected_prizes=prizes if prizes is not None else [{"name": "Mug"}],
        total_fee=1500,
    )


async def test_init_schema_twice_keeps_rows(store):
    await _insert(store, "Jane")

    await store.init_schema()

    assert await store.count() == 1


async def test_listing_newest_first_and_prize_round_trip(store):
    prizes = [{"name": "Mug", "value": 3}, {"name": "Pen"}]
    first = await _insert(store, "First")
    second = await _insert(store, "Second", prizes)

    claims = await store.list_claims()

    assert [c["id"] for c in claims] == [second["id"], first["id"]]
    assert claims[0]["selected_prizes"] == prizes
    assert claims[0]["claim_date"] >= claims[1]["claim_date"]


async def test_empty_listing(store):
    assert await store.list_claims() == []
