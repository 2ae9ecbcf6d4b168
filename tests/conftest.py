"""Pytest configuration and fixtures."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from core.db import Database
from core.errors import StorageError
from main import create_app


class FakeClaimStore:
    """In-memory stand-in for ClaimStore."""

    def __init__(self):
        self.rows = []
        self.schema_calls = 0
        self.fail_with = None
        self._next_id = 1
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    async def init_schema(self):
        self.schema_calls += 1

    async def insert(self, *, full_name, email, full_address, selected_prizes, total_fee, phone=None, city=None):
        if self.fail_with is not None:
            raise self.fail_with
        self._clock += timedelta(seconds=1)
        row = {
            "id": self._next_id,
            "full_name": full_name,
            "email": email,
            "phone": phone,
            "city": city,
            "full_address": full_address,
            # jsonb round-trip
            "selected_prizes": json.loads(json.dumps(selected_prizes)),
            "total_fee": int(total_fee),
            "claim_date": self._clock,
        }
        self._next_id += 1
        self.rows.append(row)
        return {"id": row["id"], "claim_date": row["claim_date"]}

    async def list_claims(self):
        if self.fail_with is not None:
            raise self.fail_with
        return sorted(self.rows, key=lambda r: (r["claim_date"], r["id"]), reverse=True)

    async def count(self):
        return len(self.rows)


@pytest.fixture
def store():
    return FakeClaimStore()


@pytest.fixture
def client(store):
    app = create_app(database=Database(None), store=store)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def storage_failure():
    return StorageError("Database query failed.", error="connection refused")


@pytest.fixture
def valid_claim():
    return {
        "fullName": "Jane Doe",
        "email": "jane@example.com",
        "fullAddress": "1 Main St",
        "selectedPrizes": [{"name": "Mug"}],
        "totalFee": 1500,
    }
