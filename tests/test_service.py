"""
Tests for claim business logic helpers.
"""

from datetime import datetime, timezone

import pytest

from claims import service
from claims.schemas import ClaimRecord


def _record(**overrides):
    values = {
        "id": 3,
        "tracking_id": "TEMU-CLAIM-3",
        "full_name": "Jane Doe",
        "email": "jane@example.com",
        "full_address": "1 Main St",
        "selected_prizes": [{"name": "Mug"}, {"name": "Pen"}],
        "total_fee": 1500,
        "claim_date": datetime(2025, 3, 4, 5, 6, 7, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return ClaimRecord(**values)


def test_tracking_id_is_derived_from_primary_key(monkeypatch):
    monkeypatch.delenv("TRACKING_ID_PREFIX", raising=False)

    assert service.tracking_id_for(12) == "TEMU-CLAIM-12"


def test_tracking_id_prefix_is_configurable(monkeypatch):
    monkeypatch.setenv("TRACKING_ID_PREFIX", "GIFT-")

    assert service.tracking_id_for(5) == "GIFT-5"


def test_claims_response_marks_empty_listing():
    empty = service.claims_response([])
    filled = service.claims_response([_record()])

    assert empty.count == 0 and empty.message == service.NO_CLAIMS_MESSAGE
    assert filled.count == 1 and filled.message is None


def test_render_text():
    text = service.render_text([_record(id=4, tracking_id="TEMU-CLAIM-4", city="Lagos"), _record()])

    assert text.startswith("Claims (2)")
    assert text.index("TEMU-CLAIM-4") < text.index("TEMU-CLAIM-3")
    assert "Prizes:  Mug, Pen" in text
    assert "City:    Lagos" in text
    assert "2025-03-04 05:06:07 UTC" in text


def test_render_text_empty():
    assert service.render_text([]) == "No claims found.\n"


class _LegacyRowsStore:
    async def list_claims(self):
        return [
            {
                "id": 9,
                "full_name": "Old Claim",
                "email": None,
                "phone": None,
                "city": None,
                "full_address": None,
                "selected_prizes": [],
                "total_fee": None,
                "claim_date": None,
            }
        ]


@pytest.mark.asyncio
async def test_list_claims_tolerates_nulls_from_migrated_rows():
    records = await service.list_claims(_LegacyRowsStore())

    assert records[0].email == ""
    assert records[0].full_address == ""
    assert records[0].total_fee == 0
    assert records[0].tracking_id.endswith("-9")
