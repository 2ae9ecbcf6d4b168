"""
Claim API schemas (request/response models).

The JSON surface is camelCase; Python attributes are snake_case.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MANDATORY_FIELDS = ("fullName", "email", "fullAddress", "selectedPrizes", "totalFee")


class Prize(BaseModel):
    # Extra keys (image, value, ...) are stored verbatim.
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1, max_length=255)


class ClaimRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field(..., alias="fullName", min_length=1, max_length=255)
    email: str = Field(..., min_length=1, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    city: str | None = Field(default=None, max_length=100)
    full_address: str = Field(..., alias="fullAddress", min_length=1)
    selected_prizes: list[Prize] = Field(..., alias="selectedPrizes")
    total_fee: int = Field(..., alias="totalFee", ge=0)

    @field_validator("total_fee", mode="before")
    @classmethod
    def _truncate_fee(cls, value: Any) -> Any:
        """
        Accept numbers and numeric strings; fractional fees are truncated.
        """
        if isinstance(value, bool) or value is None:
            return value
        if isinstance(value, (int, float, str)):
            try:
                return int(Decimal(str(value).strip()))
            except (InvalidOperation, ValueError, OverflowError):
                return value
        return value

    def prizes_payload(self) -> list[dict[str, Any]]:
        return [prize.model_dump() for prize in self.selected_prizes]


class ClaimCreatedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    tracking_id: str = Field(..., serialization_alias="trackingId")
    claim_id: int = Field(..., serialization_alias="claimId")
    total_fee: int = Field(..., serialization_alias="totalFee")
    claim_date: datetime | None = Field(default=None, serialization_alias="claimDate")


class ClaimRecord(BaseModel):
    """
    One persisted claim, keyed by its column names.
    """

    id: int
    tracking_id: str
    full_name: str
    email: str
    phone: str | None = None
    city: str | None = None
    full_address: str
    selected_prizes: list[Any]
    total_fee: int
    claim_date: datetime | None = None


class ClaimListResponse(BaseModel):
    success: bool = True
    count: int
    claims: list[ClaimRecord]
    message: str | None = None
