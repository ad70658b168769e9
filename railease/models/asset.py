"""Pydantic models for asset write payloads."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

AssetStatus = Literal["Available", "Leased"]

# Suggested categories for railway assets; stored values are free text.
ASSET_CATEGORIES = ("Warehouse", "Parking", "Godown", "Land", "Room")


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class AvailabilityWindow(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start: datetime = Field(..., alias="from")
    end: datetime = Field(..., alias="to")

    @model_validator(mode="after")
    def _ordered(self) -> "AvailabilityWindow":
        if _as_utc(self.start) > _as_utc(self.end):
            raise ValueError("availability.from must not be after availability.to")
        return self


class AssetWrite(BaseModel):
    """Fields an administrator may set. Everything is optional so the same model
    serves partial updates; creation checks the required fields itself."""

    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    location: Optional[str] = None
    size: Optional[float] = Field(None, gt=0)
    image_url: Optional[str] = Field(None, alias="imageUrl")
    status: Optional[AssetStatus] = None
    data_ai_hint: Optional[str] = Field(None, alias="dataAiHint")
    lease_type: Optional[str] = Field(None, alias="leaseType")
    availability: Optional[AvailabilityWindow] = None
    geo_location: Optional[str] = Field(None, alias="geoLocation")
    rent: Optional[float] = Field(None, ge=0)
    amenities: Optional[Union[List[str], str]] = None

    def missing_required(self) -> List[str]:
        return [name for name in ("name", "type", "location") if not (getattr(self, name) or "").strip()]


class StatusUpdate(BaseModel):
    status: AssetStatus
