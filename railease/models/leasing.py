"""Pydantic models for lease application payloads."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ApplicationStatus = Literal["Pending", "Approved", "Rejected"]
LeaseStatus = Literal["Active", "Expired", "Pending"]


class ApplicationCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    asset_id: str = Field(..., min_length=1, alias="assetId")
    applicant_name: str = Field(..., min_length=1, alias="applicantName")
    applicant_email: str = Field(..., min_length=3, alias="applicantEmail")
    credit_score: Optional[int] = Field(None, ge=300, le=900, alias="creditScore")
    business_history: str = Field("", alias="businessHistory")
    lease_value: float = Field(..., ge=0, alias="leaseValue")


class ApplicationReview(BaseModel):
    status: Literal["Approved", "Rejected"]
