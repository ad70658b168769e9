"""Input/output schemas for the LLM-backed assistive capabilities."""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

RiskDecision = Literal["Auto-Approve", "Manual-Review", "Reject"]
Confidence = Literal["High", "Medium", "Low"]


class RiskAssessmentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    applicant_data: str = Field(..., min_length=1, alias="applicantData")
    asset_type: str = Field(..., alias="assetType")
    lease_value: float = Field(..., ge=0, alias="leaseValue")


class RiskAssessment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    risk_score: int = Field(..., ge=0, le=100, alias="riskScore")
    decision: RiskDecision
    reasoning: str


class LeaseRateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    asset_type: str = Field(..., alias="assetType")
    location: str
    size: float = Field(..., gt=0)
    historical_data: str = Field("", alias="historicalData")
    market_trends: str = Field("", alias="marketTrends")
    asset_condition: str = Field("good", alias="assetCondition")


class LeaseRateSuggestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    suggested_lease_rate: float = Field(..., ge=0, alias="suggestedLeaseRate")
    confidence_level: Confidence = Field(..., alias="confidenceLevel")
    rationale: str


Urgency = Literal["Low", "Medium", "High", "None"]


class MaintenanceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    warehouse_id: str = Field(..., min_length=1, alias="warehouseId")
    sensor_data: str = Field(..., min_length=1, alias="sensorData")


class MaintenancePrediction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    maintenance_required: bool = Field(..., alias="maintenanceRequired")
    urgency: Urgency
    recommendation: str

    @model_validator(mode="after")
    def _consistent(self) -> "MaintenancePrediction":
        if self.maintenance_required == (self.urgency == "None"):
            raise ValueError("urgency must be None exactly when no maintenance is required")
        return self


class RiskZoneRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    historical_data: str = Field(..., min_length=1, alias="historicalData")
    land_records: str = Field("", alias="landRecords")
    satellite_analysis: str = Field("", alias="satelliteAnalysis")


class RiskZone(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    location: str
    risk_level: Confidence = Field(..., alias="riskLevel")
    reason: str


class RiskZonePrediction(BaseModel):
    zones: List[RiskZone]
