"""LLM interface for the assistive leasing flows using Gemini.

Each capability takes a validated request model and returns a validated
response model. Without an API key, or when Gemini returns something that does
not fit the schema, a deterministic heuristic from ``scoring`` answers instead.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Mapping, Optional, Sequence

import google.generativeai as genai
from pydantic import ValidationError

from ..models.assistant import (
    LeaseRateRequest,
    LeaseRateSuggestion,
    MaintenancePrediction,
    MaintenanceRequest,
    RiskAssessment,
    RiskAssessmentRequest,
    RiskZone,
    RiskZonePrediction,
    RiskZoneRequest,
)
from ..utils.logging import get_logger
from .scoring import (
    AUTO_APPROVE_BELOW,
    RECOMMENDATIONS,
    REJECT_ABOVE,
    clamp_score,
    comparable_rate,
    decision_from_risk,
    encroachment_zones,
    heuristic_risk,
    sensor_maintenance,
    summarise_factors,
)

LOGGER = get_logger("services.assistant_llm")

DEFAULT_MODEL = "gemini-2.5-flash"

RISK_PROMPT = """You assess lease applications for railway land and facilities.

Applicant data: {applicant_data}
Asset type: {asset_type}
Lease value: INR {lease_value} per year

Give a risk score from 0 (very low risk) to 100 (very high risk). Weigh credit
score (higher is better), business stability, document verification status and
past defaults. Large leases on critical assets carry more risk.
Decision: score below {low} -> "Auto-Approve", {low}-{high} -> "Manual-Review",
above {high} -> "Reject". For a manual review, say what the officer should check.

Return STRICT JSON: {{"riskScore": int, "decision": "Auto-Approve|Manual-Review|Reject", "reasoning": "..."}}"""

RATE_PROMPT = """You price commercial railway property leases.

Asset type: {asset_type}
Location: {location}
Size: {size} sq ft
Condition: {asset_condition}
Historical and occupancy data: {historical_data}
Market trends and competitor pricing: {market_trends}
Comparable listings (monthly rent per sq ft, same portfolio): {comparables}

Suggest a monthly lease rate per square foot. Confidence is High, Medium or Low
depending on how complete and consistent the data is. Explain which factors
moved the price.

Return STRICT JSON: {{"suggestedLeaseRate": number, "confidenceLevel": "High|Medium|Low", "rationale": "..."}}"""

MAINTENANCE_PROMPT = """You predict maintenance needs for railway warehouses from sensor data.

Warehouse: {warehouse_id}
Recent sensor readings: {sensor_data}

Look for anomalies or trends that suggest a failure: rising temperature,
excessive vibration, high humidity. If there is an issue, set
maintenanceRequired to true, pick an urgency of High, Medium or Low and give a
concrete action. If the readings look normal, set maintenanceRequired to false,
urgency to "None" and recommendation to "All systems operating normally."

Return STRICT JSON: {{"maintenanceRequired": bool, "urgency": "Low|Medium|High|None", "recommendation": "..."}}"""

ZONES_PROMPT = """You predict where railway land is at risk of future encroachment.

Historical encroachment incidents: {historical_data}
Land records (discrepancies, disputes): {land_records}
Satellite imagery notes: {satellite_analysis}

List specific zones at High, Medium or Low risk. Look for repeated incidents,
proximity to informal settlements, and unexplained changes in land use. Give a
reason for each zone.

Return STRICT JSON: {{"zones": [{{"location": "...", "riskLevel": "High|Medium|Low", "reason": "..."}}]}}"""


class AssistantLLM:
    def __init__(self, model: Optional[str] = None) -> None:
        self.api_key = os.getenv("GOOGLE_API_KEY")
        preferred = model or os.getenv("LLM_MODEL") or DEFAULT_MODEL
        self.model_name = preferred.split("/", 1)[-1] if preferred.startswith("models/") else preferred
        self._model = None
        if self.api_key:
            try:
                genai.configure(api_key=self.api_key)
                self._model = genai.GenerativeModel(self.model_name)
            except Exception as exc:
                LOGGER.warning("Failed to initialise Gemini client: %s", exc)
                self._model = None

    @property
    def available(self) -> bool:
        return self._model is not None

    # ------------------------------------------------------------------
    # Capabilities
    def assess_risk(self, request: RiskAssessmentRequest) -> RiskAssessment:
        fallback = self._fallback_risk(request)
        if not self._model:
            return fallback
        prompt = RISK_PROMPT.format(
            applicant_data=request.applicant_data,
            asset_type=request.asset_type,
            lease_value=f"{request.lease_value:,.0f}",
            low=AUTO_APPROVE_BELOW,
            high=REJECT_ABOVE,
        )
        try:
            payload = self._generate_json(prompt, temperature=0.2)
            payload["riskScore"] = clamp_score(float(payload.get("riskScore", 0)))
            # The thresholds are policy; never trust the model's own label.
            payload["decision"] = decision_from_risk(payload["riskScore"])
            return RiskAssessment.model_validate(payload)
        except (ValueError, TypeError, ValidationError) as exc:
            LOGGER.warning("gemini_risk_failed error=%s", exc)
            return fallback

    def suggest_lease_rate(self, request: LeaseRateRequest, snapshot: Sequence[Mapping[str, Any]] = ()) -> LeaseRateSuggestion:
        fallback = self._fallback_rate(request, snapshot)
        if not self._model:
            return fallback
        comps = [
            {"name": a.get("name"), "type": a.get("type"), "location": a.get("location"), "rent": a.get("rent"), "size": a.get("size")}
            for a in snapshot
            if a.get("rent") is not None
        ][:25]
        prompt = RATE_PROMPT.format(
            asset_type=request.asset_type,
            location=request.location,
            size=request.size,
            asset_condition=request.asset_condition,
            historical_data=request.historical_data or "not provided",
            market_trends=request.market_trends or "not provided",
            comparables=json.dumps(comps),
        )
        try:
            payload = self._generate_json(prompt, temperature=0.3)
            return LeaseRateSuggestion.model_validate(payload)
        except (ValueError, TypeError, ValidationError) as exc:
            LOGGER.warning("gemini_rate_failed error=%s", exc)
            return fallback

    def predict_maintenance(self, request: MaintenanceRequest) -> MaintenancePrediction:
        fallback = self._fallback_maintenance(request)
        if not self._model:
            return fallback
        prompt = MAINTENANCE_PROMPT.format(warehouse_id=request.warehouse_id, sensor_data=request.sensor_data)
        try:
            payload = self._generate_json(prompt, temperature=0.2)
            return MaintenancePrediction.model_validate(payload)
        except (ValueError, TypeError, ValidationError) as exc:
            LOGGER.warning("gemini_maintenance_failed warehouse=%s error=%s", request.warehouse_id, exc)
            return fallback

    def predict_risk_zones(self, request: RiskZoneRequest) -> RiskZonePrediction:
        fallback = self._fallback_zones(request)
        if not self._model:
            return fallback
        prompt = ZONES_PROMPT.format(
            historical_data=request.historical_data,
            land_records=request.land_records or "not provided",
            satellite_analysis=request.satellite_analysis or "not provided",
        )
        try:
            payload = self._generate_json(prompt, temperature=0.3)
            return RiskZonePrediction.model_validate(payload)
        except (ValueError, TypeError, ValidationError) as exc:
            LOGGER.warning("gemini_zones_failed error=%s", exc)
            return fallback

    def probe(self) -> Dict[str, Any]:
        if not self._model:
            return {"ok": False, "why": "no_model"}
        try:
            text = self._model.generate_content("ping").text
            return {"ok": True, "model": self.model_name, "sample": (text or "")[:40]}
        except Exception as exc:
            return {"ok": False, "model": self.model_name, "error": str(exc)}

    # ------------------------------------------------------------------
    # Fallbacks
    def _fallback_risk(self, request: RiskAssessmentRequest) -> RiskAssessment:
        result = heuristic_risk(request.applicant_data, request.lease_value)
        drivers = ", ".join(f"{name} ({effect})" for name, effect in summarise_factors(result.factors)) or "none"
        reasoning = (
            f"Heuristic risk score {result.risk_score}/100 for a {request.asset_type or 'railway'} lease "
            f"worth INR {request.lease_value:,.0f} per year. Main drivers: {drivers}."
        )
        if result.decision == "Manual-Review":
            reasoning += " An officer should confirm credit history, document verification and trading record."
        return RiskAssessment(risk_score=result.risk_score, decision=result.decision, reasoning=reasoning)

    def _fallback_rate(self, request: LeaseRateRequest, snapshot: Sequence[Mapping[str, Any]]) -> LeaseRateSuggestion:
        result = comparable_rate(snapshot, request.asset_type, request.asset_condition)
        if result.rate_per_sqft is None:
            return LeaseRateSuggestion(
                suggested_lease_rate=0.0,
                confidence_level="Low",
                rationale="No comparable listings with rent and size are available; insufficient data to price this asset.",
            )
        scope = f"{result.comparables} {request.asset_type} listings" if result.same_type else f"{result.comparables} listings of any type"
        rationale = (
            f"Median rent of {scope} in the current portfolio, adjusted for "
            f"'{request.asset_condition}' condition. Location ({request.location}) and market trends "
            "were not modelled in this fallback estimate."
        )
        return LeaseRateSuggestion(
            suggested_lease_rate=result.rate_per_sqft,
            confidence_level=result.confidence,
            rationale=rationale,
        )

    def _fallback_maintenance(self, request: MaintenanceRequest) -> MaintenancePrediction:
        result = sensor_maintenance(request.sensor_data)
        if not result.required:
            return MaintenancePrediction(
                maintenance_required=False, urgency="None", recommendation="All systems operating normally."
            )
        actions = "; ".join(
            f"{RECOMMENDATIONS[sensor]} ({sensor} peaked at {value:g})" for sensor, value, _ in result.findings
        )
        return MaintenancePrediction(maintenance_required=True, urgency=result.urgency, recommendation=actions + ".")

    def _fallback_zones(self, request: RiskZoneRequest) -> RiskZonePrediction:
        zones = []
        for zone in encroachment_zones(request.historical_data, request.land_records, request.satellite_analysis):
            reason = f"{zone.incidents} recorded incident{'s' if zone.incidents != 1 else ''}"
            if zone.flagged:
                reason += "; disputed or changing land use noted for this location"
            zones.append(RiskZone(location=zone.location, risk_level=zone.risk_level, reason=reason + "."))
        return RiskZonePrediction(zones=zones)

    # ------------------------------------------------------------------
    def _generate_json(self, prompt: str, temperature: float) -> Dict[str, Any]:
        try:
            response = self._model.generate_content(
                prompt,
                generation_config={"temperature": temperature, "response_mime_type": "application/json"},
            )
        except Exception as exc:
            raise ValueError(f"Gemini request failed: {exc}") from exc
        return self._load_json(self._extract_text(response))

    def _extract_text(self, response: Any) -> str:
        if hasattr(response, "text") and response.text:
            return response.text
        if hasattr(response, "candidates"):
            for candidate in response.candidates:
                if candidate.content.parts:
                    return "".join(part.text for part in candidate.content.parts if getattr(part, "text", None))
        raise ValueError("Empty response from Gemini")

    def _load_json(self, text: str) -> Dict[str, Any]:
        text = text.strip()
        start = text.find("{")
        end = text.rfind("}")
        if start >= 0 and end >= 0:
            text = text[start : end + 1]
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("Gemini returned a non-object JSON payload")
        return data


_assistant_singleton: AssistantLLM | None = None


def get_assistant() -> AssistantLLM:
    global _assistant_singleton
    if _assistant_singleton is None:
        _assistant_singleton = AssistantLLM()
    return _assistant_singleton
