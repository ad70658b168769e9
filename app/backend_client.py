"""Helper client used by the Streamlit app to talk to the API or fall back to local services."""

from __future__ import annotations

import os
from typing import Any, Callable, Dict, List, Optional

import requests
from pydantic import ValidationError
from requests import Response

from railease.db.repo import get_repository
from railease.exceptions import RailLeaseError
from railease.models.assistant import LeaseRateRequest, MaintenanceRequest, RiskAssessmentRequest, RiskZoneRequest
from railease.models.leasing import ApplicationCreate
from railease.services.asset_service import AssetService
from railease.services.assistant_llm import AssistantLLM
from railease.services.leasing_service import LeasingService


class BackendError(RuntimeError):
    """The API (or the local services) answered with an error the UI should show."""


class BackendClient:
    def __init__(self) -> None:
        self.base_url = os.getenv("API_BASE_URL", "http://localhost:8000")
        self.admin_token = os.getenv("ADMIN_TOKEN")
        self.session = requests.Session()
        self.asset_service: Optional[AssetService] = None
        self.leasing_service: Optional[LeasingService] = None
        self.assistant: Optional[AssistantLLM] = None
        self.use_api = self._ping_api()
        if not self.use_api:
            self._enable_local_mode()

    def _ping_api(self) -> bool:
        try:
            resp = self.session.get(f"{self.base_url}/api/health", timeout=2)
            return resp.status_code == 200
        except requests.RequestException:
            return False

    # ------------------------------------------------------------------
    # Assets
    def list_assets(self) -> List[Dict]:
        """The full asset snapshot; the filter panel narrows it locally."""

        return self._call("GET", "/api/assets", lambda: self.asset_service.snapshot())

    # ------------------------------------------------------------------
    # Applications and leases
    def submit_application(self, payload: Dict[str, Any]) -> Dict:
        return self._call(
            "POST",
            "/api/applications",
            lambda: self.leasing_service.submit(ApplicationCreate.model_validate(payload)),
            json=payload,
        )

    def list_applications(self, email: Optional[str] = None, status: Optional[str] = None) -> List[Dict]:
        params = {k: v for k, v in {"email": email, "status": status}.items() if v}
        return self._call(
            "GET",
            "/api/applications",
            lambda: self.leasing_service.list_applications(email=email, status=status),
            params=params,
        )

    def review_application(self, application_id: str, status: str) -> Dict:
        return self._call(
            "PATCH",
            f"/api/applications/{application_id}",
            lambda: self.leasing_service.review(application_id, status),
            json={"status": status},
            admin=True,
        )

    def list_leases(self) -> List[Dict]:
        return self._call("GET", "/api/leases", lambda: self.leasing_service.list_leases())

    def dashboard(self) -> Dict:
        return self._call("GET", "/api/dashboard", lambda: self.leasing_service.dashboard(), admin=True)

    # ------------------------------------------------------------------
    # Assistive flows
    def assess_risk(self, payload: Dict[str, Any]) -> Dict:
        return self._call(
            "POST",
            "/api/ai/assess-risk",
            lambda: self.assistant.assess_risk(RiskAssessmentRequest.model_validate(payload)).model_dump(by_alias=True),
            json=payload,
            timeout=30,
        )

    def suggest_lease_rate(self, payload: Dict[str, Any]) -> Dict:
        return self._call(
            "POST",
            "/api/ai/suggest-lease-rate",
            lambda: self.assistant.suggest_lease_rate(
                LeaseRateRequest.model_validate(payload), self.asset_service.snapshot()
            ).model_dump(by_alias=True),
            json=payload,
            timeout=30,
        )

    def predict_maintenance(self, payload: Dict[str, Any]) -> Dict:
        return self._call(
            "POST",
            "/api/ai/predict-maintenance",
            lambda: self.assistant.predict_maintenance(MaintenanceRequest.model_validate(payload)).model_dump(by_alias=True),
            json=payload,
            timeout=30,
        )

    def predict_risk_zones(self, payload: Dict[str, Any]) -> Dict:
        return self._call(
            "POST",
            "/api/ai/predict-risk-zones",
            lambda: self.assistant.predict_risk_zones(RiskZoneRequest.model_validate(payload)).model_dump(by_alias=True),
            json=payload,
            timeout=30,
        )

    # ------------------------------------------------------------------
    def _call(
        self,
        method: str,
        path: str,
        local: Callable[[], Any],
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        admin: bool = False,
        timeout: float = 10,
    ) -> Any:
        if self.use_api:
            headers = {"Authorization": f"Bearer {self.admin_token}"} if admin and self.admin_token else {}
            try:
                resp = self.session.request(
                    method, f"{self.base_url}{path}", json=json, params=params, headers=headers, timeout=timeout
                )
            except requests.RequestException:
                self._enable_local_mode()
            else:
                return self._unwrap(resp)
        try:
            return local()
        except (RailLeaseError, ValidationError) as exc:
            raise BackendError(str(exc)) from exc

    def _enable_local_mode(self) -> None:
        if self.asset_service is None:
            repository = get_repository()
            self.asset_service = AssetService(repository)
            self.leasing_service = LeasingService(repository)
            self.assistant = AssistantLLM()
        self.use_api = False

    def _unwrap(self, response: Response) -> Any:
        try:
            payload = response.json()
        except ValueError as exc:
            raise BackendError(f"Unexpected response from API (HTTP {response.status_code})") from exc
        if response.status_code >= 400:
            message = payload.get("error") if isinstance(payload, dict) else None
            raise BackendError(message or f"API request failed (HTTP {response.status_code})")
        if isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload
