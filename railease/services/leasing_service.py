"""Lease applications, their admin review, and lease records."""

from __future__ import annotations

import time
from datetime import date
from typing import Dict, List, Optional

import pandas as pd

from ..db.mappers import normalize_application, normalize_asset, normalize_lease, to_asset_row
from ..exceptions import InvalidTransition, RecordNotFound
from ..models.leasing import ApplicationCreate
from ..utils.logging import get_logger

LOGGER = get_logger("services.leasing")


def _counts(values: List[str]) -> Dict[str, int]:
    series = pd.Series(values, dtype=object)
    return {str(k): int(v) for k, v in series.value_counts().items()}


class LeasingService:
    def __init__(self, repo) -> None:
        self.repo = repo

    # ------------------------------------------------------------------
    # Applications
    def list_applications(self, email: Optional[str] = None, status: Optional[str] = None) -> List[Dict]:
        apps = [normalize_application(row) for row in self.repo.list_applications()]
        if email:
            key = email.strip().lower()
            apps = [a for a in apps if a["applicantEmail"].lower() == key]
        if status:
            apps = [a for a in apps if a["status"] == status]
        return sorted(apps, key=lambda a: a["submittedDate"], reverse=True)

    def submit(self, payload: ApplicationCreate) -> Dict:
        asset_row = self.repo.get_asset(payload.asset_id)
        if asset_row is None:
            raise RecordNotFound(f"Asset with id {payload.asset_id} not found")
        asset = normalize_asset(asset_row)
        if asset["status"] != "Available":
            raise InvalidTransition(f"Asset {asset['id']} is not available for lease")
        row = {
            "id": payload.id or f"APP-{int(time.time() * 1000)}",
            "assetId": asset["id"],
            "assetName": asset["name"],
            "assetType": asset["type"],
            "applicantName": payload.applicant_name,
            "applicantEmail": payload.applicant_email.strip(),
            "status": "Pending",
            "submittedDate": date.today().isoformat(),
            "creditScore": payload.credit_score,
            "businessHistory": payload.business_history,
            "leaseValue": payload.lease_value,
        }
        stored = self.repo.insert_application(row)
        LOGGER.info("application_submitted id=%s asset=%s", row["id"], asset["id"])
        return normalize_application(stored)

    def review(self, application_id: str, status: str) -> Dict:
        row = self.repo.get_application(application_id)
        if row is None:
            raise RecordNotFound(f"Application with id {application_id} not found")
        application = normalize_application(row)
        if application["status"] != "Pending":
            raise InvalidTransition(f"Application {application_id} is already {application['status']}")

        if status == "Approved":
            # Lease the asset first so a failure here leaves the application reviewable.
            self.repo.update_asset(application["assetId"], to_asset_row({"status": "Leased"}))
            self.repo.insert_lease(
                {
                    "id": f"L-{int(time.time() * 1000)}",
                    "assetId": application["assetId"],
                    "assetName": application["assetName"],
                    "leaseHolder": application["applicantName"],
                    "status": "Pending",
                    "monthlyRevenue": round((application["leaseValue"] or 0) / 12),
                }
            )
        stored = self.repo.update_application(application_id, {"status": status})
        LOGGER.info("application_reviewed id=%s status=%s", application_id, status)
        return normalize_application(stored)

    # ------------------------------------------------------------------
    # Leases and dashboard
    def list_leases(self, status: Optional[str] = None) -> List[Dict]:
        leases = [normalize_lease(row) for row in self.repo.list_leases()]
        if status:
            leases = [lease for lease in leases if lease["status"] == status]
        return leases

    def dashboard(self) -> Dict:
        assets = [normalize_asset(row) for row in self.repo.list_assets()]
        leases = self.list_leases()
        pending = [a for a in self.list_applications() if a["status"] == "Pending"]
        leased = sum(1 for a in assets if a["status"] == "Leased")
        revenue = sum(float(lease["monthlyRevenue"]) for lease in leases if lease["status"] == "Active")
        return {
            "totalAssets": len(assets),
            "assetsByStatus": _counts([a["status"] for a in assets]),
            "assetsByType": _counts([a["type"] for a in assets]),
            "leasesByStatus": _counts([lease["status"] for lease in leases]),
            "pendingApplications": len(pending),
            "monthlyRevenue": revenue,
            "utilisationPct": round(100.0 * leased / len(assets), 1) if assets else 0.0,
        }
