"""In-process repository backed by the CSV development dataset.

Used only when no Supabase credentials are configured. Writes live in memory
for the lifetime of the process and are never persisted.
"""

from __future__ import annotations

import copy
import threading
from typing import Dict, List, Optional

from ..exceptions import RecordNotFound
from ..utils.io import load_records
from ..utils.logging import get_logger

LOGGER = get_logger("db.local")

A_FALLBACK = "fallback_assets.csv"
APP_FALLBACK = "applications.csv"
L_FALLBACK = "leases.csv"


class LocalRepository:
    mode = "local"

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._assets = self._load(A_FALLBACK)
        self._applications = self._load(APP_FALLBACK)
        self._leases = self._load(L_FALLBACK)

    # ------------------------------------------------------------------
    # Assets
    def list_assets(self) -> List[Dict]:
        with self._lock:
            return copy.deepcopy(self._assets)

    def get_asset(self, asset_id: str) -> Optional[Dict]:
        return self._find(self._assets, asset_id)

    def insert_asset(self, row: Dict) -> Dict:
        return self._insert(self._assets, row, "asset")

    def update_asset(self, asset_id: str, row: Dict) -> Dict:
        return self._update(self._assets, asset_id, row, "Asset")

    def delete_asset(self, asset_id: str) -> None:
        with self._lock:
            remaining = [r for r in self._assets if str(r.get("id")) != str(asset_id)]
            if len(remaining) == len(self._assets):
                raise RecordNotFound(f"Asset with id {asset_id} not found")
            self._assets = remaining
        LOGGER.warning("local_write_not_persisted action=delete_asset id=%s", asset_id)

    # ------------------------------------------------------------------
    # Applications and leases
    def list_applications(self) -> List[Dict]:
        with self._lock:
            return copy.deepcopy(self._applications)

    def get_application(self, application_id: str) -> Optional[Dict]:
        return self._find(self._applications, application_id)

    def insert_application(self, row: Dict) -> Dict:
        return self._insert(self._applications, row, "application")

    def update_application(self, application_id: str, row: Dict) -> Dict:
        return self._update(self._applications, application_id, row, "Application")

    def list_leases(self) -> List[Dict]:
        with self._lock:
            return copy.deepcopy(self._leases)

    def insert_lease(self, row: Dict) -> Dict:
        return self._insert(self._leases, row, "lease")

    # ------------------------------------------------------------------
    def _load(self, name: str) -> List[Dict]:
        try:
            return load_records(name)
        except FileNotFoundError:
            LOGGER.warning("fallback_dataset_missing name=%s", name)
            return []

    def _find(self, rows: List[Dict], record_id: str) -> Optional[Dict]:
        with self._lock:
            for row in rows:
                if str(row.get("id")) == str(record_id):
                    return copy.deepcopy(row)
        return None

    def _insert(self, rows: List[Dict], row: Dict, kind: str) -> Dict:
        with self._lock:
            rows.append(copy.deepcopy(row))
        LOGGER.warning("local_write_not_persisted action=insert_%s id=%s", kind, row.get("id"))
        return copy.deepcopy(row)

    def _update(self, rows: List[Dict], record_id: str, changes: Dict, kind: str) -> Dict:
        with self._lock:
            for row in rows:
                if str(row.get("id")) == str(record_id):
                    row.update(copy.deepcopy(changes))
                    updated = copy.deepcopy(row)
                    break
            else:
                raise RecordNotFound(f"{kind} with id {record_id} not found")
        LOGGER.warning("local_write_not_persisted action=update_%s id=%s", kind.lower(), record_id)
        return updated
