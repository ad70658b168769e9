"""Asset listing, search and administration on top of the repository."""

from __future__ import annotations

import time
from typing import Dict, List, Sequence

from ..db.mappers import normalize_asset, to_asset_row
from ..exceptions import InvalidPayload, RecordNotFound
from ..models.asset import AssetWrite
from ..utils.logging import get_logger, kv
from .filters import SEARCH_ORDER, FilterCriteria, apply_filters

LOGGER = get_logger("services.assets")


def new_asset_id() -> str:
    return f"AS-{int(time.time() * 1000)}"


class AssetService:
    def __init__(self, repo) -> None:
        self.repo = repo

    def snapshot(self) -> List[Dict]:
        """Fresh, normalized copy of every asset in the store."""

        return [normalize_asset(row) for row in self.repo.list_assets()]

    def search(self, criteria: FilterCriteria, order: Sequence[str] = SEARCH_ORDER) -> List[Dict]:
        assets = self.snapshot()
        matched = apply_filters(assets, criteria, order)
        LOGGER.info(
            "asset_search %s",
            kv(
                mode=getattr(self.repo, "mode", "?"),
                total=len(assets),
                matched=len(matched),
                criteria=",".join(criteria.active()) or "none",
            ),
        )
        return matched

    def get(self, asset_id: str) -> Dict:
        row = self.repo.get_asset(asset_id)
        if row is None:
            raise RecordNotFound(f"Asset with id {asset_id} not found")
        return normalize_asset(row)

    def create(self, payload: AssetWrite) -> Dict:
        missing = payload.missing_required()
        if missing:
            raise InvalidPayload("Missing required fields: " + ", ".join(missing))
        data = payload.model_dump(by_alias=True, exclude_none=True)
        data["id"] = payload.id or new_asset_id()
        data.setdefault("status", "Available")
        data.setdefault("imageUrl", "")
        data.setdefault("dataAiHint", "")
        data.setdefault("amenities", [])
        stored = self.repo.insert_asset(to_asset_row(data))
        LOGGER.info("asset_created id=%s", data["id"])
        return normalize_asset(stored)

    def update(self, asset_id: str, payload: AssetWrite) -> Dict:
        changes = payload.model_dump(by_alias=True, exclude_unset=True)
        changes.pop("id", None)
        if not changes:
            raise InvalidPayload("No fields to update")
        for name in ("name", "type", "location"):
            if name in changes and not (changes[name] or "").strip():
                raise InvalidPayload(f"Field '{name}' cannot be empty")
        stored = self.repo.update_asset(asset_id, to_asset_row(changes))
        LOGGER.info("asset_updated id=%s fields=%s", asset_id, ",".join(sorted(changes)))
        return normalize_asset(stored)

    def set_status(self, asset_id: str, status: str) -> Dict:
        stored = self.repo.update_asset(asset_id, to_asset_row({"status": status}))
        LOGGER.info("asset_status id=%s status=%s", asset_id, status)
        return normalize_asset(stored)

    def delete(self, asset_id: str) -> None:
        self.repo.delete_asset(asset_id)
        LOGGER.info("asset_deleted id=%s", asset_id)
