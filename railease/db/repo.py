"""Repository abstraction over Supabase or the local development dataset."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Any, Dict, List, Optional, Union

from ..exceptions import RecordNotFound, UpstreamUnavailable
from ..utils.coerce import to_float
from ..utils.logging import get_logger
from .local_repo import LocalRepository
from .supabase_client import create_supabase_client, supabase_configured

LOGGER = get_logger("db.repo")

ASSET_TABLE = os.getenv("ASSET_TABLE", "Asset")
APPLICATION_TABLE = os.getenv("APPLICATION_TABLE", "Application")
LEASE_TABLE = os.getenv("LEASE_TABLE", "Lease")

DEFAULT_FETCH_TIMEOUT = 5.0

_executor = ThreadPoolExecutor(max_workers=8, thread_name_prefix="supabase")


def fetch_timeout() -> float:
    return to_float(os.getenv("ASSET_FETCH_TIMEOUT_SECONDS")) or DEFAULT_FETCH_TIMEOUT


class SupabaseRepository:
    """Rows are returned as stored; callers normalize them.

    Every call is bounded by ``timeout`` seconds. Store errors and timeouts are
    raised as ``UpstreamUnavailable``; a write that matches no row raises
    ``RecordNotFound``.
    """

    mode = "supabase"

    def __init__(self, client: Any, timeout: Optional[float] = None) -> None:
        self._client = client
        self.timeout = timeout if timeout is not None else fetch_timeout()

    # ------------------------------------------------------------------
    # Assets
    def list_assets(self) -> List[Dict]:
        return self._run(self._client.table(ASSET_TABLE).select("*"), "list_assets")

    def get_asset(self, asset_id: str) -> Optional[Dict]:
        rows = self._run(self._client.table(ASSET_TABLE).select("*").eq("id", asset_id), "get_asset")
        return rows[0] if rows else None

    def insert_asset(self, row: Dict) -> Dict:
        rows = self._run(self._client.table(ASSET_TABLE).insert(row), "insert_asset")
        return rows[0] if rows else dict(row)

    def update_asset(self, asset_id: str, row: Dict) -> Dict:
        rows = self._run(self._client.table(ASSET_TABLE).update(row).eq("id", asset_id), "update_asset")
        if not rows:
            raise RecordNotFound(f"Asset with id {asset_id} not found")
        return rows[0]

    def delete_asset(self, asset_id: str) -> None:
        rows = self._run(self._client.table(ASSET_TABLE).delete().eq("id", asset_id), "delete_asset")
        if not rows:
            raise RecordNotFound(f"Asset with id {asset_id} not found")

    # ------------------------------------------------------------------
    # Applications and leases
    def list_applications(self) -> List[Dict]:
        return self._run(self._client.table(APPLICATION_TABLE).select("*"), "list_applications")

    def get_application(self, application_id: str) -> Optional[Dict]:
        query = self._client.table(APPLICATION_TABLE).select("*").eq("id", application_id)
        rows = self._run(query, "get_application")
        return rows[0] if rows else None

    def insert_application(self, row: Dict) -> Dict:
        rows = self._run(self._client.table(APPLICATION_TABLE).insert(row), "insert_application")
        return rows[0] if rows else dict(row)

    def update_application(self, application_id: str, row: Dict) -> Dict:
        query = self._client.table(APPLICATION_TABLE).update(row).eq("id", application_id)
        rows = self._run(query, "update_application")
        if not rows:
            raise RecordNotFound(f"Application with id {application_id} not found")
        return rows[0]

    def list_leases(self) -> List[Dict]:
        return self._run(self._client.table(LEASE_TABLE).select("*"), "list_leases")

    def insert_lease(self, row: Dict) -> Dict:
        rows = self._run(self._client.table(LEASE_TABLE).insert(row), "insert_lease")
        return rows[0] if rows else dict(row)

    # ------------------------------------------------------------------
    def _run(self, query: Any, action: str) -> List[Dict]:
        future = _executor.submit(query.execute)
        try:
            response = future.result(timeout=self.timeout)
        except FutureTimeout as exc:
            future.cancel()
            LOGGER.error("store_timeout action=%s timeout=%s", action, self.timeout)
            raise UpstreamUnavailable("Database request timed out") from exc
        except Exception as exc:
            LOGGER.error("store_error action=%s error=%s", action, exc)
            message = getattr(exc, "message", None) or str(exc) or "Database request failed"
            raise UpstreamUnavailable(message) from exc
        data = getattr(response, "data", None)
        return list(data) if isinstance(data, list) else []


class _BrokenStore:
    """Stands in for a configured store whose client could not be created."""

    mode = "supabase"

    def __init__(self, reason: str) -> None:
        self.reason = reason

    def __getattr__(self, name: str):
        def _fail(*args, **kwargs):
            raise UpstreamUnavailable(f"Database client unavailable: {self.reason}")

        return _fail


Repository = Union[SupabaseRepository, LocalRepository, _BrokenStore]


def build_repository() -> Repository:
    """Supabase when configured, otherwise the local development dataset.

    A configured store that fails to initialise is never replaced with local
    data; every call on it fails instead.
    """

    if not supabase_configured():
        LOGGER.warning("Supabase env not configured; serving local fallback dataset")
        return LocalRepository()
    try:
        client = create_supabase_client()
    except Exception as exc:
        LOGGER.error("supabase_init_failed error=%s", exc)
        return _BrokenStore(str(exc))
    LOGGER.info("Repository running in Supabase mode")
    return SupabaseRepository(client)


_repo_singleton: Repository | None = None


def get_repository() -> Repository:
    global _repo_singleton
    if _repo_singleton is None:
        _repo_singleton = build_repository()
    return _repo_singleton


def reset_repository() -> None:
    global _repo_singleton
    _repo_singleton = None
