"""Helper to create a Supabase client when credentials are provided."""

from __future__ import annotations

import os
from typing import Optional, Tuple

from supabase import Client, create_client

from ..exceptions import StoreNotConfigured
from ..utils.logging import get_logger

LOGGER = get_logger("db.supabase")


def supabase_credentials() -> Optional[Tuple[str, str]]:
    """URL and key to use, preferring the service role key (bypasses RLS) over the anon key."""

    url = os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL")
    key = (
        os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        or os.getenv("SUPABASE_ANON_KEY")
        or os.getenv("NEXT_PUBLIC_SUPABASE_ANON_KEY")
    )
    if not url or not key:
        return None
    return url, key


def supabase_configured() -> bool:
    return supabase_credentials() is not None


def create_supabase_client() -> Client:
    credentials = supabase_credentials()
    if credentials is None:
        raise StoreNotConfigured("Supabase credentials are not configured")
    url, key = credentials
    LOGGER.info("supabase_client_created url=%s", url)
    return create_client(url, key)
