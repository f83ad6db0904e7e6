"""Supabase client for Python backend."""

import logging
from functools import lru_cache
from typing import Any

from supabase import create_client, Client

from ..config import settings
from ..errors import PersistenceFailure


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logging.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        return None


def run_query(query: Any, action: str) -> list[dict[str, Any]]:
    """Execute a PostgREST query builder and return its rows.

    Any client or network error is re-raised as ``PersistenceFailure`` so the
    services can roll back and map it to a server error.
    """
    try:
        response = query.execute()
    except Exception as exc:
        logging.error(f"Supabase query failed ({action}): {exc}")
        raise PersistenceFailure(action, exc) from exc
    return list(response.data or [])


# Example usage patterns:
#
# from .db.supabase import get_supabase_client, run_query
#
# client = get_supabase_client()
#
# # Owners for a weekday plus the wildcard owners
# rows = run_query(
#     client.table("drivers").select("id, day, name, color, stop_ids").in_("day", ["monday", "all"]),
#     "load drivers",
# )
#
# # Rewrite one owner's membership list
# run_query(
#     client.table("drivers").update({"stop_ids": ["s1", "s2"]}).eq("id", "d1"),
#     "update driver d1",
# )
#
# # Most recent route run for a day
# rows = run_query(
#     client.table("route_runs").select("id").eq("day", "monday").order("created_at", desc=True).limit(1),
#     "load latest route run",
# )
