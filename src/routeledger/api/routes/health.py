"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings
from ...db.supabase import get_supabase_client

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and route table status."""
    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set ROUTELEDGER_SUPABASE_URL and ROUTELEDGER_SUPABASE_KEY environment variables.",
        }

    tables = {}
    for table in (settings.stops_table, settings.drivers_table, settings.legacy_routes_table, settings.route_runs_table):
        try:
            supabase.table(table).select("id").limit(1).execute()
            tables[table] = True
        except Exception:
            tables[table] = False

    connected = any(tables.values())
    return {
        "configured": True,
        "connected": connected,
        "tables": tables,
        "message": "Database connected." if all(tables.values()) else "Database reachable but some tables are missing.",
    }
