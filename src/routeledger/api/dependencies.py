"""Service wiring for the API routes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache

from ..data.owners_repository import InMemoryOwnerRepository, SupabaseOwnerRepository
from ..data.snapshots_repository import InMemorySnapshotRepository, SupabaseSnapshotRepository
from ..data.stops_repository import InMemoryStopRepository, SupabaseStopRepository
from ..db.supabase import get_supabase_client
from ..persistence.locks import ScopeLocks
from ..services.assignment import AssignmentStore
from ..services.progress import ProgressAggregator
from ..services.snapshots import SnapshotManager


@dataclass(frozen=True)
class Services:
    assignment: AssignmentStore
    snapshots: SnapshotManager
    progress: ProgressAggregator


@lru_cache()
def get_services() -> Services:
    """Build the services once, backed by Supabase when it is configured."""
    client = get_supabase_client()
    if client is None:
        logging.warning("Supabase not configured - assignments are kept in memory and lost on restart")
        stops = InMemoryStopRepository()
        owners = InMemoryOwnerRepository()
        snapshots = InMemorySnapshotRepository()
    else:
        stops = SupabaseStopRepository(client)
        owners = SupabaseOwnerRepository(client)
        snapshots = SupabaseSnapshotRepository(client)

    # One lock registry so assignment and snapshot writes exclude each other.
    locks = ScopeLocks()
    return Services(
        assignment=AssignmentStore(stops, owners, locks),
        snapshots=SnapshotManager(stops, owners, snapshots, locks),
        progress=ProgressAggregator(stops, owners),
    )


def get_assignment_store() -> AssignmentStore:
    return get_services().assignment


def get_snapshot_manager() -> SnapshotManager:
    return get_services().snapshots


def get_progress_aggregator() -> ProgressAggregator:
    return get_services().progress
