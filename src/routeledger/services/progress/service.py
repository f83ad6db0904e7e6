"""Read-only per-owner progress for the mobile route list."""

from __future__ import annotations

import logging
from typing import Optional

from ...data.owners_repository import OwnerRepository
from ...data.stops_repository import StopRepository
from ...errors import RouteLedgerError
from ...models.domain import OwnerProgress
from ..day_scope import DayScope, sort_naturally


class ProgressAggregator:
    """Counts total and completed stops per owner.

    Reads take no locks. The feed is advisory, so storage errors and bad day
    tokens produce an empty list instead of an exception.
    """

    def __init__(self, stops: StopRepository, owners: OwnerRepository) -> None:
        self._stops = stops
        self._owners = owners

    def summarize(self, day: Optional[str] = None) -> list[OwnerProgress]:
        try:
            return self._summarize(DayScope.for_day(day))
        except RouteLedgerError as exc:
            logging.warning(f"Progress summary for day '{day}' unavailable: {exc}")
            return []

    def _summarize(self, scope: DayScope) -> list[OwnerProgress]:
        owners = sort_naturally(self._owners.list_for_scope(scope), key=lambda owner: owner.id)
        stops = self._stops.get_many({sid for owner in owners for sid in owner.member_stop_ids})

        summaries: list[OwnerProgress] = []
        for owner in owners:
            live_ids = [sid for sid in owner.member_stop_ids if sid in stops]
            if not live_ids:
                continue
            summaries.append(
                OwnerProgress(
                    owner_id=owner.id,
                    display_name=owner.display_name,
                    color_tag=owner.color_tag,
                    stop_ids=live_ids,
                    total_stops=len(live_ids),
                    completed_stops=sum(1 for sid in live_ids if stops[sid].completed),
                )
            )
        logging.debug(f"Progress for {scope.day}: {len(summaries)} live route(s) of {len(owners)} owner(s)")
        return summaries
