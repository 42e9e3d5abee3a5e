from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import List, Optional

from ...domain import DateRange, RawAvailability
from ..supabase import SupabaseGateway

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AvailabilityRepository:
    gateway: SupabaseGateway
    table_name: str

    async def fetch_window(self, team_id: str, date_range: DateRange) -> List[RawAvailability]:
        table = await self.gateway.table(self.table_name)
        response = await (
            table.select("*")
            .eq("team_id", team_id)
            .gte("date", date_range.start.isoformat())
            .lte("date", date_range.end.isoformat())
            .order("date", desc=False)
            .execute()
        )
        rows: list[RawAvailability] = []
        for record in response.data or []:
            try:
                rows.append(RawAvailability.from_record(record))
            except (KeyError, TypeError, ValueError) as exc:
                logger.debug("Skipping malformed availability row %r: %s", record, exc)
        return rows

    async def upsert(
        self,
        team_id: str,
        member_id: str,
        day: date,
        is_available: bool,
        *,
        reason: Optional[str] = None,
        event_key: Optional[str] = None,
    ) -> None:
        payload = {
            "team_id": team_id,
            "user_id": member_id,
            "date": day.isoformat(),
            "is_available": is_available,
            "reason": reason,
            "event_key": event_key,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        # Per-event answers on one day are distinct rows.
        conflict_key = "team_id,user_id,date,event_key" if event_key else "team_id,user_id,date"
        table = await self.gateway.table(self.table_name)
        await table.upsert(payload, on_conflict=conflict_key).execute()
