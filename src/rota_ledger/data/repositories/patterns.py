from __future__ import annotations

import logging
from dataclasses import dataclass

from ...domain import EventPattern
from ..supabase import SupabaseGateway

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PatternRepository:
    gateway: SupabaseGateway
    table_name: str

    async def list_for_team(self, team_id: str) -> list[EventPattern]:
        table = await self.gateway.table(self.table_name)
        response = await table.select("*").eq("team_id", team_id).order("display_order").execute()
        patterns: list[EventPattern] = []
        for record in response.data or []:
            if record.get("default_day") is None:
                # Manually scheduled types have no weekday and never expand.
                continue
            try:
                patterns.append(EventPattern.from_record(record))
            except (KeyError, TypeError, ValueError) as exc:
                logger.debug("Skipping malformed pattern row %r: %s", record, exc)
        return patterns
