from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from ...domain import DateRange, InstanceFilters, RawInstance
from ..supabase import SupabaseGateway

_COLUMNS = "id, service_date, name, start_time, status, updated_at, created_at"


@dataclass(slots=True)
class EventInstanceRepository:
    gateway: SupabaseGateway
    table_name: str

    async def fetch_window(
        self,
        team_id: str,
        date_range: DateRange,
        filters: Optional[InstanceFilters] = None,
    ) -> List[RawInstance]:
        start = date_range.start
        if filters and not filters.include_past:
            start = max(start, date.today())
        table = await self.gateway.table(self.table_name)
        query = (
            table.select(_COLUMNS)
            .eq("team_id", team_id)
            .gte("service_date", start.isoformat())
            .lte("service_date", date_range.end.isoformat())
        )
        if filters and filters.statuses:
            query = query.in_("status", list(filters.statuses))
        response = await query.order("service_date", desc=False).execute()
        return [RawInstance.from_record(record) for record in response.data or []]
