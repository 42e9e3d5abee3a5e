from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from ...domain import DateRange, RawAssignment
from ..supabase import SupabaseGateway

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AssignmentRepository:
    gateway: SupabaseGateway
    table_name: str
    services_table: str
    roles_table: str
    members_table: str

    def _select_clause(self) -> str:
        return (
            f"id, role:{self.roles_table}(name), "
            f"member:{self.members_table}(user_id), "
            f"service:{self.services_table}!inner(service_date, name, team_id)"
        )

    async def fetch_window(self, team_id: str, date_range: DateRange) -> List[RawAssignment]:
        table = await self.gateway.table(self.table_name)
        response = await (
            table.select(self._select_clause())
            .eq("service.team_id", team_id)
            .gte("service.service_date", date_range.start.isoformat())
            .lte("service.service_date", date_range.end.isoformat())
            .execute()
        )
        assignments: list[RawAssignment] = []
        for record in response.data or []:
            try:
                assignments.append(RawAssignment.from_record(record))
            except (KeyError, TypeError, ValueError) as exc:
                logger.debug("Skipping malformed assignment row %r: %s", record, exc)
        return assignments
