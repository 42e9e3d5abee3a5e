from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from ..domain import DateRange
from ..services import SchedulingSession, ServiceContext, SupabaseRemoteStore


@dataclass(slots=True)
class ApiState:
    context: ServiceContext = field(default_factory=ServiceContext)
    session: Optional[SchedulingSession] = None

    def require_session(self) -> SchedulingSession:
        if self.session is None:
            configured = self.context.settings.session
            if not configured.is_configured:
                raise RuntimeError("No scheduling session. Set ROTA_TEAM_ID and ROTA_MEMBER_ID.")
            assert configured.team_id is not None and configured.member_id is not None
            self.session = SchedulingSession(
                configured.team_id,
                configured.member_id,
                SupabaseRemoteStore(self.context, configured.member_id),
            )
        return self.session

    def default_range(self, anchor: Optional[date] = None) -> DateRange:
        window = self.context.settings.sync
        return DateRange.around(anchor or date.today(), before=window.window_before, after=window.window_after)


api_state = ApiState()
