from __future__ import annotations

from dataclasses import dataclass, field

from ..config import AppSettings, get_settings
from ..data import SupabaseGateway
from ..data.repositories import (
    AssignmentRepository,
    AvailabilityRepository,
    EventInstanceRepository,
    PatternRepository,
)


@dataclass(slots=True)
class ServiceContext:
    """Aggregate root for services to share settings, gateway, and repositories."""

    settings: AppSettings = field(default_factory=get_settings)
    gateway: SupabaseGateway = field(init=False)
    events: EventInstanceRepository = field(init=False)
    availability: AvailabilityRepository = field(init=False)
    assignments: AssignmentRepository = field(init=False)
    patterns: PatternRepository = field(init=False)

    def __post_init__(self) -> None:
        storage = self.settings.storage
        self.gateway = SupabaseGateway(self.settings.supabase)
        self.events = EventInstanceRepository(gateway=self.gateway, table_name=storage.services_table)
        self.availability = AvailabilityRepository(gateway=self.gateway, table_name=storage.availability_table)
        self.assignments = AssignmentRepository(
            gateway=self.gateway,
            table_name=storage.assignments_table,
            services_table=storage.services_table,
            roles_table=storage.roles_table,
            members_table=storage.members_table,
        )
        self.patterns = PatternRepository(gateway=self.gateway, table_name=storage.patterns_table)
