"""Application services orchestrating data access and the scheduling engine."""

from __future__ import annotations

from .context import ServiceContext
from .remote import RemoteStore, SupabaseRemoteStore
from .session import SchedulingSession

__all__ = ["RemoteStore", "SchedulingSession", "ServiceContext", "SupabaseRemoteStore"]
