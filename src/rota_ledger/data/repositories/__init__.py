"""Supabase repositories for the remote scheduling tables."""

from __future__ import annotations

from .assignments import AssignmentRepository
from .availability import AvailabilityRepository
from .events import EventInstanceRepository
from .patterns import PatternRepository

__all__ = ["AssignmentRepository", "AvailabilityRepository", "EventInstanceRepository", "PatternRepository"]
