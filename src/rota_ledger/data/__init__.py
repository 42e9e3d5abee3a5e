"""Data access layer."""

from __future__ import annotations

from .supabase import SupabaseGateway, SupabaseNotInitializedError
from .cache.instance_index import InstanceIndex

__all__ = [
    "InstanceIndex",
    "SupabaseGateway",
    "SupabaseNotInitializedError",
]
