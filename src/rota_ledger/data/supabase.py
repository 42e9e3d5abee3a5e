from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from supabase import AsyncClient, acreate_client

from ..config.settings import SupabaseSettings


class SupabaseNotInitializedError(RuntimeError):
    """Raised when accessing the Supabase client before initialization."""


@dataclass
class SupabaseGateway:
    """Thin wrapper around the async Supabase client, created on first use."""

    settings: SupabaseSettings
    _client: Optional[AsyncClient] = None

    async def ensure_client(self) -> AsyncClient:
        if self._client is not None:
            return self._client
        if not self.settings.is_configured:
            missing = ", ".join(self.settings.missing_env_vars)
            raise SupabaseNotInitializedError(f"Supabase settings are incomplete; set {missing}.")
        self._client = await acreate_client(self.settings.url, self.settings.anon_key)
        return self._client

    def client(self) -> AsyncClient:
        if self._client is None:
            raise SupabaseNotInitializedError("Supabase client has not been initialized. Call ensure_client() first.")
        return self._client

    def is_ready(self) -> bool:
        return self._client is not None

    async def table(self, name: str):
        client = await self.ensure_client()
        return client.table(name)
