from __future__ import annotations

from .instance_index import InstanceIndex

__all__ = ["InstanceIndex"]
