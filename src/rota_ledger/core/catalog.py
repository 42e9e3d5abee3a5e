from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..domain import EventPattern, name_key

logger = logging.getLogger(__name__)


@dataclass
class PatternCatalog:
    """Recurring event definitions for one team, looked up by weekday."""

    patterns: List[EventPattern] = field(default_factory=list)
    version: int = 0

    def __post_init__(self) -> None:
        self.patterns = self._unique(self.patterns)

    @staticmethod
    def _unique(patterns: Iterable[EventPattern]) -> List[EventPattern]:
        seen: set[str] = set()
        unique: list[EventPattern] = []
        for pattern in patterns:
            if pattern.id in seen:
                continue
            seen.add(pattern.id)
            unique.append(pattern)
        return sorted(unique, key=lambda item: item.order)

    def replace(self, patterns: Iterable[EventPattern]) -> None:
        self.patterns = self._unique(patterns)
        self.version += 1
        logger.debug("Pattern catalog replaced with %d patterns (version %d)", len(self.patterns), self.version)

    def add(self, pattern: EventPattern) -> bool:
        if any(name_key(existing.name) == name_key(pattern.name) for existing in self.patterns):
            logger.warning("Pattern %r already exists; not adding a duplicate", pattern.name)
            return False
        self.replace([*self.patterns, pattern])
        return True

    def for_weekday(self, weekday: int) -> List[EventPattern]:
        return [pattern for pattern in self.patterns if pattern.weekday == weekday]

    def name_keys(self) -> set[str]:
        return {name_key(pattern.name) for pattern in self.patterns}

    def name_keys_for_weekday(self, weekday: int) -> set[str]:
        return {name_key(pattern.name) for pattern in self.for_weekday(weekday)}

    def by_id(self) -> Dict[str, EventPattern]:
        return {pattern.id: pattern for pattern in self.patterns}

    def find_by_name(self, name: str) -> Optional[EventPattern]:
        key = name_key(name)
        return next((pattern for pattern in self.patterns if name_key(pattern.name) == key), None)

    def __len__(self) -> int:
        return len(self.patterns)
