"""Reconciliation engine: pattern expansion, availability ledger, status and conflicts."""

from .catalog import PatternCatalog
from .conflicts import ConflictDetector
from .ledger import AvailabilityLedger, PendingWrite, SyncGate, SyncScope, utc_now
from .resolver import DroppedInstance, ResolvedSchedule, resolve_instances
from .status import ANY_MEMBER, DateStatus, StatusEngine, StatusScope, compute_date_status

__all__ = [
    "ANY_MEMBER",
    "AvailabilityLedger",
    "ConflictDetector",
    "DateStatus",
    "DroppedInstance",
    "PatternCatalog",
    "PendingWrite",
    "ResolvedSchedule",
    "StatusEngine",
    "StatusScope",
    "SyncGate",
    "SyncScope",
    "compute_date_status",
    "resolve_instances",
    "utc_now",
]
