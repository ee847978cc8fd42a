"""Manager modules for Civic Badges integration.

Managers own state and side effects; the engines they call stay pure.
"""

from .base_manager import BaseManager
from .ledger_manager import BadgeLedger
from .notification_manager import UnlockEvent, UnlockNotifier
from .sync_manager import SyncOutcome, SyncScheduler

__all__ = [
    "BadgeLedger",
    "BaseManager",
    "SyncOutcome",
    "SyncScheduler",
    "UnlockEvent",
    "UnlockNotifier",
]
