"""Entity and dispatcher helpers for Civic Badges integration."""

from __future__ import annotations

from .. import const


def get_event_signal(entry_id: str, suffix: str) -> str:
    """Build the instance-scoped dispatcher signal name.

    Each config entry gets its own signal namespace, so two identities never
    receive each other's events.

    Format: 'civic_badges_{entry_id}_{suffix}'

    Example:
        >>> get_event_signal("abc123", const.SIGNAL_SUFFIX_SYNC_UPDATED)
        'civic_badges_abc123_sync_updated'
    """
    return f"{const.DOMAIN}_{entry_id}_{suffix}"
