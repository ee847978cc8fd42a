"""Base manager class for Civic Badges managers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.dispatcher import (
    async_dispatcher_connect,
    async_dispatcher_send,
)

from .. import const
from ..helpers.entity_helpers import get_event_signal

if TYPE_CHECKING:
    from collections.abc import Callable

    from homeassistant.core import HomeAssistant


class BaseManager(ABC):
    """Base class for Civic Badges managers with scoped event support.

    Provides:
    - Instance-scoped event emitting (emit)
    - Instance-scoped event listening (listen)

    Events travel over the Home Assistant dispatcher. A failing receiver is
    logged by the dispatcher and never aborts the emitting manager.

    Subclasses must implement:
    - async_setup(): Load persisted state, initialize
    """

    def __init__(self, hass: HomeAssistant, entry_id: str) -> None:
        """Initialize manager.

        Args:
            hass: Home Assistant instance
            entry_id: Config entry the manager belongs to (signal scope)
        """
        self.hass = hass
        self.entry_id = entry_id

    def emit(self, suffix: str, **payload: Any) -> None:
        """Emit an instance-scoped event.

        Args:
            suffix: Signal suffix constant (e.g., const.SIGNAL_SUFFIX_SYNC_UPDATED)
            **payload: Event data passed to receivers as a single dict
        """
        signal = get_event_signal(self.entry_id, suffix)
        const.LOGGER.debug(
            "DEBUG: Emitting event '%s' for instance %s with payload keys: %s",
            suffix,
            self.entry_id,
            list(payload.keys()),
        )
        async_dispatcher_send(self.hass, signal, payload)

    def listen(self, suffix: str, callback: Callable[..., Any]) -> Callable[[], None]:
        """Subscribe to an instance-scoped event; returns the unsubscribe callable.

        Callers tie the unsubscribe to a lifetime, e.g. entry.async_on_unload().

        Args:
            suffix: Signal suffix constant to listen for
            callback: Function called with the payload dict; sync or async
        """
        signal = get_event_signal(self.entry_id, suffix)
        unsub = async_dispatcher_connect(self.hass, signal, callback)
        const.LOGGER.debug(
            "DEBUG: Listening to event '%s' of %s for instance %s",
            suffix,
            self.__class__.__name__,
            self.entry_id,
        )
        return unsub

    @abstractmethod
    async def async_setup(self) -> None:
        """Set up the manager (load persisted state).

        Called once before the manager is used.
        """
