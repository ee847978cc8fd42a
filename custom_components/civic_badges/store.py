# File: store.py
"""Handles persistent data storage for the Civic Badges integration.

The badge store is the persistence port of the achievement engine. It holds
exactly three independently addressable values per identity:

- earned_badges: list of EarnedBadgeRecord (owned by BadgeLedger)
- last_unlocked_tier: tier name of the last unlock notification (UnlockNotifier)
- display_count: optional cached report count for display (SyncScheduler)

Values are read with get() and written with async_set(). The only way to
clear them is async_reset_all(), which clears all three together.

BadgeStore persists through Home Assistant's Storage helper, one file per
config entry. InMemoryBadgeStore implements the same port without I/O.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import copy
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.storage import Store

from . import const

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .type_defs import StoredBadgeData

STORE_KEYS = (
    const.DATA_EARNED_BADGES,
    const.DATA_LAST_UNLOCKED_TIER,
    const.DATA_DISPLAY_COUNT,
)


class BaseBadgeStore(ABC):
    """Shared in-memory cache and key handling for badge stores."""

    def __init__(self) -> None:
        """Initialize with the default (empty) structure."""
        self._data: dict[str, Any] = dict(self.get_default_structure())

    @staticmethod
    def get_default_structure() -> StoredBadgeData:
        """Return canonical empty data structure.

        This is the SINGLE SOURCE OF TRUTH for the badge storage schema.
        """
        return {
            const.DATA_EARNED_BADGES: [],
            const.DATA_LAST_UNLOCKED_TIER: None,
            const.DATA_DISPLAY_COUNT: None,
        }  # type: ignore[return-value]

    @staticmethod
    def _check_key(key: str) -> None:
        if key not in STORE_KEYS:
            raise KeyError(f"Unknown badge store value '{key}'")

    @property
    def data(self) -> dict[str, Any]:
        """Return a deep copy of all three values."""
        return copy.deepcopy(self._data)

    def get(self, key: str) -> Any:
        """Return a copy of one stored value."""
        self._check_key(key)
        return copy.deepcopy(self._data.get(key))

    async def async_set(self, key: str, value: Any) -> None:
        """Replace one stored value and flush to the backing medium."""
        self._check_key(key)
        self._data[key] = copy.deepcopy(value)
        await self._async_flush()

    async def async_reset_all(self) -> None:
        """Clear earned badges, last-unlocked pointer and display count together."""
        const.LOGGER.warning("WARNING: Clearing all Civic Badges data for this identity")
        self._data = dict(self.get_default_structure())
        await self._async_flush()

    @abstractmethod
    async def async_initialize(self) -> None:
        """Load data from the backing medium."""

    @abstractmethod
    async def _async_flush(self) -> None:
        """Write the in-memory data to the backing medium."""


class BadgeStore(BaseBadgeStore):
    """Badge store backed by Home Assistant's Store API.

    Thin wrapper around Store for loading, saving and removing the per-entry
    storage file.
    """

    def __init__(self, hass: HomeAssistant, entry_id: str) -> None:
        """Initialize the store.

        Args:
            hass: Home Assistant core object.
            entry_id: Config entry id; each entry (identity) gets its own file.
        """
        super().__init__()
        self.hass = hass
        self._storage_key = f"{const.STORAGE_KEY_PREFIX}.{entry_id}"
        self._store: Store[dict[str, Any]] = Store(
            hass, const.STORAGE_VERSION, self._storage_key
        )

    @property
    def storage_key(self) -> str:
        """Return the storage key (file name under .storage)."""
        return self._storage_key

    async def async_initialize(self) -> None:
        """Load data from storage during startup.

        If no data exists, or the file holds something other than a mapping,
        initializes with an empty structure. Unknown keys are ignored.
        """
        const.LOGGER.debug("DEBUG: BadgeStore: Loading data from %s", self._storage_key)
        existing_data = await self._store.async_load()

        if existing_data is None:
            const.LOGGER.info("INFO: No existing badge storage found. Initializing new data")
            self._data = dict(self.get_default_structure())
            return

        if not isinstance(existing_data, dict):
            const.LOGGER.warning(
                "WARNING: Badge storage %s is not a mapping (%s). Starting empty",
                self._storage_key,
                type(existing_data).__name__,
            )
            self._data = dict(self.get_default_structure())
            return

        self._data = dict(self.get_default_structure())
        for key in STORE_KEYS:
            if key in existing_data:
                self._data[key] = existing_data[key]
        const.LOGGER.debug(
            "DEBUG: Loaded badge storage: %s earned badge records",
            len(self._data[const.DATA_EARNED_BADGES])
            if isinstance(self._data[const.DATA_EARNED_BADGES], list)
            else "invalid",
        )

    async def _async_flush(self) -> None:
        """Save the current data structure to storage.

        Errors are logged but do not stop execution.
        """
        try:
            await self._store.async_save(dict(self._data))
            const.LOGGER.debug("DEBUG: Badge data saved successfully to storage")
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to save badge storage due to file system error: %s. "
                "Check disk space and file permissions for %s",
                err,
                self._store.path,
            )
        except (TypeError, ValueError) as err:
            const.LOGGER.error(
                "ERROR: Failed to save badge storage due to non-serializable data: %s",
                err,
            )

    async def async_delete_storage(self) -> None:
        """Delete the storage file completely from disk."""
        self._data = dict(self.get_default_structure())
        try:
            await self._store.async_remove()
            const.LOGGER.info(
                "INFO: Badge storage file removed successfully: %s",
                self._store.path,
            )
        except OSError as err:
            const.LOGGER.error(
                "ERROR: Failed to remove badge storage file %s: %s. Check file permissions",
                self._store.path,
                err,
            )


class InMemoryBadgeStore(BaseBadgeStore):
    """Badge store kept entirely in memory (tests and embedders).

    Attributes:
        flush_count: Number of writes performed, for asserting write behaviour
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        """Initialize, optionally seeded with raw stored values."""
        super().__init__()
        self._initial = copy.deepcopy(initial) if initial else {}
        self.flush_count = 0

    async def async_initialize(self) -> None:
        """Seed the cache from the initial values."""
        self._data = dict(self.get_default_structure())
        for key in STORE_KEYS:
            if key in self._initial:
                self._data[key] = copy.deepcopy(self._initial[key])

    async def _async_flush(self) -> None:
        self.flush_count += 1
