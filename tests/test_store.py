"""Tests for the badge store (persistence port).

BadgeStore runs against Home Assistant's Store API through the hass_storage
fixture; InMemoryBadgeStore is tested for the same contract without I/O.
"""

from __future__ import annotations

from typing import Any

import pytest

from homeassistant.core import HomeAssistant

from custom_components.civic_badges import const
from custom_components.civic_badges.store import BadgeStore, InMemoryBadgeStore

ENTRY_ID = "entry-1"
STORAGE_KEY = f"civic_badges.{ENTRY_ID}"

STORED = {
    const.DATA_EARNED_BADGES: [
        {"tier_name": "Bronze", "earned_at": "2025-04-07T12:00:00+00:00"}
    ],
    const.DATA_LAST_UNLOCKED_TIER: "Bronze",
    const.DATA_DISPLAY_COUNT: 12,
}


def _seed(hass_storage: dict[str, Any], data: Any) -> None:
    hass_storage[STORAGE_KEY] = {
        "version": const.STORAGE_VERSION,
        "minor_version": 1,
        "key": STORAGE_KEY,
        "data": data,
    }


class TestBadgeStore:
    """BadgeStore backed by .storage/civic_badges.<entry_id>."""

    async def test_new_store_starts_empty(self, hass: HomeAssistant) -> None:
        store = BadgeStore(hass, ENTRY_ID)
        await store.async_initialize()

        assert store.storage_key == STORAGE_KEY
        assert store.data == BadgeStore.get_default_structure()

    async def test_loads_existing_values(
        self, hass: HomeAssistant, hass_storage: dict[str, Any]
    ) -> None:
        _seed(hass_storage, {**STORED, "unrelated": True})
        store = BadgeStore(hass, ENTRY_ID)
        await store.async_initialize()

        assert store.data == STORED

    async def test_non_mapping_storage_starts_empty(
        self, hass: HomeAssistant, hass_storage: dict[str, Any]
    ) -> None:
        _seed(hass_storage, ["not", "a", "mapping"])
        store = BadgeStore(hass, ENTRY_ID)
        await store.async_initialize()

        assert store.data == BadgeStore.get_default_structure()

    async def test_set_persists_value(
        self, hass: HomeAssistant, hass_storage: dict[str, Any]
    ) -> None:
        store = BadgeStore(hass, ENTRY_ID)
        await store.async_initialize()

        await store.async_set(const.DATA_DISPLAY_COUNT, 7)

        assert store.get(const.DATA_DISPLAY_COUNT) == 7
        assert hass_storage[STORAGE_KEY]["data"][const.DATA_DISPLAY_COUNT] == 7

    async def test_reset_all_clears_three_values(
        self, hass: HomeAssistant, hass_storage: dict[str, Any]
    ) -> None:
        _seed(hass_storage, STORED)
        store = BadgeStore(hass, ENTRY_ID)
        await store.async_initialize()

        await store.async_reset_all()

        assert hass_storage[STORAGE_KEY]["data"] == {
            const.DATA_EARNED_BADGES: [],
            const.DATA_LAST_UNLOCKED_TIER: None,
            const.DATA_DISPLAY_COUNT: None,
        }

    async def test_delete_storage(
        self, hass: HomeAssistant, hass_storage: dict[str, Any]
    ) -> None:
        _seed(hass_storage, STORED)
        store = BadgeStore(hass, ENTRY_ID)
        await store.async_initialize()

        await store.async_delete_storage()

        assert STORAGE_KEY not in hass_storage
        assert store.get(const.DATA_EARNED_BADGES) == []


class TestInMemoryBadgeStore:
    """Same contract without a backing file."""

    async def test_seeded_values(self) -> None:
        store = InMemoryBadgeStore(STORED)
        await store.async_initialize()
        assert store.data == STORED

    async def test_unknown_key_rejected(self, memory_store: InMemoryBadgeStore) -> None:
        with pytest.raises(KeyError):
            memory_store.get("points")
        with pytest.raises(KeyError):
            await memory_store.async_set("points", 1)

    async def test_get_returns_copy(self) -> None:
        store = InMemoryBadgeStore(STORED)
        await store.async_initialize()

        store.get(const.DATA_EARNED_BADGES).clear()

        assert len(store.get(const.DATA_EARNED_BADGES)) == 1

    async def test_writes_are_counted(self, memory_store: InMemoryBadgeStore) -> None:
        await memory_store.async_set(const.DATA_LAST_UNLOCKED_TIER, "Silver")
        await memory_store.async_reset_all()

        assert memory_store.flush_count == 2
        assert memory_store.get(const.DATA_LAST_UNLOCKED_TIER) is None
