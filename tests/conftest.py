"""Shared fixtures for Civic Badges tests."""

from typing import Any

import pytest
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.civic_badges.const import (
    CONF_ACCESS_TOKEN,
    CONF_API_URL,
    CONF_PERSISTENT_NOTIFICATIONS,
    CONF_POLL_INTERVAL,
    CONF_RECIPIENT_NAME,
    CONF_USER_ID,
    DOMAIN,
)
from custom_components.civic_badges.engines.badge_engine import ThresholdTable
from custom_components.civic_badges.store import InMemoryBadgeStore
from tests.helpers import (
    TEST_ACCESS_TOKEN,
    TEST_API_URL,
    TEST_USER_ID,
    FakeClock,
)

# pylint: disable=invalid-name
pytest_plugins = "pytest_homeassistant_custom_component"
# pylint: enable=invalid-name


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: Any) -> Any:
    """Enable custom integrations in tests."""
    # pylint: disable=unused-argument
    yield


@pytest.fixture
def threshold_table() -> ThresholdTable:
    """Three-tier table used by most ledger tests."""
    return ThresholdTable.from_tuples(
        [(10, "Bronze", "🥉"), (20, "Silver", "🥈"), (50, "Diamond", "💎")]
    )


@pytest.fixture
def clock() -> FakeClock:
    """Controllable clock for earned_at timestamps."""
    return FakeClock()


@pytest.fixture
async def memory_store() -> InMemoryBadgeStore:
    """Initialized, empty in-memory badge store."""
    store = InMemoryBadgeStore()
    await store.async_initialize()
    return store


@pytest.fixture
def mock_config_entry() -> MockConfigEntry:
    """Config entry for one signed-in identity, polling hourly."""
    return MockConfigEntry(
        domain=DOMAIN,
        title="Asha Verma",
        data={
            CONF_RECIPIENT_NAME: "Asha Verma",
            CONF_API_URL: TEST_API_URL,
            CONF_ACCESS_TOKEN: TEST_ACCESS_TOKEN,
            CONF_USER_ID: TEST_USER_ID,
        },
        options={
            CONF_POLL_INTERVAL: 3600,
            CONF_PERSISTENT_NOTIFICATIONS: True,
        },
        unique_id=TEST_USER_ID,
    )
