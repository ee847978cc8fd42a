"""Test helpers for Civic Badges integration tests.

    from tests.helpers import FakeClock, FakeOracle, capture_signal

See fakes.py for details.
"""

from tests.helpers.fakes import (
    TEST_ACCESS_TOKEN,
    TEST_API_URL,
    TEST_ENTRY_ID,
    TEST_REPORTS_URL,
    TEST_USER_ID,
    FakeClock,
    FakeOracle,
    SlowBadgeStore,
    capture_signal,
    reports_payload,
)

__all__ = [
    "TEST_ACCESS_TOKEN",
    "TEST_API_URL",
    "TEST_ENTRY_ID",
    "TEST_REPORTS_URL",
    "TEST_USER_ID",
    "FakeClock",
    "FakeOracle",
    "SlowBadgeStore",
    "capture_signal",
    "reports_payload",
]
