"""Tests for flow_helpers - validation and normalization without a running flow."""

import pytest
import voluptuous as vol

from custom_components.civic_badges import const
from custom_components.civic_badges.engines.badge_engine import ThresholdTable
from custom_components.civic_badges.exceptions import InvalidThresholdConfig
from custom_components.civic_badges.helpers import flow_helpers as fh


@pytest.mark.parametrize(
    "url",
    ["https://reports.example.test", "http://192.168.1.20:5000", " https://x.test/ "],
)
def test_valid_urls(url: str) -> None:
    assert fh.validate_user_inputs({const.CONF_API_URL: url}) == {}


@pytest.mark.parametrize("url", ["", "reports.example.test", "ftp://x.test", "https://"])
def test_invalid_urls(url: str) -> None:
    assert fh.validate_user_inputs({const.CONF_API_URL: url}) == {
        const.CONF_API_URL: "invalid_url"
    }


def test_build_user_data_omits_blank_identity() -> None:
    data = fh.build_user_data(
        {
            const.CONF_RECIPIENT_NAME: "Asha",
            const.CONF_API_URL: "https://x.test/",
            const.CONF_ACCESS_TOKEN: "  ",
            const.CONF_USER_ID: None,
        }
    )
    assert data == {
        const.CONF_RECIPIENT_NAME: "Asha",
        const.CONF_API_URL: "https://x.test",
    }


def test_table_from_options_blank_is_default() -> None:
    assert fh.table_from_options({}) == ThresholdTable.default()
    assert fh.table_from_options({const.CONF_THRESHOLDS: "  \n"}) == (
        ThresholdTable.default()
    )


def test_table_from_options_invalid_raises() -> None:
    with pytest.raises(InvalidThresholdConfig):
        fh.table_from_options({const.CONF_THRESHOLDS: "10|Bronze\n10|Copper"})


def test_options_schema_bounds_poll_interval() -> None:
    schema = fh.build_options_schema({})
    validated = schema({const.CONF_POLL_INTERVAL: "30"})

    assert validated[const.CONF_POLL_INTERVAL] == 30
    assert validated[const.CONF_THRESHOLDS] == ThresholdTable.default().to_config()
    assert validated[const.CONF_PERSISTENT_NOTIFICATIONS] is True

    with pytest.raises(vol.Invalid):
        schema({const.CONF_POLL_INTERVAL: 1})
