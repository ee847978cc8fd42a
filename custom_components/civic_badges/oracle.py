# File: oracle.py
"""Report count oracle for the Civic Badges integration.

Fetches the authoritative cumulative report count for the configured identity
from the civic reporting API. The count may go up (new submissions) or down
(reports rejected or removed); it is never assumed monotonic.

Outcomes are explicit: async_fetch_count() never raises for transport or
payload problems, it returns an OracleResult carrying either a count or an
OracleUnavailable error. Callers must skip reconciliation on failure.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import aiohttp

from . import const
from .exceptions import OracleUnavailable


@dataclass(frozen=True, slots=True)
class OracleResult:
    """Outcome of one oracle fetch: a count or an error, never both."""

    count: int | None = None
    error: OracleUnavailable | None = None

    @property
    def ok(self) -> bool:
        """Return True when a count was obtained."""
        return self.error is None and self.count is not None

    @classmethod
    def success(cls, count: int) -> OracleResult:
        """Build a successful result."""
        return cls(count=count)

    @classmethod
    def failure(cls, error: OracleUnavailable) -> OracleResult:
        """Build a failed result."""
        return cls(error=error)


def _submitter_id(value: Any) -> str | None:
    """Return the submitter id of a report (plain id or populated object)."""
    if isinstance(value, dict):
        value = value.get("_id", value.get("id"))
    if value is None:
        return None
    return str(value)


class ReportCountOracle:
    """Client for the report listing endpoint, keyed by the active identity."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        api_url: str,
        access_token: str | None,
        user_id: str | None,
        timeout: float = const.DEFAULT_ORACLE_TIMEOUT,
    ) -> None:
        """Initialize the oracle.

        Args:
            session: Shared aiohttp client session
            api_url: Base URL of the reporting API
            access_token: Bearer token of the identity, if signed in
            user_id: Identity whose reports are counted (submittedBy)
            timeout: Seconds before a fetch counts as failed
        """
        self._session = session
        self._url = f"{api_url.rstrip('/')}{const.ORACLE_REPORTS_PATH}"
        self._access_token = access_token or None
        self._user_id = str(user_id) if user_id else None
        self._timeout = timeout
        self._failing = False

    @property
    def has_identity(self) -> bool:
        """Return True when an identity is configured (token and user id)."""
        return bool(self._access_token and self._user_id)

    async def async_fetch_count(self) -> OracleResult:
        """Fetch the current authoritative report count.

        Unknown identity (no token or no user id) yields a count of 0 without
        a request. Timeouts, client errors, error statuses and non-list
        payloads yield OracleUnavailable.
        """
        if not self.has_identity:
            const.LOGGER.debug("DEBUG: No identity configured; report count is 0")
            return OracleResult.success(0)

        headers = {
            const.ORACLE_AUTH_HEADER: f"{const.ORACLE_AUTH_SCHEME} {self._access_token}"
        }
        try:
            async with asyncio.timeout(self._timeout):
                async with self._session.get(self._url, headers=headers) as response:
                    if response.status >= 400:
                        return self._failed(
                            OracleUnavailable(
                                f"Report API answered HTTP {response.status}"
                            )
                        )
                    payload = await response.json(content_type=None)
        except TimeoutError as err:
            return self._failed(
                OracleUnavailable(f"Report API timed out after {self._timeout}s", err)
            )
        except aiohttp.ClientError as err:
            return self._failed(OracleUnavailable(f"Report API error: {err}", err))
        except ValueError as err:
            return self._failed(
                OracleUnavailable(f"Report API returned invalid JSON: {err}", err)
            )

        if not isinstance(payload, list):
            return self._failed(
                OracleUnavailable(
                    f"Report API returned {type(payload).__name__}, expected a list"
                )
            )

        count = sum(
            1
            for report in payload
            if isinstance(report, dict)
            and _submitter_id(report.get(const.ORACLE_FIELD_SUBMITTED_BY))
            == self._user_id
        )
        if self._failing:
            const.LOGGER.info("INFO: Report API reachable again")
        self._failing = False
        const.LOGGER.debug("DEBUG: User report count from API: %s", count)
        return OracleResult.success(count)

    def _failed(self, error: OracleUnavailable) -> OracleResult:
        """Log a failure (WARNING once per failure streak) and wrap it."""
        if self._failing:
            const.LOGGER.debug("DEBUG: Report API still unavailable: %s", error)
        else:
            const.LOGGER.warning("WARNING: Failed to fetch report count: %s", error)
        self._failing = True
        return OracleResult.failure(error)
