"""Error taxonomy for the Civic Badges integration.

Pure Python - no Home Assistant imports, so engines can raise or return these.

Only InvalidThresholdConfig escapes to callers (tier table construction is
fatal). OracleUnavailable is carried inside OracleResult, and
RenderTargetUnavailable is caught by the renderer, which then returns None.
"""

from __future__ import annotations


class CivicBadgesError(Exception):
    """Base class for all Civic Badges errors."""


class InvalidThresholdConfig(CivicBadgesError):
    """Raised when a tier table is not strictly ascending or has duplicates.

    Attributes:
        reason: Short human-readable description of the violation
        line: 1-based line number in the text form, when parsed from options
    """

    def __init__(self, reason: str, line: int | None = None) -> None:
        """Initialize InvalidThresholdConfig.

        Args:
            reason: Description of the violation
            line: Optional 1-based line number of the offending definition
        """
        self.reason = reason
        self.line = line
        if line is None:
            super().__init__(f"Invalid threshold table: {reason}")
        else:
            super().__init__(f"Invalid threshold table (line {line}): {reason}")


class OracleUnavailable(CivicBadgesError):
    """The report count oracle failed, timed out or answered garbage.

    Attributes:
        cause: The underlying exception, if any
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        """Initialize OracleUnavailable."""
        self.cause = cause
        super().__init__(message)


class RenderTargetUnavailable(CivicBadgesError):
    """A certificate was requested before its render target exists.

    Attributes:
        target: Description of the missing target (e.g. the export directory)
    """

    def __init__(self, target: str) -> None:
        """Initialize RenderTargetUnavailable."""
        self.target = target
        super().__init__(f"Render target unavailable: {target}")
