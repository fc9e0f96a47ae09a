"""
Error taxonomy for the assessment pipeline.

DetectorUnavailable is absorbed by the detector registry. InvalidInput is
surfaced to the caller of assess(). ConfigurationError stops startup.
"""

from __future__ import annotations


class ThreatScopeError(Exception):
    """Base class for all ThreatScope errors."""


class DetectorUnavailable(ThreatScopeError):
    """A detector could not produce a result (timeout, missing data, feed outage)."""

    def __init__(self, detector: str, reason: str) -> None:
        super().__init__(f"{detector}: {reason}")
        self.detector = detector
        self.reason = reason


class InvalidInput(ThreatScopeError):
    """The assessment subject is malformed. No verdict is produced."""

    def __init__(self, message: str, errors: list[dict] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class ConfigurationError(ThreatScopeError):
    """A scoring profile, filter or alert rule failed validation at load time."""
