"""
ThreatScope Configuration — pydantic-settings based.

All settings are read from environment variables or .env file.
Scoring profiles (multiplier tables, filters, alert rules) are built from
these values once at startup and treated as read-only afterwards.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application-wide settings sourced from environment variables."""

    # ── Detector execution ──
    detector_timeout_seconds: float = Field(
        default=3.0, description="Timeout for a single detector run"
    )
    assessment_deadline_seconds: float = Field(
        default=8.0,
        description="Overall deadline for one assessment. Pending detectors are abandoned.",
    )
    intel_feed_timeout_seconds: float = Field(
        default=2.0,
        description="Timeout per external threat-intel feed query. Must be below detector_timeout_seconds.",
    )

    # ── Scoring ──
    max_dampening_fraction: float = Field(
        default=0.5,
        description="Upper bound of false-positive dampening as a fraction of the raw score",
    )
    coverage_penalty: float = Field(
        default=0.5,
        description="Confidence lost when every detector is unavailable (scaled by the unavailable share)",
    )
    profile_config_path: str | None = Field(
        default=None,
        description="Optional JSON file replacing the built-in scoring profiles",
    )

    # ── Address lists ──
    known_good_addresses: list[str] = Field(
        default=["0xA0b86a33E6441A30B78Db73d04Bdf70a52CdEd22"],
        description="Recipients whose interactions are dampened as known-good",
    )
    suspicious_addresses: list[str] = Field(
        default=["0x0000000000000000000000000000000000000000"],
        description="Addresses with a known suspicious history",
    )
    scam_addresses: list[str] = Field(
        default=["0x0000000000000000000000000000000000000000"],
        description="Static scam blocklist consulted by the external-intel detector",
    )

    # ── Cache ──
    lookup_cache_capacity: int = Field(
        default=1024, description="Max entries held by the identity lookup cache"
    )
    lookup_cache_ttl_seconds: int = Field(
        default=300, description="Time-to-live for cached identity lookups"
    )

    # ── Server ──
    port: int = Field(default=5001, description="Server port")
    host: str = Field(default="0.0.0.0", description="Server bind host")
    cors_origins: list[str] = Field(
        default=["*"], description="Allowed CORS origins"
    )
    log_level: str = Field(default="INFO", description="Root log level")

    # ── Audit ──
    audit_enabled: bool = Field(
        default=False, description="Write one JSON-lines record per verdict"
    )
    audit_log_path: str = Field(
        default="audit.jsonl", description="Path to JSON-lines audit log file"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton instance, imported by other modules
settings = Settings()
