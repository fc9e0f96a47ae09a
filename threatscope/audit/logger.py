"""
Audit Logger — Structured JSON-lines audit trail.

Records every verdict with: timestamp, subject, profile, score, level,
confidence, triggered rules and unavailable detectors. The timestamp lives
only in the audit record, never in the verdict itself.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path

from threatscope.config import settings
from threatscope.models.verdict_models import AuditEntry

logger = logging.getLogger("threatscope.audit")


class AuditLogger:
    """Writes structured audit entries to a JSON-lines file."""

    def __init__(self, log_path: str | None = None) -> None:
        self.log_path = Path(log_path or settings.audit_log_path)

    def log(self, entry: AuditEntry) -> None:
        """Append an audit entry to the log file."""
        record = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            **entry.model_dump(mode="json"),
        }

        try:
            with open(self.log_path, "a") as f:
                f.write(json.dumps(record) + "\n")
        except OSError as e:
            logger.error(f"Failed to write audit log: {e}")

