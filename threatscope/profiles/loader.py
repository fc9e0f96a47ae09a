"""
Profile Loader — Builds validated ScoringProfiles from config dicts.

Built-in defaults live beside each engine. An optional JSON file
(``profile_config_path``) keyed by profile name replaces a default wholesale.
Any validation failure is a ConfigurationError and stops startup.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from threatscope.core.errors import ConfigurationError
from threatscope.models.profile_models import ScoringProfile

logger = logging.getLogger("threatscope.profiles")


def load_profile(data: dict[str, Any]) -> ScoringProfile:
    """Validate one profile config, raising ConfigurationError on any problem."""
    name = data.get("name", "<unnamed>") if isinstance(data, dict) else "<invalid>"
    try:
        return ScoringProfile.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'profile'}: {err['msg']}"
            for err in e.errors(include_url=False)
        )
        raise ConfigurationError(f"Invalid scoring profile '{name}': {problems}") from e


def read_overrides(path: str | None) -> dict[str, dict[str, Any]]:
    """Read the profile override file. Missing path means no overrides."""
    if not path:
        return {}
    file = Path(path)
    try:
        raw = json.loads(file.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(f"Profile config file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read profile config {path}: {e}") from e

    if not isinstance(raw, dict) or not all(isinstance(v, dict) for v in raw.values()):
        raise ConfigurationError(f"Profile config {path} must map profile names to objects")
    return raw


def resolve_profile(
    name: str,
    default: dict[str, Any],
    config_path: str | None = None,
) -> ScoringProfile:
    """The override for ``name`` when one exists, otherwise the built-in default."""
    overrides = read_overrides(config_path)
    if name in overrides:
        logger.info(f"Profile '{name}' loaded from {config_path}")
        data = {**overrides[name], "name": name}
    else:
        data = default
    return load_profile(data)
