"""User-configurable preferences stored in data/settings.json."""

from __future__ import annotations

import contextlib
import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from quillstack.models import ClassificationSettings

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: dict[str, Any] = {
    "classification": {
        "remote_enabled": True,
        "always_ask": False,
        "confidence_threshold": 0.7,
    },
    "rate_limits": {
        "per_minute": 5,
        "per_hour": 50,
        "per_day": 200,
    },
    "budgets": {
        "daily_usd": 5.00,
        "monthly_usd": 150.00,
        "lifetime_usd": None,
        "alert_threshold": 0.80,
    },
}

_SETTINGS_FILE = "settings.json"


def _merge_defaults(stored: dict[str, Any]) -> dict[str, Any]:
    """Fill sections/keys missing from a stored document with defaults."""
    merged = copy.deepcopy(DEFAULT_SETTINGS)
    for section, values in stored.items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values
    return merged


def load_settings(data_path: Path) -> dict[str, Any]:
    """Read settings from data_path/settings.json.

    Returns DEFAULT_SETTINGS and writes the defaults file if missing or unparseable.
    """
    settings_file = data_path / _SETTINGS_FILE
    if settings_file.exists():
        try:
            with open(settings_file, encoding="utf-8") as f:
                stored = json.load(f)
            if isinstance(stored, dict):
                return _merge_defaults(stored)
            logger.warning("Settings file is not a JSON object, returning defaults")
        except (json.JSONDecodeError, OSError):
            logger.warning("Settings file corrupt or unreadable, returning defaults")
    # Write defaults so the file exists for next time
    save_settings(data_path, DEFAULT_SETTINGS)
    return copy.deepcopy(DEFAULT_SETTINGS)


def save_settings(data_path: Path, settings: dict[str, Any]) -> None:
    """Write settings to data_path/settings.json using atomic write."""
    data_path.mkdir(parents=True, exist_ok=True)
    settings_file = data_path / _SETTINGS_FILE
    fd, tmp_path = tempfile.mkstemp(dir=str(data_path), suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(settings, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, str(settings_file))
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise


def get_classification_settings(
    data_path: Path, credential_configured: bool
) -> ClassificationSettings:
    """Combine stored preferences with the credential flag from the environment."""
    prefs = load_settings(data_path)["classification"]
    return ClassificationSettings(
        remote_classification_enabled=bool(prefs.get("remote_enabled", True)),
        credential_configured=credential_configured,
        always_ask_for_classification=bool(prefs.get("always_ask", False)),
        confidence_threshold=float(prefs.get("confidence_threshold", 0.7)),
    )
