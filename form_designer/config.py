"""
Form Designer configuration — all environment variables in one place.

Read from environment at import time. Every setting has a default, so the
kernel works with an empty environment (tests, notebooks, the CLI).
"""

from __future__ import annotations

import os


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "")
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


class Settings:
    """Application settings from environment variables."""

    # History
    HISTORY_LIMIT: int = max(1, _int_env("FORM_DESIGNER_HISTORY_LIMIT", 200))

    # Rule engine: 1 = single declaration-order pass per value change
    RULE_MAX_PASSES: int = max(1, _int_env("FORM_DESIGNER_RULE_MAX_PASSES", 1))

    # Storage (JsonFileStorage default directory)
    STORAGE_DIR: str = os.environ.get("FORM_DESIGNER_STORAGE_DIR", ".forms")

    # Logging (CLI)
    LOG_LEVEL: str = os.environ.get("FORM_DESIGNER_LOG_LEVEL", "WARNING").upper()


# Singleton instance
settings = Settings()
