"""
Runtime configuration loaded from the environment.

Values come from ``os.environ`` after loading a ``.env`` file with
python-dotenv; variables already set in the environment take precedence.

Variables:
- MASTER_KEY: 64 hex characters (required)
- LOG_LEVEL: logging level name (default INFO)
- LOG_FORMAT: "text" or "json" (default text)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from .errors import ConfigError

LOG_FORMATS = ("text", "json")


@dataclass(frozen=True)
class Settings:
    """Process settings. The master key is kept out of repr."""

    master_key_hex: str = field(repr=False)
    log_level: str = "INFO"
    log_format: str = "text"


def load_settings(env_file: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load settings from the environment.

    Args:
        env_file: Optional path to a .env file (default: search from cwd)

    Returns:
        Settings instance

    Raises:
        ConfigError: If MASTER_KEY is missing or LOG_FORMAT is unknown
    """
    load_dotenv(env_file)

    master_key_hex = os.environ.get("MASTER_KEY", "").strip()
    if not master_key_hex:
        raise ConfigError("MASTER_KEY must be set in environment or .env file")

    log_format = os.environ.get("LOG_FORMAT", "text").strip().lower()
    if log_format not in LOG_FORMATS:
        raise ConfigError(f"LOG_FORMAT must be one of {', '.join(LOG_FORMATS)}, got {log_format!r}")

    return Settings(
        master_key_hex=master_key_hex,
        log_level=os.environ.get("LOG_LEVEL", "INFO").strip().upper(),
        log_format=log_format,
    )
