"""Ambient runtime settings (logging, timezone, narrative scanning).

Composition options are always caller-supplied; only process-level
concerns are read from the environment. A `.env` file next to the package
or at the repo root seeds variables that are not already set.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import pytz
from dotenv import load_dotenv

MODULE_DIR = Path(__file__).resolve().parent
REPO_ROOT = MODULE_DIR.parent

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_TIMEZONE = "Asia/Kolkata"
LOG_FORMAT = "%(asctime)s %(levelname)s - %(message)s"

logger = logging.getLogger("prediction_settings")


def _is_truthy(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    log_level: str = DEFAULT_LOG_LEVEL
    timezone: str = DEFAULT_TIMEZONE
    scan_narratives: bool = True


def load_env_files() -> None:
    # Existing process env wins over both files.
    load_dotenv(dotenv_path=MODULE_DIR / ".env", override=False)
    load_dotenv(dotenv_path=REPO_ROOT / ".env", override=False)


def _resolve_timezone(name: str) -> str:
    try:
        pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning("Unknown PREDICTION_TIMEZONE %r; using %s", name, DEFAULT_TIMEZONE)
        return DEFAULT_TIMEZONE
    return name


def load_settings() -> Settings:
    load_env_files()
    log_level = os.getenv("PREDICTION_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL
    if not isinstance(logging.getLevelName(log_level), int):
        logger.warning("Unknown PREDICTION_LOG_LEVEL %r; using %s", log_level, DEFAULT_LOG_LEVEL)
        log_level = DEFAULT_LOG_LEVEL
    timezone_name = os.getenv("PREDICTION_TIMEZONE", DEFAULT_TIMEZONE).strip() or DEFAULT_TIMEZONE
    return Settings(
        log_level=log_level,
        timezone=_resolve_timezone(timezone_name),
        scan_narratives=_is_truthy(os.getenv("PREDICTION_SCAN_NARRATIVES", "1")),
    )


def configure_logging(settings: Settings | None = None) -> Settings:
    resolved = settings or load_settings()
    logging.basicConfig(level=getattr(logging, resolved.log_level, logging.INFO), format=LOG_FORMAT)
    return resolved
