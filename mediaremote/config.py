# mediaremote/config.py

"""Runtime configuration, read from the environment (and a `.env` file, if present)."""

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

from mediaremote.errors import InvalidParameter

DEFAULT_TIMEOUT = 10.0  # seconds per remote call

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True, slots=True)
class Settings:
    timeout: float = DEFAULT_TIMEOUT
    preferred_target: str | None = None
    launch_if_needed: bool = False
    log_level: str = "info"


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidParameter(f"{name} must be a boolean, got '{raw}'")


def _parse_timeout(raw: str) -> float:
    try:
        timeout = float(raw)
    except ValueError:
        raise InvalidParameter(f"MEDIAREMOTE_TIMEOUT must be a number of seconds, got '{raw}'") from None
    if timeout <= 0:
        raise InvalidParameter(f"MEDIAREMOTE_TIMEOUT must be positive, got {timeout}")
    return timeout


def load_settings(env_file: str | None = None) -> Settings:
    """Loads settings from MEDIAREMOTE_* environment variables.

    Variables already set in the environment win over the `.env` file.
    """
    _ = load_dotenv(env_file)

    timeout = os.getenv("MEDIAREMOTE_TIMEOUT")
    preferred = os.getenv("MEDIAREMOTE_PREFERRED_TARGET", "").strip()
    settings = Settings(
        timeout=_parse_timeout(timeout) if timeout else DEFAULT_TIMEOUT,
        preferred_target=preferred or None,
        launch_if_needed=_parse_bool("MEDIAREMOTE_LAUNCH_IF_NEEDED", os.getenv("MEDIAREMOTE_LAUNCH_IF_NEEDED", "")),
        log_level=os.getenv("MEDIAREMOTE_LOG_LEVEL", "info").strip().lower() or "info",
    )
    logging.debug(f"Settings loaded: {settings}")
    return settings
