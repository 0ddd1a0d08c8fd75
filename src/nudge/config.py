"""Configuration management for nudge."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

NUDGE_HOME = Path(os.environ.get("NUDGE_HOME", Path.home() / ".nudge"))
CONFIG_FILE = NUDGE_HOME / "config" / "nudge.conf"
CALENDAR_URL_FILE = NUDGE_HOME / "config" / ".calendar-url"
DATA_FILE = NUDGE_HOME / "data" / "tasks.json"
LOG_FILE = NUDGE_HOME / "logs" / "nudge.log"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass
class Config:
    """nudge configuration."""

    data_file: str = ""
    chime: bool = True
    chime_player: str = ""
    refresh_interval: float = 0.1  # seconds between idle redraws of the board
    calendar_timeout: int = 10
    log_file: str = ""

    @property
    def data_path(self) -> Path:
        return Path(self.data_file).expanduser() if self.data_file else DATA_FILE

    @property
    def log_path(self) -> Path:
        return Path(self.log_file).expanduser() if self.log_file else LOG_FILE


def save_calendar_url(url: str) -> None:
    """Save the secret iCal address (readable by the owner only)."""
    url = url.strip()
    if not url:
        raise ValueError("Calendar URL cannot be empty")
    CALENDAR_URL_FILE.parent.mkdir(parents=True, exist_ok=True)
    CALENDAR_URL_FILE.write_text(url)
    CALENDAR_URL_FILE.chmod(0o600)


def load_calendar_url() -> str | None:
    """Return the saved iCal address, or None if calendar isn't set up."""
    if not CALENDAR_URL_FILE.exists():
        return None
    try:
        url = CALENDAR_URL_FILE.read_text().strip()
    except OSError as e:
        logger.warning(f"Failed to read calendar URL: {e}")
        return None
    return url or None


def _parse_bool(key: str, value: str, default: bool) -> bool:
    lowered = value.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    logger.warning(f"Ignoring {key.upper()}={value!r}: expected on/off")
    return default


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config() -> Config:
    """Load configuration from nudge.conf file."""
    config = Config()

    if not CONFIG_FILE.exists():
        return config

    for line in CONFIG_FILE.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        try:
            match key:
                case "data_file":
                    config.data_file = value
                case "chime":
                    config.chime = _parse_bool(key, value, config.chime)
                case "chime_player":
                    config.chime_player = value
                case "refresh_interval":
                    config.refresh_interval = max(float(value), 0.01)
                case "calendar_timeout":
                    config.calendar_timeout = int(value)
                case "log_file":
                    config.log_file = value
                case _:
                    logger.debug(f"Unknown config key: {key}")
        except ValueError as e:
            logger.warning(f"Ignoring {key.upper()}={value!r}: {e}")

    return config
