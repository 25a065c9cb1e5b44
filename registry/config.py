"""Settings from environment variables, and logging setup."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import coloredlogs

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(name)s[%(process)d] %(levelname)s %(message)s"

DEFAULT_REFRESH_SECONDS = 5 * 60


@dataclass
class Settings:
    data_dir: Path
    collection: str = "vehicleRegistrations"
    refresh_seconds: float = DEFAULT_REFRESH_SECONDS
    secret_key: str = "dev-secret-key-change-in-prod"
    log_level: str = "INFO"


def load_settings() -> Settings:
    """Read settings from REGISTRY_* environment variables."""
    refresh = os.environ.get("REGISTRY_REFRESH_SECONDS")
    try:
        refresh_seconds = float(refresh) if refresh else DEFAULT_REFRESH_SECONDS
    except ValueError:
        logger.warning("Invalid REGISTRY_REFRESH_SECONDS '%s', using default", refresh)
        refresh_seconds = DEFAULT_REFRESH_SECONDS

    return Settings(
        data_dir=Path(os.environ.get("REGISTRY_DATA_DIR", "data")),
        collection=os.environ.get("REGISTRY_COLLECTION", "vehicleRegistrations"),
        refresh_seconds=refresh_seconds,
        secret_key=os.environ.get("SECRET_KEY", "dev-secret-key-change-in-prod"),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Install coloredlogs on the root logger."""
    level_int = getattr(logging, level.upper(), None)
    if not isinstance(level_int, int):
        logger.warning("Invalid LOG_LEVEL '%s'. Defaulting to INFO.", level)
        level_int = logging.INFO
    coloredlogs.install(level=level_int, fmt=LOG_FORMAT, logger=logging.getLogger())
