"""Environment-driven settings and logging setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

ENV_PREFIX = "EXPENSE_LEDGER_"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    environment: str = "prod"
    allowed_origins: Tuple[str, ...] = ()
    log_level: str = "WARNING"
    currency: str = "THB"

    @property
    def is_dev(self) -> bool:
        return self.environment in {"dev", "development"}

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv(f"{ENV_PREFIX}ALLOWED_ORIGINS", "")
        return cls(
            data_dir=Path(os.getenv(f"{ENV_PREFIX}DATA_DIR", "data")).expanduser(),
            environment=os.getenv(f"{ENV_PREFIX}ENV", "prod").strip().lower(),
            allowed_origins=tuple(origin.strip() for origin in origins.split(",") if origin.strip()),
            log_level=os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "WARNING").strip().upper(),
            currency=os.getenv(f"{ENV_PREFIX}CURRENCY", "THB").strip().upper(),
        )


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach one console handler to the ``ledger`` logger and return it."""
    root_logger = logging.getLogger("ledger")
    root_logger.setLevel(level or Settings.from_env().log_level)

    # Re-running setup must not stack duplicate handlers.
    root_logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)
    return root_logger
