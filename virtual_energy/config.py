"""Runtime configuration for the virtual trading tools."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "trading_config.json"
API_KEY_ENV_VAR = "GRIDSTATUS_API_KEY"


@dataclass
class APISettings:
    """GridStatus connection settings."""

    base_url: str = "https://api.gridstatus.io/v1"
    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_base_seconds: float = 1.2  # ~1 request/second upstream limit


@dataclass
class TradingConfig:
    """Market rules and client settings, optionally loaded from JSON."""

    cutoff_hour: int = 11
    cutoff_minute: int = 0
    max_bids_per_hour: int = 10
    default_settlement_point: str = "HB_HOUSTON"
    da_limit: int = 100  # 24 hours + buffer
    rt_limit: int = 500  # 288 intervals + buffer
    api: APISettings = field(default_factory=APISettings)
    api_key: Optional[str] = None

    @property
    def resolved_api_key(self) -> Optional[str]:
        return os.environ.get(API_KEY_ENV_VAR) or self.api_key

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> TradingConfig:
        """Build a config from defaults overlaid with the JSON file, if present.

        Unknown keys are ignored. An unreadable file is logged and the
        defaults are kept.
        """
        config = cls()
        path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
        if not path.exists():
            return config

        try:
            with open(path, "r") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Could not load trading config from %s: %s", path, e)
            logger.warning("Using default configuration.")
            return config

        for key, value in raw.items():
            if key == "api_settings" and isinstance(value, dict):
                for api_key, api_value in value.items():
                    if hasattr(config.api, api_key):
                        setattr(config.api, api_key, api_value)
            elif key != "api" and hasattr(config, key):
                setattr(config, key, value)
        return config
