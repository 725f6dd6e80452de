"""
Configuration management for stagemap.

Settings come from config.json in the application directory, with
environment variables taking priority:

- STAGEMAP_DEFAULT_STAGE_WIDTH / STAGEMAP_DEFAULT_STAGE_HEIGHT
- STAGEMAP_MAP_WIDTH / STAGEMAP_MAP_HEIGHT
- STAGEMAP_DICTIONARY (path to a YAML text file)
- STAGEMAP_LOG_LEVEL (applied to the stagemap loggers by MapEditor)
"""

import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

ENV_PREFIX = "STAGEMAP_"


@dataclass
class EditorConfig:
    """Editor settings. Stage sizes are in map percent."""
    default_stage_width: float = 5.0
    default_stage_height: float = 5.0
    map_width: float = 1600.0
    map_height: float = 900.0
    dictionary_path: Optional[str] = None
    log_level: Optional[str] = None

    @property
    def aspect_ratio(self) -> float:
        return self.map_width / self.map_height


def get_app_dir() -> Path:
    """
    Get the application directory.

    - In development: the project root (parent of stagemap/)
    - When frozen: the directory containing the executable
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    return Path(__file__).parent.parent


def get_config_path() -> Path:
    return get_app_dir() / "config.json"


def load_config(config_path: Optional[Union[str, Path]] = None) -> dict:
    """Load configuration from config.json; missing or broken files give {}."""
    config_path = Path(config_path) if config_path else get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to load config from {config_path}: {e}")
            return {}
        if isinstance(data, dict):
            return data
        logger.warning(f"Config file {config_path} must contain a JSON object")
    return {}


def _get_float(config: dict, key: str, default: float) -> float:
    raw = os.environ.get(ENV_PREFIX + key.upper(), config.get(key))
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric setting {key}={raw!r}")
        return default
    if value <= 0:
        logger.warning(f"Ignoring non-positive setting {key}={raw!r}")
        return default
    return value


def get_editor_config(config_path: Optional[Union[str, Path]] = None) -> EditorConfig:
    """
    Build the editor configuration.

    Priority:
    1. Environment variables (STAGEMAP_*)
    2. Values stored in config.json
    3. EditorConfig defaults
    """
    config = load_config(config_path)
    defaults = EditorConfig()
    return EditorConfig(
        default_stage_width=_get_float(config, "default_stage_width", defaults.default_stage_width),
        default_stage_height=_get_float(config, "default_stage_height", defaults.default_stage_height),
        map_width=_get_float(config, "map_width", defaults.map_width),
        map_height=_get_float(config, "map_height", defaults.map_height),
        dictionary_path=os.environ.get(ENV_PREFIX + "DICTIONARY", config.get("dictionary_path")),
        log_level=os.environ.get(ENV_PREFIX + "LOG_LEVEL", config.get("log_level")),
    )


def configure_logging(level: Union[str, int] = "WARNING") -> None:
    """Set the level of the stagemap loggers. Handlers are left to the host."""
    if isinstance(level, str):
        level = level.upper()
    logging.getLogger("stagemap").setLevel(level)
