"""
Configuration loader
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from hunt.models import HuntSettings


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/hunt.yaml"


def resolve_config_path(config_path: Optional[str] = None) -> Path:
    """Explicit path wins, then HUNT_CONFIG, then the default"""
    return Path(config_path or os.environ.get("HUNT_CONFIG") or DEFAULT_CONFIG_PATH)


def load_config(config_path: Optional[str] = None) -> HuntSettings:
    """
    Load settings from YAML file

    A missing file is not an error: the defaults are used.

    Args:
        config_path: Path to config file

    Returns:
        HuntSettings object
    """
    path = resolve_config_path(config_path)

    if not path.exists():
        logger.warning(f"⚠️ Config file not found: {path}, using defaults")
        return HuntSettings()

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    return HuntSettings(**data)


def update_settings(changes: Dict[str, Any], config_path: Optional[str] = None) -> HuntSettings:
    """
    Write changed keys back to the config file

    Args:
        changes: Keys to overwrite
        config_path: Path to config file

    Returns:
        The validated settings after the update
    """
    path = resolve_config_path(config_path)

    data: Dict[str, Any] = {}
    if path.exists():
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

    data.update(changes)
    # Validate before touching the file
    settings = HuntSettings(**data)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True)

    logger.info(f"✅ Updated settings {sorted(changes)} in {path}")
    return settings
