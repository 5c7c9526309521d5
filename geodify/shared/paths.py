"""
Filesystem locations used by Geodify itself.
"""

import os
from pathlib import Path


def get_xdg_data_home() -> Path:
    return Path(os.environ.get("XDG_DATA_HOME") or Path.home() / ".local" / "share")


def get_geodify_data_dir() -> Path:
    """Data directory (~/.local/share/geodify by default)."""
    return get_xdg_data_home() / "geodify"


def get_geodify_logs_dir() -> Path:
    return get_geodify_data_dir() / "logs"


def get_geodify_config_dir() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config") / "geodify"
