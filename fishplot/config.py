import json
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

# User config: loaded from ~/.fishplot/config.json (primary, or the path in
# FISHPLOT_CONFIG) with ./config.json in the working directory as fallback.
CONFIG_PATH = Path(os.getenv("FISHPLOT_CONFIG", Path.home() / ".fishplot" / "config.json"))
# Relative, so it is looked up in the current working directory at load time
_LOCAL_CONFIG_PATH = Path("config.json")
_user_config: dict = {}


def _load_config() -> dict:
    # Project-local config.json as base, user home config overlaid on top
    merged: dict = {}
    for path in (_LOCAL_CONFIG_PATH, CONFIG_PATH):
        if path is not None and path.exists():
            try:
                with open(path, "r", encoding="utf-8") as f:
                    merged.update(json.load(f))
            except (json.JSONDecodeError, OSError):
                pass
    return merged


def get(key: str, default=None):
    """Get a config value by dot-separated key. E.g. get('plot.shape', 'polygon')"""
    keys = key.split(".")
    val = _user_config
    for k in keys:
        if isinstance(val, dict):
            val = val.get(k)
        else:
            return default
    return val if val is not None else default


def reload() -> dict:
    """Re-read the config files (picks up edits made after import)."""
    global _user_config
    _user_config = _load_config()
    return _user_config


_user_config = _load_config()


# ---- Data directory -----------------------------------------------------------
# Base directory for log files.
# Priority: FISHPLOT_DIR env var > "data_dir" config key > ~/.fishplot

_data_dir: Optional[Path] = None


def get_data_dir() -> Path:
    """Return the resolved base data directory.

    Resolution order:
    1. ``FISHPLOT_DIR`` environment variable (highest — useful for CI/Docker)
    2. ``"data_dir"`` key in config.json
    3. ``~/.fishplot`` (default)
    """
    global _data_dir
    if _data_dir is not None:
        return _data_dir
    env_val = os.environ.get("FISHPLOT_DIR")
    if env_val:
        _data_dir = Path(env_val).expanduser().resolve()
    else:
        configured = get("data_dir")
        if configured:
            _data_dir = Path(configured).expanduser().resolve()
        else:
            _data_dir = Path.home() / ".fishplot"
    return _data_dir


def _reset_data_dir() -> None:
    """Reset the cached data directory (for testing only)."""
    global _data_dir
    _data_dir = None
