"""Where BufferSwarm finds its bundled files and keeps the user's settings."""
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

APP_NAME = "BufferSwarm"
CONFIG_NAME = "config.json"
# Points the app at another config file.
CONFIG_ENV_VAR = "BUFFERSWARM_CONFIG"


def bundle_dir() -> Optional[Path]:
    """Unpack directory of a PyInstaller build; ``None`` when run from source."""
    if not getattr(sys, "frozen", False):
        return None
    meipass = getattr(sys, "_MEIPASS", None)
    return Path(meipass) if meipass else Path(sys.executable).resolve().parent


def resource_file(relative: str | Path) -> Path:
    base = bundle_dir() or Path(__file__).resolve().parent
    path = base / relative
    # --add-data may nest a file inside a folder of the same name.
    nested = path / path.name
    return nested if path.is_dir() and nested.exists() else path


def _settings_dir() -> Path:
    home = Path.home()
    if sys.platform == "win32":
        return Path(os.environ.get("APPDATA") or home / "AppData" / "Roaming")
    if sys.platform == "darwin":
        return home / "Library" / "Application Support"
    return Path(os.environ.get("XDG_CONFIG_HOME") or home / ".config")


def user_config_path() -> Path:
    return _settings_dir() / APP_NAME / CONFIG_NAME


def config_path() -> Path:
    """
    The config file to read and write back: ``$BUFFERSWARM_CONFIG`` if set,
    a per-user copy in frozen builds (the bundle is read-only), otherwise
    the defaults next to the modules.
    """
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    if bundle_dir() is not None:
        return user_config_path()
    return resource_file(CONFIG_NAME)
