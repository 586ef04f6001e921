from __future__ import annotations

import os
import sys
from pathlib import Path


def is_windows() -> bool:
    return os.name == "nt"


def is_macos() -> bool:
    return sys.platform == "darwin"


def user_app_support_dir(app_name: str) -> Path:
    """Return the OS-specific application support/config directory for an app name.

    - macOS: ~/Library/Application Support/<App>
    - Windows: %APPDATA%/<App> (fallback to ~/AppData/Roaming/<App>)
    - Linux: $XDG_CONFIG_HOME/<app-lower> or ~/.config/<app-lower>
    """
    if is_macos():
        return Path.home() / "Library" / "Application Support" / app_name
    if is_windows():
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
        return base / app_name
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
    return base / app_name.lower().replace(" ", "-")


def expand_user_path(raw: str) -> Path:
    """Expand a leading ~ and make the path absolute."""
    return Path(raw.strip()).expanduser().absolute()
