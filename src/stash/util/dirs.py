import os
import sys
from pathlib import Path

APP_NAME = "stash"


def _home(environ) -> Path:
    home = environ.get("HOME") or environ.get("USERPROFILE")
    return Path(home) if home else Path.home()


def _roaming_app_data(environ) -> Path:
    appdata = environ.get("APPDATA")
    if appdata:
        return Path(appdata)
    return _home(environ) / "AppData" / "Roaming"


def data_dir(app=APP_NAME, environ=os.environ, platform=sys.platform) -> Path:
    """Per-user data directory: XDG on linux & friends, the usual suspects on mac/windows."""
    if platform == "darwin":
        return _home(environ) / "Library" / "Application Support" / app
    if platform.startswith("win"):
        return _roaming_app_data(environ) / app / "data"
    xdg = environ.get("XDG_DATA_HOME")
    # relative XDG paths are invalid and get ignored
    if xdg and os.path.isabs(xdg):
        return Path(xdg) / app
    return _home(environ) / ".local" / "share" / app


def config_dir(app=APP_NAME, environ=os.environ, platform=sys.platform) -> Path:
    if platform == "darwin":
        return _home(environ) / "Library" / "Application Support" / app
    if platform.startswith("win"):
        return _roaming_app_data(environ) / app / "config"
    xdg = environ.get("XDG_CONFIG_HOME")
    if xdg and os.path.isabs(xdg):
        return Path(xdg) / app
    return _home(environ) / ".config" / app
