from __future__ import annotations
import os
from pathlib import Path

"""
Config path resolver with env override.
Priority:
1) Explicit env override: VULCANO_CONFIG_DIR
2) If running as root (uid==0): /etc/vulcano
3) XDG (user scope): $XDG_CONFIG_HOME/vulcano or ~/.config/vulcano
"""


def _is_root() -> bool:
    try:
        return os.geteuid() == 0
    except AttributeError:
        # no geteuid on Windows
        return False


def config_dir() -> str:
    if os.environ.get("VULCANO_CONFIG_DIR"):
        return os.environ["VULCANO_CONFIG_DIR"]
    if _is_root():
        return "/etc/vulcano"
    xdg = os.environ.get("XDG_CONFIG_HOME") or os.path.join(Path.home(), ".config")
    return os.path.join(xdg, "vulcano")


def config_file(name: str) -> str:
    return os.path.join(config_dir(), name)
