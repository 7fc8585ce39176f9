"""Host detection and package installation."""
from __future__ import annotations

from host.detect import UnsupportedHostError, detect_host
from host.installers import InstallState, ensure_git, get_installer, sys_install

__all__ = [
    "InstallState",
    "UnsupportedHostError",
    "detect_host",
    "ensure_git",
    "get_installer",
    "sys_install",
]
