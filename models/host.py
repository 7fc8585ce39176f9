"""Host classification model for OS and distro detection."""
from __future__ import annotations

from enum import Enum

from pydantic.dataclasses import dataclass


class HostOS(str, Enum):
    """Operating system the runner executes on."""

    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"


class DistroFamily(str, Enum):
    """Linux distribution family, keyed by native package manager."""

    DEBIAN = "debian"
    FEDORA = "fedora"
    SUSE = "suse"
    ARCH = "arch"
    ALPINE = "alpine"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class HostClassification:
    """Classification of the host derived once at startup.

    Attributes:
        os: Host operating system
        distro_family: Linux distribution family, UNKNOWN for non-Linux hosts
    """

    os: HostOS
    distro_family: DistroFamily = DistroFamily.UNKNOWN

    @property
    def is_linux(self) -> bool:
        return self.os is HostOS.LINUX
