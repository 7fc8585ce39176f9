"""Host OS and Linux distro family detection."""
from __future__ import annotations

import logging
import platform
from pathlib import Path
from typing import Dict, Optional

from models.host import DistroFamily, HostClassification, HostOS

logger = logging.getLogger(__name__)

OS_RELEASE_PATH = Path("/etc/os-release")

# Checked in order against ID_LIKE (or ID); first substring match wins
FAMILY_PATTERNS = (
    ("debian", DistroFamily.DEBIAN),
    ("fedora", DistroFamily.FEDORA),
    ("suse", DistroFamily.SUSE),
    ("arch", DistroFamily.ARCH),
    ("alpine", DistroFamily.ALPINE),
)

WINDOWS_PREFIXES = ("MINGW", "MSYS", "CYGWIN")


class UnsupportedHostError(Exception):
    """Exception raised when the host OS cannot be classified."""

    pass


def parse_os_release(content: str) -> Dict[str, str]:
    """Parse os-release KEY=value lines, stripping surrounding quotes."""
    values: Dict[str, str] = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = value.strip().strip("\"'")
    return values


def classify_distro(os_release: Dict[str, str]) -> DistroFamily:
    """Map os-release fields to a distro family, preferring ID_LIKE over ID."""
    candidate = os_release.get("ID_LIKE") or os_release.get("ID", "")
    candidate = candidate.lower()
    for pattern, family in FAMILY_PATTERNS:
        if pattern in candidate:
            return family
    return DistroFamily.UNKNOWN


def classify_os(uname_s: str) -> HostOS:
    """Map a ``uname -s`` style system name to a host OS.

    Raises:
        UnsupportedHostError: If the system name is not recognized
    """
    if uname_s == "Linux":
        return HostOS.LINUX
    if uname_s == "Darwin":
        return HostOS.MACOS
    if uname_s in ("Windows_NT", "Windows") or uname_s.upper().startswith(WINDOWS_PREFIXES):
        return HostOS.WINDOWS
    raise UnsupportedHostError(f"unrecognized OS type '{uname_s}'")


def classify_host(uname_s: str, os_release: Optional[str] = None) -> HostClassification:
    """Classify a host from its system name and os-release contents.

    Args:
        uname_s: System name as printed by ``uname -s``
        os_release: Contents of /etc/os-release, None if unavailable

    Returns:
        HostClassification; distro_family is UNKNOWN for non-Linux hosts
    """
    host = HostClassification(os=classify_os(uname_s))
    if not host.is_linux:
        return host
    if os_release is None:
        logger.warning("No os-release metadata found, distro family is unknown")
        return host
    return HostClassification(os=host.os, distro_family=classify_distro(parse_os_release(os_release)))


def detect_host(os_release_path: Path = OS_RELEASE_PATH) -> HostClassification:
    """Detect the classification of the running host."""
    uname_s = platform.system()
    os_release = None
    if uname_s == "Linux" and os_release_path.exists():
        os_release = os_release_path.read_text(encoding="utf-8")
    host = classify_host(uname_s, os_release)
    logger.info(f"Detected host os={host.os.value} distro={host.distro_family.value}")
    return host
