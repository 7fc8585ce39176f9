"""Package installer dispatch keyed by Linux distro family."""
from __future__ import annotations

import logging
import shutil
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Type

from pydantic import BaseModel

from engine import workflow
from engine.retry import RetryingRunner
from models.host import DistroFamily, HostClassification, HostOS

logger = logging.getLogger(__name__)

APT_OPTIONS = ["-o", "Acquire::Retries=10"]


class InstallState(BaseModel):
    """Per-run installer state passed through the dispatch chain."""

    apt_updated: bool = False


def privilege_prefix() -> List[str]:
    """Return the escalation command available on this host, if any."""
    for tool in ("sudo", "doas"):
        if shutil.which(tool):
            return [tool]
    return []


class PackageInstaller(ABC):
    """Installs packages with a distro's native package manager."""

    def __init__(
        self,
        retrying: RetryingRunner,
        state: InstallState,
        escalate: Optional[List[str]] = None,
    ) -> None:
        """Initialize the installer.

        Args:
            retrying: Runner used for install commands
            state: Installer state shared for the whole run
            escalate: Privilege escalation prefix, detected when None
        """
        self.retrying = retrying
        self.state = state
        self.escalate = privilege_prefix() if escalate is None else list(escalate)

    def command(self, *args: str) -> List[str]:
        return [*self.escalate, *args]

    @abstractmethod
    def install(self, packages: Sequence[str]) -> None:
        """Install the given packages non-interactively."""


class AptInstaller(PackageInstaller):
    def update(self) -> None:
        self.retrying.run(self.command("apt-get", *APT_OPTIONS, "-qq", "update"))
        self.state.apt_updated = True

    def install(self, packages: Sequence[str]) -> None:
        if not self.state.apt_updated:
            self.update()
        self.retrying.run(
            self.command(
                "apt-get",
                *APT_OPTIONS,
                "-o",
                "Dpkg::Use-Pty=0",
                "install",
                "-y",
                "--no-install-recommends",
                *packages,
            )
        )


def resolve_dnf_binary() -> str:
    """Pick dnf, falling back to microdnf (minimal images) and then yum (RHEL 7)."""
    for binary in ("dnf", "microdnf"):
        if shutil.which(binary):
            return binary
    return "yum"


class DnfInstaller(PackageInstaller):
    def __init__(self, *args, binary: Optional[str] = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.binary = binary or resolve_dnf_binary()

    def install(self, packages: Sequence[str]) -> None:
        self.retrying.run(self.command(self.binary, "install", "-y", *packages))


class ZypperInstaller(PackageInstaller):
    def install(self, packages: Sequence[str]) -> None:
        self.retrying.run(self.command("zypper", "install", "-y", *packages))


class PacmanInstaller(PackageInstaller):
    def install(self, packages: Sequence[str]) -> None:
        self.retrying.run(self.command("pacman", "-Sy", "--noconfirm", *packages))


class ApkInstaller(PackageInstaller):
    def install(self, packages: Sequence[str]) -> None:
        # apk is run once, without retries
        self.retrying.runner.run(self.command("apk", "--no-cache", "add", *packages))


INSTALLERS: Dict[DistroFamily, Type[PackageInstaller]] = {
    DistroFamily.DEBIAN: AptInstaller,
    DistroFamily.FEDORA: DnfInstaller,
    DistroFamily.SUSE: ZypperInstaller,
    DistroFamily.ARCH: PacmanInstaller,
    DistroFamily.ALPINE: ApkInstaller,
}

OS_NAMES: Dict[HostOS, str] = {
    HostOS.MACOS: "macOS",
    HostOS.WINDOWS: "Windows",
}

# Extra packages needed next to git on each family
GIT_PACKAGES: Dict[DistroFamily, List[str]] = {
    DistroFamily.DEBIAN: ["ca-certificates", "git"],
}


def get_installer(
    family: DistroFamily,
    retrying: RetryingRunner,
    state: InstallState,
    escalate: Optional[List[str]] = None,
) -> PackageInstaller:
    """Look up the installer for a distro family.

    Raises:
        ValueError: If the family has no supported package manager
    """
    try:
        installer_cls = INSTALLERS[family]
    except KeyError as e:
        raise ValueError(f"No package installer for distro family '{family.value}'") from e
    return installer_cls(retrying, state, escalate=escalate)


def sys_install(
    family: DistroFamily,
    packages: Sequence[str],
    retrying: RetryingRunner,
    state: InstallState,
    escalate: Optional[List[str]] = None,
) -> None:
    """Install packages with the package manager matching the distro family."""
    installer = get_installer(family, retrying, state, escalate=escalate)
    logger.info(f"Installing {' '.join(packages)} with {type(installer).__name__}")
    installer.install(packages)


def ensure_git(
    host: HostClassification,
    retrying: RetryingRunner,
    state: InstallState,
    escalate: Optional[List[str]] = None,
) -> bool:
    """Install git if it is not on PATH and the host supports installing it.

    Hosts where git cannot be installed get a warning and execution
    continues; a later git command surfaces the failure.

    Returns:
        True if git was installed
    """
    if shutil.which("git"):
        return False

    if not host.is_linux:
        workflow.warning(f"checkout-action requires git on {OS_NAMES[host.os]}")
        return False
    if host.distro_family not in INSTALLERS:
        workflow.warning(
            "checkout-action requires git on non-Debian/Fedora/SUSE/Arch/Alpine-based Linux"
        )
        return False

    packages = GIT_PACKAGES.get(host.distro_family, ["git"])
    with workflow.grouped("Install packages required for checkout (git)"):
        sys_install(host.distro_family, packages, retrying, state, escalate=escalate)
    return True
