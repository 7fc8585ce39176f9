"""Git operations helper for preparing and updating the working tree."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

from engine.retry import RetryingRunner
from engine.runner import CommandResult, CommandRunner

logger = logging.getLogger(__name__)


class GitOps:
    """Helper class for git plumbing run through the command runners.

    Commands issued through ``retrying`` are retried with backoff, all
    others fail on the first non-zero exit.
    """

    def __init__(self, retrying: RetryingRunner) -> None:
        """Initialize GitOps.

        Args:
            retrying: Retrying runner; its wrapped runner executes unretried commands
        """
        self.retrying = retrying

    @property
    def runner(self) -> CommandRunner:
        return self.retrying.runner

    def git(self, *args: str, group: bool = True) -> CommandResult:
        return self.runner.run(["git", *args], group=group)

    def query(self, *args: str) -> CommandResult:
        """Run a read-only git command, capturing output and ignoring its exit status."""
        return self.runner.run(["git", *args], check=False, capture=True)

    def version(self) -> CommandResult:
        return self.git("version")

    def add_safe_directory(self, path: Path) -> None:
        self.git("config", "--global", "--add", "safe.directory", str(path))

    def disable_detached_head_advice(self) -> None:
        self.git("config", "--global", "advice.detachedHead", "false")

    def init(self) -> None:
        self.git("init")

    def set_credential_helper(self, helper: str = "store") -> None:
        self.git("config", "--global", "credential.helper", helper)

    def remote_tracking_refs(self) -> List[str]:
        result = self.query("for-each-ref", "--format=%(refname)", "refs/remotes/")
        return [line for line in result.stdout.splitlines() if line]

    def remove_remote_tracking_refs(self) -> List[str]:
        """Delete refs/remotes/* left by a previous run.

        Returns:
            The refs that were deleted
        """
        refs = self.remote_tracking_refs()
        for ref in refs:
            self.git("update-ref", "-d", ref, group=False)
        if refs:
            logger.info(f"Removed {len(refs)} previously created refs")
        return refs

    def clean(self) -> None:
        self.git("clean", "-ffdx")

    def has_head(self) -> bool:
        return bool(self.query("show-ref", "HEAD").stdout.strip())

    def reset_hard(self, ref: str = "HEAD") -> None:
        self.git("reset", "--hard", ref)

    def disable_auto_gc(self) -> None:
        self.git("config", "--local", "gc.auto", "0")

    def remotes(self) -> List[str]:
        return self.query("remote").stdout.split()

    def ensure_remote(self, name: str, url: str) -> bool:
        """Add a remote unless one with the same name exists.

        Returns:
            True if the remote was added
        """
        if name in self.remotes():
            logger.info(f"Remote {name} already configured")
            return False
        self.git("remote", "add", name, url)
        return True

    def fetch_shallow(self, remote: str, refspecs: Sequence[str], depth: int = 1) -> None:
        self.retrying.run(
            [
                "git",
                "fetch",
                "--no-tags",
                "--prune",
                "--no-recurse-submodules",
                f"--depth={depth}",
                remote,
                *refspecs,
            ],
            group=True,
        )

    def fetch_pull_request(self, remote: str, refspecs: Sequence[str]) -> None:
        self.retrying.run(
            [
                "git",
                "-c",
                "protocol.version=2",
                "fetch",
                "--prune",
                "--progress",
                "--no-recurse-submodules",
                remote,
                *refspecs,
            ],
            group=True,
        )

    def checkout_branch(self, branch: str, start_point: str) -> None:
        self.retrying.run(["git", "checkout", "--force", "-B", branch, start_point], group=True)

    def checkout_detached(self, ref: str) -> None:
        self.git("checkout", "--progress", "--force", ref)
