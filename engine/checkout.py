"""Checkout sequence: configure the repo, resolve the ref, fetch and check out."""
from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from config.settings import CheckoutSettings
from engine.credentials import CredentialStore
from engine.git_ops import GitOps
from models.ref_spec import BranchRef, PullRequestRef

logger = logging.getLogger(__name__)

REMOTE_NAME = "origin"


class CheckoutState(str, Enum):
    """Progress of a checkout run."""

    INIT = "init"
    CONFIGURED = "configured"
    REF_RESOLVED = "ref_resolved"
    CHECKED_OUT = "checked_out"
    CREDENTIAL_SCRUBBED = "credential_scrubbed"


class GitCheckout:
    """Drives the working directory from an empty folder to the target commit.

    Each step requires the previous one to have completed; calling a step
    out of order raises RuntimeError. Git failures propagate as
    CommandError and leave the repository as-is.
    """

    def __init__(
        self,
        settings: CheckoutSettings,
        git: GitOps,
        credentials: CredentialStore,
        working_directory: Path,
    ) -> None:
        """Initialize the checkout.

        Args:
            settings: Workflow environment settings
            git: Git helper bound to the working directory
            credentials: Credential store the 'store' helper reads
            working_directory: Directory to check the repository out into
        """
        self.settings = settings
        self.git = git
        self.credentials = credentials
        self.working_directory = Path(working_directory)
        self.state = CheckoutState.INIT
        self.ref: Optional[Union[BranchRef, PullRequestRef]] = None

    def _require(self, expected: CheckoutState) -> None:
        if self.state is not expected:
            raise RuntimeError(
                f"Checkout is in state {self.state.value}, expected {expected.value}"
            )

    def configure(self) -> None:
        """Initialize the repository and install credentials."""
        self._require(CheckoutState.INIT)

        self.git.version()
        self.git.add_safe_directory(self.working_directory)
        self.git.disable_detached_head_advice()
        self.git.init()

        self.git.set_credential_helper("store")
        self.credentials.add(self.settings.credential)

        logger.info("Removing previously created refs, to avoid conflicts")
        self.git.remove_remote_tracking_refs()

        logger.info("Cleaning the repository")
        self.git.clean()
        if self.git.has_head():
            self.git.reset_hard("HEAD")

        logger.info("Disabling automatic garbage collection")
        self.git.disable_auto_gc()

        self.git.ensure_remote(REMOTE_NAME, self.settings.repository_url)
        self.state = CheckoutState.CONFIGURED

    def resolve_ref(self) -> Union[BranchRef, PullRequestRef]:
        self._require(CheckoutState.CONFIGURED)
        self.ref = self.settings.ref_spec
        logger.info(f"Resolved {self.settings.github_ref} to {self.ref.remote_ref}")
        self.state = CheckoutState.REF_RESOLVED
        return self.ref

    def checkout(self) -> None:
        """Fetch the target commit and check it out."""
        self._require(CheckoutState.REF_RESOLVED)
        ref = self.ref

        if isinstance(ref, BranchRef):
            self.git.fetch_shallow(REMOTE_NAME, ref.fetch_refspecs, depth=1)
            self.git.checkout_branch(ref.branch, ref.remote_ref)
        else:
            self.git.fetch_pull_request(REMOTE_NAME, ref.fetch_refspecs)
            self.git.checkout_detached(ref.remote_ref)

        logger.info(f"Checked out {ref.sha}")
        self.state = CheckoutState.CHECKED_OUT

    def scrub_credentials(self) -> bool:
        """Delete stored credentials unless persistence was requested.

        Returns:
            True if the credential file was removed
        """
        self._require(CheckoutState.CHECKED_OUT)
        if self.settings.persist_credentials:
            logger.info("Keeping stored credentials")
            return False
        self.credentials.remove()
        self.state = CheckoutState.CREDENTIAL_SCRUBBED
        return True

    def run(self) -> CheckoutState:
        """Run every step in order and return the final state."""
        self.configure()
        self.resolve_ref()
        self.checkout()
        self.scrub_credentials()
        return self.state
