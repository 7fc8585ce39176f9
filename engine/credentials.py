"""File-backed store for git's 'store' credential helper."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

from models.credential import GitCredential

logger = logging.getLogger(__name__)


def default_credentials_path() -> Path:
    return Path.home() / ".git-credentials"


class CredentialStore:
    """Reads and appends lines in a git-credentials file."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else default_credentials_path()

    def lines(self) -> List[str]:
        if not self.path.exists():
            return []
        return self.path.read_text(encoding="utf-8").splitlines()

    def contains(self, credential: GitCredential) -> bool:
        return credential.line in self.lines()

    def add(self, credential: GitCredential) -> bool:
        """Append a credential unless an identical line is already stored.

        Args:
            credential: Credential to persist

        Returns:
            True if the line was written, False if it was already present
        """
        if self.contains(credential):
            logger.info(f"Credential for {credential.host} already stored in {self.path}")
            return False

        # New files are created owner-only before the token is written
        fd = os.open(self.path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o600)
        with os.fdopen(fd, "a", encoding="utf-8") as f:
            f.write(credential.line + "\n")
        logger.info(f"Stored credential for {credential.host} in {self.path}")
        return True

    def remove(self) -> None:
        """Delete the credential file."""
        self.path.unlink(missing_ok=True)
        logger.info(f"Removed credential store {self.path}")
