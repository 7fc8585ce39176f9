"""Data models shared across the checkout runner."""
from __future__ import annotations

from models.credential import GitCredential
from models.host import DistroFamily, HostClassification, HostOS
from models.ref_spec import BranchRef, PullRequestRef, RefSpec, parse_ref

__all__ = [
    "BranchRef",
    "DistroFamily",
    "GitCredential",
    "HostClassification",
    "HostOS",
    "PullRequestRef",
    "RefSpec",
    "parse_ref",
]
