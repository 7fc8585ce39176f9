"""Shared fixtures for checkout tests."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from config.settings import CheckoutSettings
from engine.retry import RetryingRunner
from engine.runner import CommandError, CommandResult, CommandRunner


class RecordingRunner(CommandRunner):
    """CommandRunner that records commands instead of executing them.

    Args:
        outputs: Captured stdout keyed by command prefix
        failures: Exit codes keyed by command prefix
    """

    def __init__(
        self,
        outputs: Optional[Dict[Tuple[str, ...], str]] = None,
        failures: Optional[Dict[Tuple[str, ...], int]] = None,
    ) -> None:
        super().__init__(cwd=None)
        self.outputs = outputs or {}
        self.failures = failures or {}
        self.commands: List[List[str]] = []

    def _lookup(self, table: Dict[Tuple[str, ...], object], command: List[str]):
        for prefix, value in table.items():
            if tuple(command[: len(prefix)]) == prefix:
                return value
        return None

    def run(
        self,
        command: Sequence[str],
        *,
        check: bool = True,
        capture: bool = False,
        group: bool = False,
    ) -> CommandResult:
        command = list(command)
        self.commands.append(command)
        returncode = self._lookup(self.failures, command) or 0
        stdout = self._lookup(self.outputs, command) or ""
        if check and returncode:
            raise CommandError(command, returncode)
        return CommandResult(command=command, returncode=returncode, stdout=stdout)


@pytest.fixture
def recording_runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def retrying(recording_runner: RecordingRunner) -> RetryingRunner:
    return RetryingRunner(recording_runner, sleep=lambda _: None)


@pytest.fixture
def make_settings():
    """Build settings without reading the real environment."""

    def _make(**overrides: str) -> CheckoutSettings:
        values = {
            "github_server_url": "https://github.com",
            "github_repository": "octo/widgets",
            "github_ref": "refs/heads/main",
            "github_sha": "abc123",
            "input_token": "ghs_secret",
            "input_persist_credentials": "false",
        }
        values.update(overrides)
        return CheckoutSettings(**values)

    return _make


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    path = tmp_path / "workspace"
    path.mkdir()
    return path
