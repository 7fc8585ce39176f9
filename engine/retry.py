"""Retry policy for flaky network and package manager commands."""
from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Sequence

from pydantic import BaseModel, Field
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from engine import workflow
from engine.runner import CommandError, CommandResult, CommandRunner

logger = logging.getLogger(__name__)


class RetryPolicy(BaseModel):
    """Linear backoff policy.

    After failed attempt ``i`` the runner sleeps
    ``backoff_start + backoff_increment * (i - 1)`` seconds. Once
    ``max_retries`` guarded attempts have failed, one final attempt runs
    and its error propagates.
    """

    max_retries: int = Field(default=10, ge=0)
    backoff_start: float = Field(default=1.0, ge=0)
    backoff_increment: float = Field(default=1.0, ge=0)

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


def build_retrying(
    policy: RetryPolicy, sleep: Callable[[float], None] = time.sleep
) -> Retrying:
    """Build a tenacity controller for the given policy."""
    return Retrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_incrementing(start=policy.backoff_start, increment=policy.backoff_increment),
        retry=retry_if_exception_type(CommandError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep,
        reraise=True,
    )


class RetryingRunner:
    """CommandRunner wrapper that retries failed commands per a RetryPolicy."""

    def __init__(
        self,
        runner: CommandRunner,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the retrying runner.

        Args:
            runner: Runner executing each attempt
            policy: Retry policy, defaults to 10 retries with 1s, 2s, ... backoff
            sleep: Sleep function used between attempts
        """
        self.runner = runner
        self.policy = policy or RetryPolicy()
        self.sleep = sleep

    def run(
        self, command: Sequence[str], *, capture: bool = False, group: bool = False
    ) -> CommandResult:
        """Run a command until it succeeds or the policy is exhausted.

        Raises:
            CommandError: The error of the final attempt
        """
        if group:
            workflow.group(" ".join(command))
        retrying = build_retrying(self.policy, sleep=self.sleep)
        return retrying(self.runner.run, command, check=True, capture=capture)
