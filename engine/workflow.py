"""Workflow command output for CI log grouping and annotations."""
from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Iterator


def _emit(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def group(title: str) -> None:
    """Open a collapsible log group; the next group implicitly closes it."""
    _emit(f"::group::{title}")


def endgroup() -> None:
    _emit("::endgroup::")


def warning(message: str) -> None:
    _emit(f"::warning::{message}")


def error(message: str) -> None:
    _emit(f"::error::{message}")


@contextmanager
def grouped(title: str) -> Iterator[None]:
    """Wrap a block of output in a group that is always closed."""
    group(title)
    try:
        yield
    finally:
        endgroup()
