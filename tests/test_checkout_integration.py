"""End-to-end checkout against a local upstream repository."""
from __future__ import annotations

import shutil
from pathlib import Path
from typing import Tuple

import pygit2
import pytest

from config.settings import CheckoutSettings
from engine.checkout import CheckoutState, GitCheckout
from engine.credentials import CredentialStore
from engine.git_ops import GitOps
from engine.retry import RetryingRunner
from engine.runner import CommandRunner

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


@pytest.fixture
def git_home(tmp_path: Path, monkeypatch) -> Path:
    """Isolate global git config and credentials in a temporary home."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.delenv("GIT_CONFIG_GLOBAL", raising=False)
    monkeypatch.delenv("GIT_DIR", raising=False)
    return home


@pytest.fixture
def upstream(tmp_path: Path) -> Tuple[Path, str]:
    """Create an upstream repository with a main branch and a pull ref.

    Yields:
        Path to the repository and the SHA of its only commit
    """
    repo_path = tmp_path / "upstream"
    repo_path.mkdir()
    repo = pygit2.init_repository(str(repo_path), initial_head="main")

    (repo_path / "README.md").write_text("widgets\n")
    index = repo.index
    index.add("README.md")
    index.write()
    tree_id = index.write_tree()
    author = pygit2.Signature("Test User", "test@example.com")
    commit_id = repo.create_commit("HEAD", author, author, "Initial commit", tree_id, [])
    repo.references.create("refs/pull/42/merge", commit_id)

    return repo_path, str(commit_id)


def run_checkout(
    upstream_path: Path, workspace: Path, home: Path, github_ref: str, sha: str, persist: str
) -> Tuple[GitCheckout, CredentialStore]:
    settings = CheckoutSettings(
        github_server_url=f"file://{upstream_path.parent}",
        github_repository=upstream_path.name,
        github_ref=github_ref,
        github_sha=sha,
        input_token="ghs_secret",
        input_persist_credentials=persist,
    )
    store = CredentialStore(home / ".git-credentials")
    retrying = RetryingRunner(CommandRunner(cwd=workspace), sleep=lambda _: None)
    checkout = GitCheckout(settings, GitOps(retrying), store, workspace)
    checkout.run()
    return checkout, store


def test_branch_checkout_end_to_end(upstream, workspace: Path, git_home: Path) -> None:
    """Test a branch push is checked out as local branch main at the SHA."""
    upstream_path, sha = upstream
    checkout, store = run_checkout(upstream_path, workspace, git_home, "refs/heads/main", sha, "false")

    assert checkout.state is CheckoutState.CREDENTIAL_SCRUBBED
    assert not store.path.exists()

    repo = pygit2.Repository(str(workspace))
    assert not repo.head_is_detached
    assert repo.head.shorthand == "main"
    assert str(repo.head.target) == sha
    assert str(repo.references["refs/remotes/origin/main"].target) == sha
    assert (workspace / "README.md").read_text() == "widgets\n"
    assert repo.config["gc.auto"] == "0"

    global_config = (git_home / ".gitconfig").read_text()
    assert "detachedHead = false" in global_config
    assert "helper = store" in global_config


def test_pull_request_checkout_end_to_end(upstream, workspace: Path, git_home: Path) -> None:
    """Test a pull request ref is checked out detached at the SHA."""
    upstream_path, sha = upstream
    checkout, store = run_checkout(
        upstream_path, workspace, git_home, "refs/pull/42/merge", sha, "true"
    )

    assert checkout.state is CheckoutState.CHECKED_OUT
    assert store.path.exists()

    repo = pygit2.Repository(str(workspace))
    assert repo.head_is_detached
    assert str(repo.head.target) == sha
    assert str(repo.references["refs/remotes/pull/42/merge"].target) == sha


def test_rerun_is_idempotent(upstream, workspace: Path, git_home: Path) -> None:
    """Test a second run over the same directory succeeds with one credential line."""
    upstream_path, sha = upstream
    run_checkout(upstream_path, workspace, git_home, "refs/heads/main", sha, "true")
    (workspace / "untracked.txt").write_text("leftover")

    _, store = run_checkout(upstream_path, workspace, git_home, "refs/heads/main", sha, "true")

    assert len(store.lines()) == 1
    assert not (workspace / "untracked.txt").exists()
