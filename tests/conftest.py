"""Shared test fixtures for homeport tests."""
from pathlib import Path
from typing import List, Optional

import pytest

from homeport.core.config import HomeportConfig, set_config
from homeport.core.errors import NetworkOrTimeoutError, UnknownBranchError
from homeport.core.state_store import MemoryConfigStore
from homeport.core.synchronizer import RepoSynchronizer
from homeport.services.git_manager import ProbeResult

MASTER_REFSPEC = "+refs/heads/master:refs/remotes/origin/master"


class FakeGit:
    """In-memory stand-in for GitManager recording every call."""

    mock = False

    def __init__(self):
        self.calls: List[tuple] = []
        self.safe_directories: List[str] = []
        self.probe_result = ProbeResult.OK
        self.refspecs: List[str] = [MASTER_REFSPEC]
        self.remote_branches = {"master", "staging"}
        self.fail_clone: Optional[Exception] = None
        self.fail_pull: Optional[Exception] = None
        self.fail_fetch: Optional[Exception] = None
        self.partial_clone = False

    def list_safe_directories(self):
        return list(self.safe_directories)

    def add_safe_directory(self, path):
        if str(path) in self.safe_directories:
            return False
        self.calls.append(("add_safe_directory", str(path)))
        self.safe_directories.append(str(path))
        return True

    def clone(self, url, path, timeout, depth=1):
        self.calls.append(("clone", url, Path(path), timeout, depth))
        if self.fail_clone:
            if self.partial_clone:
                (Path(path) / ".git").mkdir(parents=True)
            raise self.fail_clone
        (Path(path) / ".git").mkdir(parents=True)
        self.probe_result = ProbeResult.OK

    def pull(self, path, timeout):
        self.calls.append(("pull", Path(path), timeout))
        if self.fail_pull:
            raise self.fail_pull

    def fetch(self, path, timeout):
        self.calls.append(("fetch", Path(path), timeout))
        if self.fail_fetch:
            raise self.fail_fetch

    def checkout(self, path, branch):
        self.calls.append(("checkout", Path(path), branch))
        if branch not in self.remote_branches:
            raise UnknownBranchError(f"git checkout {branch} failed: pathspec '{branch}' did not match")

    def probe_status(self, path):
        self.calls.append(("probe_status", Path(path)))
        return self.probe_result

    def get_fetch_refspecs(self, path):
        return list(self.refspecs)

    def set_fetch_refspec(self, path, refspec):
        self.calls.append(("set_fetch_refspec", Path(path), refspec))
        self.refspecs = [refspec]

    def call_names(self):
        return [call[0] for call in self.calls]


class FakeOwnership:
    def __init__(self):
        self.applied: List[Path] = []

    def apply(self, path):
        self.applied.append(Path(path))
        return True


@pytest.fixture(autouse=True)
def reset_global_config():
    """Drop any config cached or overridden by a previous test."""
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def config(tmp_path: Path) -> HomeportConfig:
    return HomeportConfig(root=tmp_path / "root", git_timeout=30)


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def fake_ownership() -> FakeOwnership:
    return FakeOwnership()


@pytest.fixture
def store() -> MemoryConfigStore:
    return MemoryConfigStore()


@pytest.fixture
def synchronizer(store, fake_git, fake_ownership, config) -> RepoSynchronizer:
    return RepoSynchronizer(store=store, git=fake_git, ownership=fake_ownership, config=config)


@pytest.fixture
def network_error() -> NetworkOrTimeoutError:
    return NetworkOrTimeoutError("git pull timed out after 30s")
