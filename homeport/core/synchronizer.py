"""Lifecycle of the local app catalog mirror.

The mirror lives at ``{root}/repos/{id}`` where ``id`` is derived from the
active catalog URL. It is always in one of three states, probed on demand:

- ABSENT: no directory
- VALID: a readable git working copy
- CORRUPT: a directory whose git metadata cannot be read

``update`` heals CORRUPT mirrors by deleting and re-cloning them. No locking
is done; concurrent invocations against one mirror are not supported.
"""
import shutil
from enum import Enum
from pathlib import Path
from typing import Optional

from homeport.core.config import HomeportConfig, get_config
from homeport.core.descriptor import BranchDescriptor, parse_descriptor
from homeport.core.errors import PreconditionFailedError, RepoError, UsageError
from homeport.core.identity import compute_id, compute_path, resolve_active_url
from homeport.core.logger import get_logger
from homeport.core.state_store import ConfigStore
from homeport.services.git_manager import GitManager, ProbeResult
from homeport.services.ownership import OwnershipFixer

logger = get_logger(__name__)

ALL_BRANCHES_REFSPEC = "+refs/heads/*:refs/remotes/origin/*"


class MirrorState(Enum):
    ABSENT = "absent"
    VALID = "valid"
    CORRUPT = "corrupt"


class RepoSynchronizer:
    """Clone, pull and retarget the catalog mirror."""

    def __init__(
        self,
        store: ConfigStore,
        git: GitManager,
        ownership: Optional[OwnershipFixer] = None,
        config: Optional[HomeportConfig] = None,
    ):
        self.store = store
        self.git = git
        self.config = config or get_config()
        self.ownership = ownership or OwnershipFixer(
            uid=self.config.service_uid,
            gid=self.config.service_gid,
            mock=git.mock,
        )

    def active_url(self) -> str:
        return resolve_active_url(self.store, self.config.default_repo_url)

    def repo_id(self) -> str:
        return compute_id(self.active_url())

    def repo_path(self) -> Path:
        return compute_path(self.repo_id(), self.config.root)

    def mirror_state(self) -> MirrorState:
        """Probe the mirror on disk. A probe that fails for other reasons
        than corruption reports VALID so nothing gets deleted."""
        path = self.repo_path()
        if not path.exists():
            return MirrorState.ABSENT
        if self.git.probe_status(path) == ProbeResult.CORRUPT:
            return MirrorState.CORRUPT
        return MirrorState.VALID

    def update(self) -> Path:
        """Bring the mirror up to date with the active catalog.

        Returns:
            Path of the mirror

        Raises:
            NetworkOrTimeoutError: If clone or pull fails or times out; a
                failed clone removes whatever it left on disk
        """
        url = self.active_url()
        path = self.repo_path()
        timeout = self.config.git_timeout

        self.git.add_safe_directory(path)

        if self.mirror_state() == MirrorState.CORRUPT:
            logger.warning(f"Removing corrupt mirror at {path}")
            shutil.rmtree(path)

        if path.exists():
            logger.info(f"Updating app repo {url}")
            self.git.pull(path, timeout=timeout)
        else:
            logger.info(f"Cloning app repo {url}")
            path.parent.mkdir(parents=True, exist_ok=True)
            try:
                self.git.clone(url, path, timeout=timeout, depth=1)
            except (RepoError, KeyboardInterrupt):
                # A killed clone leaves a .git with nothing fetched
                if path.exists():
                    logger.warning(f"Removing partial clone at {path}")
                    shutil.rmtree(path, ignore_errors=True)
                raise

        self.ownership.apply(path)
        return path

    def broaden_fetch_refspec(self, path: Path) -> bool:
        """Make a single-branch mirror track every remote branch.

        Returns:
            True if the refspec was rewritten, False if already broad
        """
        refspecs = self.git.get_fetch_refspecs(path)
        if any("refs/heads/*" in spec for spec in refspecs):
            return False

        logger.debug(f"Rewriting fetch refspec {refspecs} → {ALL_BRANCHES_REFSPEC}")
        self.git.set_fetch_refspec(path, ALL_BRANCHES_REFSPEC)
        return True

    def branch(self, name: str) -> Path:
        """Switch the mirror to ``name`` and fast-forward it.

        Raises:
            UsageError: If name is empty
            PreconditionFailedError: If no mirror has been cloned yet
            UnknownBranchError: If the branch cannot be checked out
        """
        if not name or not name.strip():
            raise UsageError("A branch name is required")

        path = self.repo_path()
        if not path.exists():
            raise PreconditionFailedError(
                f"No local mirror at {path}. Run 'repo update' first."
            )

        self.broaden_fetch_refspec(path)
        self.git.fetch(path, timeout=self.config.git_timeout)
        self.git.checkout(path, name)
        return self.update()

    def checkout(self, descriptor: str) -> BranchDescriptor:
        """Retarget the catalog to ``descriptor`` and sync it.

        Steps run in order (set, update, branch) and stop at the first
        failure; a persisted URL is not rolled back.
        """
        parsed = parse_descriptor(descriptor)

        self.store.set(parsed.url)
        self.update()
        if parsed.branch:
            self.branch(parsed.branch)
        return parsed
