"""Git operations for the local app catalog mirror."""
import os
import signal
import subprocess
from enum import Enum
from pathlib import Path
from typing import List, Optional

from homeport.core.errors import GitCommandError, NetworkOrTimeoutError, UnknownBranchError
from homeport.core.logger import get_logger

logger = get_logger(__name__)

# Exit status git uses for fatal errors, including unreadable repositories
GIT_FATAL_EXIT = 128

_CORRUPTION_MARKERS = (
    "not a git repository",
    "corrupt",
    "bad object",
    "loose object",
    "index file",
    "unable to read",
)


class ProbeResult(Enum):
    """Outcome of ``git status`` on an existing mirror."""

    OK = "ok"
    CORRUPT = "corrupt"
    FAILED = "failed"


class GitManager:
    """Manages git operations for the catalog mirror."""

    def __init__(self, mock: bool = False, git_binary: str = "git"):
        self.mock = mock
        self.git_binary = git_binary

    def _run(
        self,
        args: List[str],
        cwd: Optional[Path] = None,
        env: Optional[dict] = None,
    ) -> subprocess.CompletedProcess:
        cmd = [self.git_binary] + args
        logger.debug(f"Running: {' '.join(cmd)}")
        return subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            check=False,
            env=env,
        )

    def _run_network(self, args: List[str], action: str, cwd: Optional[Path], timeout: int) -> None:
        """Run a clone/pull/fetch in its own process group.

        Git hands the transfer to helper processes (``remote-https``,
        ``fetch-pack``); on timeout the whole group is killed, not just git.
        """
        cmd = [self.git_binary] + args
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            process = subprocess.Popen(
                cmd,
                cwd=str(cwd) if cwd else None,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                start_new_session=True,
            )
        except FileNotFoundError as exc:
            raise NetworkOrTimeoutError("Git not found. Please install git first.") from exc

        try:
            stdout, stderr = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired as exc:
            kill_process_group(process)
            logger.error(f"git {action} timed out after {timeout}s")
            raise NetworkOrTimeoutError(f"git {action} timed out after {timeout}s") from exc
        except KeyboardInterrupt:
            kill_process_group(process)
            raise

        if process.returncode != 0:
            logger.error(f"git {action} failed with exit code {process.returncode}")
            if stderr:
                logger.error(f"Error output: {stderr.strip()}")
            detail = (stderr or "").strip() or f"exit code {process.returncode}"
            raise NetworkOrTimeoutError(f"git {action} failed: {detail}")

        if stdout:
            logger.debug(f"Git output: {stdout.strip()}")

    # Trust configuration

    def list_safe_directories(self) -> List[str]:
        """Return the global ``safe.directory`` entries."""
        if self.mock:
            logger.info("MOCK: Would read global safe.directory entries")
            return []

        result = self._run(["config", "--global", "--get-all", "safe.directory"])
        # Exit code 1 means the key is simply unset
        if result.returncode not in (0, 1):
            logger.warning(f"Failed to read safe.directory: {result.stderr.strip()}")
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def add_safe_directory(self, path: Path) -> bool:
        """Register ``path`` as a trusted directory unless already present."""
        path_str = str(path)
        if path_str in self.list_safe_directories():
            return False

        if self.mock:
            logger.info(f"MOCK: Would add {path_str} to safe.directory")
            return True

        result = self._run(["config", "--global", "--add", "safe.directory", path_str])
        if result.returncode != 0:
            logger.warning(f"Failed to add {path_str} to safe.directory: {result.stderr.strip()}")
            return False
        logger.debug(f"Added {path_str} to safe.directory")
        return True

    # Network operations

    def clone(self, url: str, path: Path, timeout: int, depth: Optional[int] = 1) -> None:
        """Clone ``url`` into ``path``.

        Args:
            url: Remote catalog URL
            path: Destination directory
            timeout: Seconds before the transfer is killed
            depth: History depth, None for a full clone

        Raises:
            NetworkOrTimeoutError: If git fails or exceeds the timeout
        """
        if self.mock:
            logger.info(f"MOCK: Would clone {url} to {path}")
            return

        args = ["clone"]
        if depth:
            args += ["--depth", str(depth)]
        args += [url, str(path)]

        logger.info(f"Cloning {url} → {path}")
        self._run_network(args, "clone", cwd=None, timeout=timeout)
        logger.info("✓ Successfully cloned repository")

    def pull(self, path: Path, timeout: int) -> None:
        """Pull the checked-out branch of the mirror at ``path``.

        Raises:
            NetworkOrTimeoutError: If git fails or exceeds the timeout
        """
        if self.mock:
            logger.info(f"MOCK: Would git pull in {path}")
            return

        logger.info(f"Pulling latest changes in {path}")
        self._run_network(["pull"], "pull", cwd=path, timeout=timeout)
        logger.info("✓ Successfully pulled latest changes")

    def fetch(self, path: Path, timeout: int) -> None:
        """Fetch all refs from origin.

        Raises:
            NetworkOrTimeoutError: If git fails or exceeds the timeout
        """
        if self.mock:
            logger.info(f"MOCK: Would git fetch in {path}")
            return

        logger.info(f"Fetching remote branches in {path}")
        self._run_network(["fetch", "origin"], "fetch", cwd=path, timeout=timeout)

    # Local operations

    def checkout(self, path: Path, branch: str) -> None:
        """Check out ``branch`` in the mirror.

        Raises:
            UnknownBranchError: If git cannot check the branch out
        """
        if self.mock:
            logger.info(f"MOCK: Would check out {branch} in {path}")
            return

        result = self._run(["checkout", branch], cwd=path)
        if result.returncode != 0:
            detail = (result.stderr or "").strip() or f"exit code {result.returncode}"
            logger.error(f"Failed to check out {branch}: {detail}")
            raise UnknownBranchError(f"git checkout {branch} failed: {detail}")
        logger.info(f"✓ Checked out {branch}")

    def probe_status(self, path: Path) -> ProbeResult:
        """Classify the mirror at ``path`` by running ``git status``.

        Exit code 128 alone is not trusted: the mirror only counts as
        corrupt when its metadata is visibly damaged or git reports a
        corruption marker.

        A clean status with an unresolvable HEAD (a clone killed before its
        first fetch completed) is also corrupt.
        """
        if self.mock:
            logger.info(f"MOCK: Would probe git status in {path}")
            return ProbeResult.OK

        path = Path(path)
        env = dict(os.environ)
        # Never fall through to a repository enclosing the mirror
        env["GIT_CEILING_DIRECTORIES"] = str(path.parent)

        try:
            result = self._run(["status", "--porcelain"], cwd=path, env=env)
        except OSError as exc:
            logger.warning(f"Could not probe {path}: {exc}")
            return ProbeResult.FAILED

        if result.returncode == 0:
            return self._probe_head(path, env)

        stderr = (result.stderr or "").lower()
        if result.returncode == GIT_FATAL_EXIT and (
            not metadata_intact(path)
            or any(marker in stderr for marker in _CORRUPTION_MARKERS)
        ):
            logger.warning(f"Repository at {path} is corrupt: {result.stderr.strip()}")
            return ProbeResult.CORRUPT

        logger.warning(
            f"git status failed in {path} (exit code {result.returncode}): {result.stderr.strip()}"
        )
        return ProbeResult.FAILED

    def _probe_head(self, path: Path, env: dict) -> ProbeResult:
        try:
            result = self._run(["rev-parse", "--verify", "--quiet", "HEAD"], cwd=path, env=env)
        except OSError as exc:
            logger.warning(f"Could not probe {path}: {exc}")
            return ProbeResult.FAILED

        if result.returncode != 0:
            logger.warning(f"Repository at {path} has no resolvable HEAD, treating as partial clone")
            return ProbeResult.CORRUPT
        return ProbeResult.OK

    def get_fetch_refspecs(self, path: Path) -> List[str]:
        """Return the ``remote.origin.fetch`` refspecs of the mirror."""
        if self.mock:
            logger.info(f"MOCK: Would read remote.origin.fetch in {path}")
            return []

        result = self._run(["config", "--get-all", "remote.origin.fetch"], cwd=path)
        if result.returncode not in (0, 1):
            logger.warning(f"Failed to read remote.origin.fetch: {result.stderr.strip()}")
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def set_fetch_refspec(self, path: Path, refspec: str) -> None:
        """Replace every ``remote.origin.fetch`` entry with ``refspec``."""
        if self.mock:
            logger.info(f"MOCK: Would set remote.origin.fetch to {refspec} in {path}")
            return

        result = self._run(
            ["config", "--replace-all", "remote.origin.fetch", refspec], cwd=path
        )
        if result.returncode != 0:
            detail = (result.stderr or "").strip() or f"exit code {result.returncode}"
            raise GitCommandError(f"Failed to update remote.origin.fetch: {detail}")
        logger.debug(f"Set remote.origin.fetch to {refspec}")


def metadata_intact(path: Path) -> bool:
    """Return True when ``path/.git`` has the files git needs to open it."""
    git_dir = Path(path) / ".git"
    if not git_dir.is_dir():
        return False
    return all((git_dir / entry).exists() for entry in ("HEAD", "objects", "refs"))


def kill_process_group(process: subprocess.Popen) -> None:
    """SIGKILL every process in ``process``'s session and reap it."""
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    process.communicate()
