"""Reset ownership of catalog files to the platform service account."""
import subprocess
from pathlib import Path

from homeport.core.logger import get_logger

logger = get_logger(__name__)


class OwnershipFixer:
    """Recursively chown a directory tree, best effort."""

    def __init__(self, uid: int = 1000, gid: int = 1000, mock: bool = False):
        self.uid = uid
        self.gid = gid
        self.mock = mock

    def apply(self, path: Path) -> bool:
        """Chown ``path`` to ``uid:gid``.

        Returns:
            True if ownership was reset, False otherwise (never raises)
        """
        path = Path(path)
        owner = f"{self.uid}:{self.gid}"

        if self.mock:
            logger.info(f"MOCK: Would chown -R {owner} {path}")
            return True

        if not path.exists():
            logger.debug(f"Skipping ownership fix-up, {path} does not exist")
            return False

        try:
            subprocess.run(
                ["chown", "-R", owner, str(path)],
                capture_output=True,
                text=True,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            logger.warning(f"Failed to set ownership {owner} on {path}: {e}")
            if e.stderr:
                logger.warning(f"Error output: {e.stderr.strip()}")
            return False
        except OSError as e:
            logger.warning(f"Could not run chown on {path}: {e}")
            return False

        logger.debug(f"Set ownership {owner} on {path}")
        return True
