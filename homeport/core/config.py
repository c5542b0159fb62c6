"""homeport runtime configuration and settings."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_ROOT = "/opt/homeport"
DEFAULT_REPO_URL = "https://github.com/getumbrel/umbrel-apps.git"


@dataclass
class HomeportConfig:
    """Runtime configuration for catalog operations.

    Attributes:
        root: Platform root directory holding ``db/`` and ``repos/``
        git_timeout: Timeout in seconds for clone, pull and fetch (default: 30)
        service_uid: Owner uid applied to mirrors after an update (default: 1000)
        service_gid: Owner gid applied to mirrors after an update (default: 1000)
        default_repo_url: Catalog used when no URL has been persisted
    """

    root: Path = Path(DEFAULT_ROOT)
    git_timeout: int = 30
    service_uid: int = 1000
    service_gid: int = 1000
    default_repo_url: str = DEFAULT_REPO_URL

    @property
    def config_file(self) -> Path:
        """Persisted user record holding the active catalog URL."""
        return self.root / "db" / "user.json"

    @property
    def repos_dir(self) -> Path:
        return self.root / "repos"

    @classmethod
    def from_env(cls) -> "HomeportConfig":
        """Create config from environment variables.

        Environment variables:
            HOMEPORT_ROOT: Platform root directory
            HOMEPORT_GIT_TIMEOUT: Network git operation timeout in seconds
            HOMEPORT_SERVICE_UID: Owner uid for mirrors
            HOMEPORT_SERVICE_GID: Owner gid for mirrors
            HOMEPORT_DEFAULT_REPO: Fallback catalog URL

        Returns:
            HomeportConfig instance with values from environment or defaults
        """
        return cls(
            root=Path(os.getenv("HOMEPORT_ROOT", DEFAULT_ROOT)),
            git_timeout=int(os.getenv("HOMEPORT_GIT_TIMEOUT", cls.git_timeout)),
            service_uid=int(os.getenv("HOMEPORT_SERVICE_UID", cls.service_uid)),
            service_gid=int(os.getenv("HOMEPORT_SERVICE_GID", cls.service_gid)),
            default_repo_url=os.getenv("HOMEPORT_DEFAULT_REPO") or DEFAULT_REPO_URL,
        )


# Global config instance (can be overridden)
_config: Optional[HomeportConfig] = None


def get_config() -> HomeportConfig:
    """Get the global homeport configuration.

    Returns:
        HomeportConfig instance (creates from environment if not set)
    """
    global _config
    if _config is None:
        _config = HomeportConfig.from_env()
    return _config


def set_config(config: Optional[HomeportConfig]):
    """Set the global homeport configuration.

    Args:
        config: HomeportConfig instance to use globally, or None to reload
            from the environment on next access
    """
    global _config
    _config = config


def is_mock() -> bool:
    """Return True when git and ownership calls should only be logged."""
    return os.environ.get("HOMEPORT_MOCK") == "1"
