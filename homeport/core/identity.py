"""Map catalog URLs to stable identifiers and mirror paths."""
import re
from pathlib import Path
from typing import Optional

from homeport.core.config import DEFAULT_REPO_URL
from homeport.core.state_store import APP_REPO_KEY, ConfigStore

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9]")


def resolve_active_url(store: ConfigStore, default: Optional[str] = None) -> str:
    """Return the persisted catalog URL, or the default when none is set."""
    value = store.get().get(APP_REPO_KEY)
    if isinstance(value, str) and value.strip():
        return value
    return default or DEFAULT_REPO_URL


def compute_id(url: str) -> str:
    """Replace every non-alphanumeric character of ``url`` with ``-``.

    Distinct URLs that differ only in punctuation map to the same id.
    """
    return _UNSAFE_CHARS.sub("-", url)


def compute_path(repo_id: str, root: Path) -> Path:
    return Path(root) / "repos" / repo_id
