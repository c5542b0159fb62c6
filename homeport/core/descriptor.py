"""Parse ``owner/name#branch`` style catalog descriptors."""
import re
from dataclasses import dataclass
from typing import Optional

from homeport.core.errors import UsageError

DEFAULT_HOST = "https://github.com/"
GIT_SUFFIX = ".git"

# scheme://... or user@host:...
_QUALIFIED = re.compile(r"^(?:[A-Za-z][A-Za-z0-9+.-]*://|[^@/\s:]+@[^:/\s]+:)")


@dataclass(frozen=True)
class BranchDescriptor:
    """Canonical catalog URL plus an optional branch to check out."""

    url: str
    branch: Optional[str] = None


def parse_descriptor(descriptor: str) -> BranchDescriptor:
    """Normalize a user-supplied catalog token.

    ``owner/app`` becomes ``https://github.com/owner/app.git``; a trailing
    ``#name`` selects a branch. Full URLs and ``git@host:path`` references
    are kept as given apart from the ``.git`` suffix.

    Raises:
        UsageError: If descriptor is empty
    """
    token = (descriptor or "").strip()
    if not token:
        raise UsageError("A repository descriptor is required")

    if not _QUALIFIED.match(token):
        token = DEFAULT_HOST + token

    reference, _, branch = token.rpartition("#") if "#" in token else (token, "", "")

    if not reference.endswith(GIT_SUFFIX):
        reference += GIT_SUFFIX

    return BranchDescriptor(url=reference, branch=branch or None)
