"""Exceptions raised by catalog repository operations."""


class RepoError(Exception):
    """Base class for every failure surfaced to the operator."""


class UsageError(RepoError):
    """Raised when a required argument is missing or empty."""


class PreconditionFailedError(RepoError):
    """Raised when an operation needs state that does not exist yet."""


class NetworkOrTimeoutError(RepoError):
    """Raised when clone, pull or fetch fails or exceeds its time bound."""


class UnknownBranchError(RepoError):
    """Raised when the requested branch cannot be checked out."""


class GitCommandError(RepoError):
    """Raised when a local git command exits non-zero."""
