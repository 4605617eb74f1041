"""Exceptions for minigit."""


class MinigitError(Exception):
    """Base class for all minigit errors."""


class NothingToCommitError(MinigitError, ValueError):
    """Raised when a commit is attempted with an empty staging set."""


class NoCommitsYetError(MinigitError, ValueError):
    """Raised when a branch is created before any commit exists."""


class BranchNotFoundError(MinigitError, KeyError):
    """Raised when a branch name has no ref."""

    def __str__(self) -> str:
        return f"Branch not found: {self.args[0]}" if self.args else "Branch not found"


class CommitNotFoundError(MinigitError, KeyError):
    """Raised when a commit hash (or prefix) does not resolve."""

    def __str__(self) -> str:
        return f"Commit not found: {self.args[0]}" if self.args else "Commit not found"


class InvalidCommitError(CommitNotFoundError):
    """Raised by diff when either side does not name a commit."""

    def __str__(self) -> str:
        return f"Invalid commit: {self.args[0]}" if self.args else "Invalid commit"


class ObjectNotFoundError(MinigitError, KeyError):
    """Raised when a fingerprint has no stored blob."""

    def __str__(self) -> str:
        return f"Object not found: {self.args[0]}" if self.args else "Object not found"


class CorruptHistoryError(MinigitError):
    """Raised when the commit chain references a commit that cannot be read.

    The traversal that hit it stops; nothing is retried.
    """
