"""Branch refs, HEAD, and the per-branch reflog."""

from __future__ import annotations

import io
import logging
import time
from dataclasses import dataclass

from dulwich.protocol import ZERO_SHA
from dulwich.reflog import format_reflog_line, read_reflog

from .commits import CommitGraph
from .exceptions import BranchNotFoundError, CommitNotFoundError, NoCommitsYetError

logger = logging.getLogger(__name__)

HEAD_FILE = "HEAD"
REFS_DIR = "refs"
LOGS_DIR = "logs/refs"
DEFAULT_BRANCH = "master"
DEFAULT_COMMITTER = "minigit <minigit@localhost>"


@dataclass(frozen=True)
class SymbolicHead:
    """HEAD attached to a branch (which may not have a commit yet)."""
    branch: str


@dataclass(frozen=True)
class DetachedHead:
    """HEAD pointing straight at a commit hash."""
    commit_hash: str


Head = SymbolicHead | DetachedHead


@dataclass
class ReflogEntry:
    """A single reflog entry."""
    old_sha: str
    new_sha: str
    committer: str
    timestamp: float
    message: str


def _validate_ref_name(name: str) -> None:
    """Reject empty names, '.', '..', '*.lock', and names with separators or whitespace."""
    if not name or name in (".", ".."):
        raise ValueError(f"Invalid branch name {name!r}")
    for ch, label in (("/", "slash"), ("\\", "backslash"), (":", "colon"),
                      (" ", "space"), ("\t", "tab"), ("\n", "newline")):
        if ch in name:
            raise ValueError(f"Invalid branch name {name!r}: contains {label}")
    if name.endswith(".lock"):
        raise ValueError(f"Invalid branch name {name!r}: ends with .lock")


class RefManager:
    """Branch pointers under ``refs/`` plus the ``HEAD`` file."""

    def __init__(self, storage, commits: CommitGraph, *, committer: str = DEFAULT_COMMITTER):
        self._storage = storage
        self._commits = commits
        self._committer = committer.encode()

    def __repr__(self) -> str:
        return f"RefManager(head={self.get_head()!r})"

    # --- HEAD ---

    def init_head(self, branch: str = DEFAULT_BRANCH) -> None:
        _validate_ref_name(branch)
        self.set_head(SymbolicHead(branch))

    def get_head(self) -> Head:
        try:
            line = self._storage.read(HEAD_FILE).decode("utf-8").strip()
        except FileNotFoundError:
            return SymbolicHead(DEFAULT_BRANCH)
        if not line.startswith("ref:"):
            raise ValueError(f"Malformed HEAD: {line!r}")
        target = line[len("ref:"):].strip()
        if target.startswith(f"{REFS_DIR}/"):
            return SymbolicHead(target[len(REFS_DIR) + 1:])
        return DetachedHead(target)

    def set_head(self, head: Head) -> None:
        if isinstance(head, SymbolicHead):
            line = f"ref: {REFS_DIR}/{head.branch}\n"
        else:
            line = f"ref: {head.commit_hash}\n"
        self._storage.write(HEAD_FILE, line.encode("utf-8"))

    def head_commit(self) -> str | None:
        """Return the commit HEAD points at, or ``None`` before the first commit."""
        head = self.get_head()
        if isinstance(head, DetachedHead):
            return head.commit_hash
        try:
            return self.resolve_ref(head.branch)
        except BranchNotFoundError:
            return None

    def advance_current_branch(self, new_hash: str, *, message: str = "commit") -> None:
        """Move whatever HEAD points at to *new_hash*."""
        head = self.get_head()
        if isinstance(head, DetachedHead):
            self.set_head(DetachedHead(new_hash))
            logger.info("Detached HEAD now at %s", new_hash)
        else:
            self._write_ref(head.branch, new_hash, message)

    # --- branches ---

    def _ref_name(self, name: str) -> str:
        return f"{REFS_DIR}/{name}"

    def _read_ref(self, name: str) -> str | None:
        try:
            return self._storage.read(self._ref_name(name)).decode("utf-8").strip()
        except FileNotFoundError:
            return None

    def _write_ref(self, name: str, commit_hash: str, message: str) -> None:
        old = self._read_ref(name)
        self._storage.write(self._ref_name(name), f"{commit_hash}\n".encode("utf-8"))
        self._append_reflog(name, old, commit_hash, message)
        logger.info("Branch %s -> %s", name, commit_hash)

    def create_branch(self, name: str, at_hash: str | None = None) -> str:
        """Point branch *name* at *at_hash* (default: HEAD's commit).

        An existing branch of the same name is moved.

        Raises:
            NoCommitsYetError: If there is no commit to point at.
            CommitNotFoundError: If *at_hash* does not exist.
        """
        _validate_ref_name(name)
        if at_hash is None:
            at_hash = self.head_commit()
            if at_hash is None:
                raise NoCommitsYetError("No commits to branch from")
        commit = self._commits.resolve(at_hash)
        verb = "set to" if self.branch_exists(name) else "Created from"
        self._write_ref(name, commit.hash, f"branch: {verb} {commit.message}")
        return commit.hash

    def resolve_ref(self, name: str) -> str:
        """Return the commit hash of branch *name*.

        Raises:
            BranchNotFoundError: If the branch has no ref.
            CommitNotFoundError: If the ref points at a missing commit.
        """
        try:
            _validate_ref_name(name)
        except ValueError:
            raise BranchNotFoundError(name) from None
        target = self._read_ref(name)
        if target is None:
            raise BranchNotFoundError(name)
        if not self._commits.exists(target):
            raise CommitNotFoundError(target)
        return target

    def branch_exists(self, name: str) -> bool:
        return name in self.branches()

    def branches(self) -> list[str]:
        return self._storage.list(REFS_DIR)

    def current_branch(self) -> str | None:
        head = self.get_head()
        return head.branch if isinstance(head, SymbolicHead) else None

    def delete_branch(self, name: str) -> None:
        if self.current_branch() == name:
            raise ValueError(f"Cannot delete the checked-out branch {name!r}")
        try:
            _validate_ref_name(name)
            self._storage.remove(self._ref_name(name))
        except (FileNotFoundError, ValueError):
            raise BranchNotFoundError(name)
        logger.info("Deleted branch %s", name)

    # --- reflog ---

    def _append_reflog(self, name: str, old: str | None, new: str, message: str) -> None:
        log_name = f"{LOGS_DIR}/{name}"
        try:
            existing = self._storage.read(log_name)
        except FileNotFoundError:
            existing = b""
        line = format_reflog_line(
            old.encode() if old else ZERO_SHA,
            new.encode(),
            self._committer,
            int(time.time()),
            0,
            message.encode("utf-8"),
        )
        self._storage.write(log_name, existing + line + b"\n")

    def reflog(self, name: str) -> list[ReflogEntry]:
        """Read reflog entries for branch *name*, oldest first.

        Raises:
            BranchNotFoundError: If the branch doesn't exist.
        """
        if not self.branch_exists(name):
            raise BranchNotFoundError(name)
        try:
            data = self._storage.read(f"{LOGS_DIR}/{name}")
        except FileNotFoundError:
            return []
        return [
            ReflogEntry(
                old_sha=entry.old_sha.decode(),
                new_sha=entry.new_sha.decode(),
                committer=entry.committer.decode(),
                timestamp=entry.timestamp,
                message=entry.message.decode("utf-8").rstrip("\n"),
            )
            for entry in read_reflog(io.BytesIO(data))
        ]
