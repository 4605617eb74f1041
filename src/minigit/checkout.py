"""Restore the work tree to a recorded commit snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .commits import CommitGraph
from .exceptions import BranchNotFoundError, CommitNotFoundError
from .objects import ObjectStore
from .refs import DetachedHead, RefManager, SymbolicHead

logger = logging.getLogger(__name__)


@dataclass
class CheckoutResult:
    """Outcome of a checkout.

    Attributes:
        target: The branch name or commit hash that was checked out.
        commit_hash: The commit now at HEAD.
        detached: True when HEAD is no longer on a branch.
        restored: Paths overwritten from the snapshot.
        skipped: Paths whose record carries no fingerprint.
    """
    target: str
    commit_hash: str
    detached: bool = False
    restored: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


class CheckoutEngine:
    """Overwrites work-tree files with the content a commit recorded."""

    def __init__(self, worktree, objects: ObjectStore, commits: CommitGraph, refs: RefManager):
        self._worktree = worktree
        self._objects = objects
        self._commits = commits
        self._refs = refs

    def _resolve_target(self, name: str) -> tuple[str, bool]:
        """Return ``(commit_hash, detached)`` for a branch or commit name."""
        try:
            return self._refs.resolve_ref(name), False
        except BranchNotFoundError:
            try:
                return self._commits.find(name).hash, True
            except CommitNotFoundError:
                raise BranchNotFoundError(name) from None

    def checkout(self, name: str) -> CheckoutResult:
        """Check out branch *name*, or detach HEAD at a commit hash or prefix.

        Every blob is loaded before anything is written, so a missing
        object leaves the work tree untouched.  Local changes to snapshot
        paths are overwritten without warning.

        Raises:
            BranchNotFoundError: If *name* is neither a branch nor a commit.
            CommitNotFoundError: If the branch points at a missing commit.
            ObjectNotFoundError: If a recorded blob is missing.
        """
        commit_hash, detached = self._resolve_target(name)
        commit = self._commits.resolve(commit_hash)

        result = CheckoutResult(target=name, commit_hash=commit.hash, detached=detached)
        contents: list[tuple[str, bytes]] = []
        for path, fp in commit.snapshot:
            if fp is None:
                logger.warning("No recorded content for %s in %s; left as is", path, commit.hash)
                result.skipped.append(path)
                continue
            contents.append((path, self._objects.get(fp)))

        for path, data in contents:
            self._worktree.write(path, data)
            result.restored.append(path)
            logger.info("Restored %s", path)

        if detached:
            self._refs.set_head(DetachedHead(commit.hash))
            logger.info("HEAD detached at %s", commit.hash)
        else:
            self._refs.set_head(SymbolicHead(name))
            logger.info("Switched to branch %s", name)
        return result
