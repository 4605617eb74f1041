"""Merge a branch snapshot into the work tree.

There is no common-ancestor comparison: any path the target branch
records that also exists in the work tree is a conflict.  The local file
is left alone and both versions are written side by side to
``<path>.conflict``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from .commits import Commit, CommitGraph
from .index import StagingArea
from .objects import ObjectStore
from .refs import RefManager

logger = logging.getLogger(__name__)

CONFLICT_SUFFIX = ".conflict"
MARKER_OURS = b"<<<<<<< HEAD\n"
MARKER_SEP = b"\n=======\n"
MARKER_END = b"\n>>>>>>>\n"


def merge_message(branch_name: str) -> str:
    return f"Merged branch: {branch_name}"


def conflict_text(local: bytes, incoming: bytes) -> bytes:
    """Render both versions bracketed by the conflict markers."""
    return MARKER_OURS + local + MARKER_SEP + incoming + MARKER_END


@dataclass
class MergeResult:
    """Outcome of a merge.

    Attributes:
        branch: The merged branch.
        source_hash: The branch's commit that was merged in.
        merged: Paths written cleanly (absent from the work tree before).
        conflicts: Paths that already existed; see ``<path>.conflict``.
        skipped: Paths whose record carries no fingerprint.
        commit: The merge commit.
    """
    branch: str
    source_hash: str
    merged: list[str] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    commit: Commit | None = None

    @property
    def clean(self) -> bool:
        return not self.conflicts

    @property
    def conflict_files(self) -> list[str]:
        return [p + CONFLICT_SUFFIX for p in self.conflicts]


class MergeEngine:
    """Applies a branch's snapshot to the work tree and commits the result.

    *commit* is the repository's normal commit operation; it receives the
    merge message and returns the new commit.
    """

    def __init__(
        self,
        worktree,
        objects: ObjectStore,
        commits: CommitGraph,
        refs: RefManager,
        staging: StagingArea,
        commit: Callable[[str], Commit],
    ):
        self._worktree = worktree
        self._objects = objects
        self._commits = commits
        self._refs = refs
        self._staging = staging
        self._commit = commit

    def merge(self, branch_name: str) -> MergeResult:
        """Merge branch *branch_name* and create the merge commit.

        Raises:
            BranchNotFoundError: If the branch does not exist.
            CommitNotFoundError: If the branch points at a missing commit.
            ObjectNotFoundError: If a recorded blob is missing (nothing is
                written in that case).
        """
        source_hash = self._refs.resolve_ref(branch_name)
        source = self._commits.resolve(source_hash)
        result = MergeResult(branch=branch_name, source_hash=source.hash)

        incoming: list[tuple[str, bytes]] = []
        for path, fp in source.snapshot:
            if fp is None:
                logger.warning("No recorded content for %s in %s; skipped", path, source.hash)
                result.skipped.append(path)
                continue
            incoming.append((path, self._objects.get(fp)))

        for path, data in incoming:
            if self._worktree.exists(path):
                local = self._worktree.read(path)
                self._worktree.write(path + CONFLICT_SUFFIX, conflict_text(local, data))
                result.conflicts.append(path)
                logger.warning("CONFLICT: both modified %s; see %s%s",
                               path, path, CONFLICT_SUFFIX)
            else:
                self._worktree.write(path, data)
                result.merged.append(path)
                logger.info("Merged %s", path)
            self._staging.stage(path)

        result.commit = self._commit(merge_message(branch_name))
        return result
