"""Repository: wires the object store, staging, history, and refs together."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

from .checkout import CheckoutEngine, CheckoutResult
from .commits import Commit, CommitGraph
from .diff import DiffEngine, DiffReport
from .index import StageResult, StagingArea
from .merge import MergeEngine, MergeResult
from .objects import ObjectStore
from .refs import DEFAULT_BRANCH, DEFAULT_COMMITTER, Head, RefManager, ReflogEntry
from .storage import DiskStorage, MemoryStorage, _normalize_path

logger = logging.getLogger(__name__)

REPO_DIR = ".minigit"


class Repository:
    """A minigit repository over a work tree.

    *storage* holds the repository data (``HEAD``, ``objects/``,
    ``commits/``, ``refs/``); *worktree* holds the tracked files.  Both
    are :class:`~minigit.storage.DiskStorage` or
    :class:`~minigit.storage.MemoryStorage`.
    """

    def __init__(self, storage, worktree, *, committer: str = DEFAULT_COMMITTER,
                 repo_dir: str = REPO_DIR):
        self.storage = storage
        self.repo_dir = repo_dir
        self.worktree = worktree
        self.objects = ObjectStore(storage)
        self.commits = CommitGraph(storage)
        self.refs = RefManager(storage, self.commits, committer=committer)
        self.staging = StagingArea(storage, worktree, self.objects)
        self._checkout = CheckoutEngine(worktree, self.objects, self.commits, self.refs)
        self._merge = MergeEngine(
            worktree, self.objects, self.commits, self.refs, self.staging, self.commit)
        self._diff = DiffEngine(self.objects, self.commits)

    def __repr__(self) -> str:
        return f"Repository({self.storage!r})"

    @classmethod
    def init(
        cls,
        work_tree: str | os.PathLike[str],
        *,
        branch: str = DEFAULT_BRANCH,
        repo_dir: str = REPO_DIR,
        committer: str = DEFAULT_COMMITTER,
    ) -> Repository:
        """Create a repository in ``<work_tree>/<repo_dir>``.

        Raises:
            FileExistsError: If the repository already exists.
        """
        root = Path(work_tree) / repo_dir
        if (root / "HEAD").exists():
            raise FileExistsError(f"Repository already exists: {root}")
        for sub in ("objects", "commits", "refs"):
            (root / sub).mkdir(parents=True, exist_ok=True)
        repo = cls(DiskStorage(root), DiskStorage(work_tree),
                   committer=committer, repo_dir=repo_dir)
        repo.refs.init_head(branch)
        logger.info("Initialized empty repository in %s", root)
        return repo

    @classmethod
    def open(
        cls,
        work_tree: str | os.PathLike[str],
        *,
        create: bool = False,
        branch: str = DEFAULT_BRANCH,
        repo_dir: str = REPO_DIR,
        committer: str = DEFAULT_COMMITTER,
    ) -> Repository:
        """Open the repository in ``<work_tree>/<repo_dir>``.

        Args:
            work_tree: Directory whose files are tracked.
            create: If True, initialize the repository when it doesn't exist.
                    If False (default), raise FileNotFoundError when missing.
            branch: Initial branch name when creating (default "master").
            repo_dir: Name of the repository directory inside *work_tree*.
            committer: Identity recorded in reflog entries.
        """
        root = Path(work_tree) / repo_dir
        if (root / "HEAD").exists():
            return cls(DiskStorage(root), DiskStorage(work_tree),
                       committer=committer, repo_dir=repo_dir)
        if not create:
            raise FileNotFoundError(f"Repository not found: {root}")
        return cls.init(work_tree, branch=branch, repo_dir=repo_dir, committer=committer)

    @classmethod
    def in_memory(
        cls,
        files: dict[str, bytes] | None = None,
        *,
        branch: str = DEFAULT_BRANCH,
    ) -> Repository:
        """Create a repository whose data and work tree live in dicts."""
        repo = cls(MemoryStorage(), MemoryStorage(files))
        repo.refs.init_head(branch)
        return repo

    # --- operations ---

    def add(self, path: str) -> StageResult:
        """Stage *path*.  Raises FileNotFoundError if it doesn't exist."""
        if _normalize_path(path).split("/")[0] == self.repo_dir:
            raise ValueError(f"Cannot stage repository data: {path}")
        return self.staging.stage(path)

    def commit(self, message: str) -> Commit:
        """Commit the staged paths on top of HEAD and clear the staging set.

        Raises:
            NothingToCommitError: If nothing is staged.
        """
        parent = self.refs.head_commit() or ""
        commit = self.commits.commit(message, self.staging.snapshot(), parent)
        self.refs.advance_current_branch(commit.hash, message=f"commit: {message}")
        self.staging.clear()
        return commit

    def log(self) -> Iterator[Commit]:
        """Walk history from HEAD, newest first.  Empty before the first commit."""
        head = self.refs.head_commit()
        if head is None:
            return iter(())
        return self.commits.walk(head)

    def branch(self, name: str, at: str | None = None) -> str:
        """Create branch *name* at HEAD (or at commit *at*); return its hash."""
        at_hash = self.commits.find(at).hash if at is not None else None
        return self.refs.create_branch(name, at_hash)

    def checkout(self, name: str) -> CheckoutResult:
        return self._checkout.checkout(name)

    def merge(self, branch_name: str) -> MergeResult:
        return self._merge.merge(branch_name)

    def diff(self, hash_a: str, hash_b: str) -> DiffReport:
        return self._diff.diff(hash_a, hash_b)

    def status(self) -> list[str]:
        """Return the staged paths in commit order."""
        return self.staging.paths()

    def reflog(self, branch: str | None = None) -> list[ReflogEntry]:
        """Reflog of *branch* (default: the checked-out branch)."""
        branch = branch or self.refs.current_branch()
        if branch is None:
            raise ValueError("HEAD is detached; name a branch")
        return self.refs.reflog(branch)

    @property
    def head(self) -> Head:
        return self.refs.get_head()
