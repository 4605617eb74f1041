"""Staging area: the paths that go into the next commit."""

from __future__ import annotations

import logging
from enum import Enum

from .objects import ObjectStore
from .storage import _normalize_path

logger = logging.getLogger(__name__)

INDEX_FILE = "index"


class StageResult(str, Enum):
    """Outcome of :meth:`StagingArea.stage`: ``STAGED`` or ``ALREADY_STAGED``."""
    STAGED = "staged"
    ALREADY_STAGED = "already staged"

    def __str__(self) -> str:          # noqa: D105
        return self.value


class StagingArea:
    """Set of staged paths, each carrying the fingerprint of its staged bytes.

    The set is persisted to the ``index`` file after every change, one
    ``<fingerprint> <path>`` line per entry.
    """

    def __init__(self, repo_storage, worktree, objects: ObjectStore):
        self._storage = repo_storage
        self._worktree = worktree
        self._objects = objects
        self._entries: dict[str, str] = self._load()

    def __repr__(self) -> str:
        return f"StagingArea(paths={len(self._entries)})"

    def _load(self) -> dict[str, str]:
        try:
            text = self._storage.read(INDEX_FILE).decode("utf-8")
        except FileNotFoundError:
            return {}
        entries = {}
        for line in text.split("\n"):
            if not line:
                continue
            fp, _, path = line.partition(" ")
            entries[path] = fp
        return entries

    def _save(self) -> None:
        lines = [f"{fp} {path}\n" for path, fp in sorted(self._entries.items())]
        self._storage.write(INDEX_FILE, "".join(lines).encode("utf-8"))

    def stage(self, path: str) -> StageResult:
        """Store the current bytes of *path* and mark it for the next commit.

        Staging a path twice refreshes its fingerprint and reports
        ``ALREADY_STAGED``; with unchanged bytes nothing is written.

        Raises:
            FileNotFoundError: If *path* does not exist in the work tree.
        """
        path = _normalize_path(path)
        data = self._worktree.read(path)
        fp = self._objects.put(data)
        previous = self._entries.get(path)
        if previous == fp:
            return StageResult.ALREADY_STAGED
        self._entries[path] = fp
        self._save()
        if previous is not None:
            logger.info("Refreshed staged %s", path)
            return StageResult.ALREADY_STAGED
        logger.info("Staged %s", path)
        return StageResult.STAGED

    def unstage(self, path: str) -> None:
        path = _normalize_path(path)
        if path not in self._entries:
            raise KeyError(path)
        del self._entries[path]
        self._save()

    def clear(self) -> None:
        self._entries.clear()
        self._save()

    def snapshot(self) -> tuple[tuple[str, str], ...]:
        """Return ``(path, fingerprint)`` pairs ordered by path."""
        return tuple(sorted(self._entries.items()))

    def paths(self) -> list[str]:
        return sorted(self._entries)

    def __contains__(self, path: str) -> bool:
        return path in self._entries

    def __len__(self) -> int:
        return len(self._entries)
