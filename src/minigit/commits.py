"""Commit records and the append-only history they form."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator

from .exceptions import CommitNotFoundError, CorruptHistoryError, NothingToCommitError
from .objects import fingerprint, is_fingerprint

logger = logging.getLogger(__name__)

COMMITS_DIR = "commits"
MIN_PREFIX = 4


@dataclass(frozen=True)
class Commit:
    """An immutable commit record.

    Attributes:
        hash: 40-char hex fingerprint of the serialized record.
        message: Single-line commit message.
        timestamp: Creation time as POSIX epoch seconds.
        parent_hash: Hash of the previous commit, ``""`` for a root commit.
        snapshot: ``(path, fingerprint)`` pairs ordered by path.  The
            fingerprint is ``None`` for paths read from a record that
            predates per-path fingerprints.
    """

    hash: str
    message: str
    timestamp: int
    parent_hash: str
    snapshot: tuple[tuple[str, str | None], ...]

    @property
    def snapshot_paths(self) -> list[str]:
        return [path for path, _ in self.snapshot]

    @property
    def files(self) -> dict[str, str | None]:
        """Mapping of path to recorded fingerprint."""
        return dict(self.snapshot)

    @property
    def time(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=timezone.utc)

    @property
    def is_root(self) -> bool:
        return not self.parent_hash


def serialize_commit(
    message: str,
    timestamp: int,
    parent_hash: str,
    snapshot: tuple[tuple[str, str | None], ...],
) -> bytes:
    """Render the text record stored under ``commits/<hash>``."""
    lines = [
        f"Message: {message}",
        f"Timestamp: {timestamp}",
        f"Parent: {parent_hash}",
        "Files:",
    ]
    for path, fp in snapshot:
        lines.append(path if fp is None else f"{path} {fp}")
    return ("\n".join(lines) + "\n").encode("utf-8")


def parse_commit(commit_hash: str, data: bytes) -> Commit:
    """Parse a commit record.  Raises ValueError on malformed input."""
    header: dict[str, str] = {}
    snapshot: list[tuple[str, str | None]] = []
    in_files = False
    # Records are "\n"-separated; other line-break characters belong to the text.
    for line in data.decode("utf-8").split("\n"):
        if in_files:
            if not line:
                continue
            path, sep, fp = line.rpartition(" ")
            if sep and is_fingerprint(fp):
                snapshot.append((path, fp))
            else:
                snapshot.append((line, None))
        elif line == "Files:":
            in_files = True
        elif not line:
            continue
        else:
            key, sep, value = line.partition(":")
            if not sep:
                raise ValueError(f"Malformed commit line: {line!r}")
            header[key] = value[1:] if value.startswith(" ") else value
    try:
        return Commit(
            hash=commit_hash,
            message=header["Message"],
            timestamp=int(header["Timestamp"]),
            parent_hash=header["Parent"].strip(),
            snapshot=tuple(sorted(snapshot)),
        )
    except KeyError as exc:
        raise ValueError(f"Commit record missing field {exc.args[0]!r}")


class CommitGraph:
    """Reads and writes commit records under ``commits/``."""

    def __init__(self, storage):
        self._storage = storage

    def __repr__(self) -> str:
        return f"CommitGraph({self._storage!r})"

    def commit(
        self,
        message: str,
        snapshot: tuple[tuple[str, str], ...],
        parent_hash: str = "",
    ) -> Commit:
        """Write a new commit over *snapshot* and return it.

        The timestamp never goes backwards relative to the parent.

        Raises:
            NothingToCommitError: If *snapshot* is empty.
            ValueError: If *message* spans more than one line.
        """
        if not snapshot:
            raise NothingToCommitError("Nothing to commit")
        if "\n" in message or "\r" in message:
            raise ValueError("Commit message must be a single line")
        timestamp = int(time.time())
        if parent_hash:
            timestamp = max(timestamp, self.resolve(parent_hash).timestamp)
        snapshot = tuple(sorted(snapshot))
        record = serialize_commit(message, timestamp, parent_hash, snapshot)
        commit_hash = fingerprint(record)
        name = f"{COMMITS_DIR}/{commit_hash}"
        if not self._storage.exists(name):
            self._storage.write(name, record)
        logger.debug("Wrote commit %s (%d files)", commit_hash, len(snapshot))
        return Commit(commit_hash, message, timestamp, parent_hash, snapshot)

    def resolve(self, commit_hash: str) -> Commit:
        """Return the commit stored under *commit_hash*.

        Raises:
            CommitNotFoundError: If no such commit exists.
        """
        if not is_fingerprint(commit_hash):
            raise CommitNotFoundError(commit_hash)
        try:
            data = self._storage.read(f"{COMMITS_DIR}/{commit_hash}")
        except FileNotFoundError:
            raise CommitNotFoundError(commit_hash)
        return parse_commit(commit_hash, data)

    def exists(self, commit_hash: str) -> bool:
        return is_fingerprint(commit_hash) and self._storage.exists(
            f"{COMMITS_DIR}/{commit_hash}")

    def find(self, prefix: str) -> Commit:
        """Resolve a full hash or a unique abbreviation of at least 4 chars."""
        prefix = prefix.strip().lower()
        if is_fingerprint(prefix):
            return self.resolve(prefix)
        if len(prefix) < MIN_PREFIX:
            raise CommitNotFoundError(prefix)
        matches = [h for h in self if h.startswith(prefix)]
        if len(matches) != 1:
            raise CommitNotFoundError(prefix)
        return self.resolve(matches[0])

    def walk(self, start_hash: str) -> Iterator[Commit]:
        """Yield commits from *start_hash* back to the root.

        Each call returns a fresh generator.

        Raises:
            CommitNotFoundError: If *start_hash* itself does not exist.
            CorruptHistoryError: When a parent link cannot be followed;
                commits reached before it have already been yielded.
        """
        current = self.resolve(start_hash)
        seen = {current.hash}
        while True:
            yield current
            parent = current.parent_hash
            if not parent:
                return
            if parent in seen:
                raise CorruptHistoryError(f"Commit cycle at {parent}")
            try:
                current = self.resolve(parent)
            except (CommitNotFoundError, ValueError) as exc:
                raise CorruptHistoryError(
                    f"Commit {current.hash} references unreadable parent {parent}") from exc
            seen.add(current.hash)

    def __iter__(self) -> Iterator[str]:
        return iter(self._storage.list(COMMITS_DIR))

    def __len__(self) -> int:
        return len(self._storage.list(COMMITS_DIR))
