"""Positional line diff between two commit snapshots.

Lines are paired by index, not aligned: this is meant for reading, not
for producing patches.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .commits import CommitGraph
from .exceptions import CommitNotFoundError, InvalidCommitError
from .objects import ObjectStore


class FileStatus(str, Enum):
    """Per-path diff status: ``ADDED``, ``REMOVED``, ``MODIFIED``, ``UNCHANGED``."""
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"

    def __str__(self) -> str:          # noqa: D105
        return self.value


@dataclass
class DiffLine:
    """One emitted line; *kind* is ``"-"`` (from A) or ``"+"`` (from B)."""
    kind: str
    text: str

    def __str__(self) -> str:
        return f"{self.kind} {self.text}"


@dataclass
class FileDiff:
    path: str
    status: FileStatus
    lines: list[DiffLine] = field(default_factory=list)


@dataclass
class DiffReport:
    """Result of :meth:`DiffEngine.diff`, one :class:`FileDiff` per path."""
    hash_a: str
    hash_b: str
    files: list[FileDiff] = field(default_factory=list)

    def _paths(self, status: FileStatus) -> list[str]:
        return [f.path for f in self.files if f.status == status]

    @property
    def added(self) -> list[str]:
        return self._paths(FileStatus.ADDED)

    @property
    def removed(self) -> list[str]:
        return self._paths(FileStatus.REMOVED)

    @property
    def modified(self) -> list[str]:
        return self._paths(FileStatus.MODIFIED)

    @property
    def is_empty(self) -> bool:
        return all(f.status == FileStatus.UNCHANGED for f in self.files)

    def format(self) -> str:
        """Render the report as human-readable text."""
        out = []
        for f in self.files:
            if f.status == FileStatus.UNCHANGED:
                continue
            out.append(f"=== File: {f.path} ===")
            if f.status == FileStatus.REMOVED:
                out.append("- File removed in commit2")
            elif f.status == FileStatus.ADDED:
                out.append("+ File added in commit2")
            else:
                out.extend(str(line) for line in f.lines)
        return "\n".join(out)


def diff_lines(old: str, new: str) -> list[DiffLine]:
    """Compare *old* and *new* line by line at equal indices."""
    a = old.splitlines()
    b = new.splitlines()
    out = []
    common = min(len(a), len(b))
    for i in range(common):
        if a[i] != b[i]:
            out.append(DiffLine("-", a[i]))
            out.append(DiffLine("+", b[i]))
    out.extend(DiffLine("-", line) for line in a[common:])
    out.extend(DiffLine("+", line) for line in b[common:])
    return out


class DiffEngine:
    def __init__(self, objects: ObjectStore, commits: CommitGraph):
        self._objects = objects
        self._commits = commits

    def _text(self, fp: str | None) -> str:
        if fp is None:
            return ""
        return self._objects.get(fp).decode("utf-8", errors="replace")

    def diff(self, hash_a: str, hash_b: str) -> DiffReport:
        """Diff the snapshots of two commits (full hashes or unique prefixes).

        Raises:
            InvalidCommitError: If either side does not resolve.
        """
        try:
            a = self._commits.find(hash_a)
            b = self._commits.find(hash_b)
        except CommitNotFoundError as exc:
            raise InvalidCommitError(*exc.args) from None

        files_a = a.files
        files_b = b.files
        report = DiffReport(hash_a=a.hash, hash_b=b.hash)
        for path in sorted(files_a.keys() | files_b.keys()):
            if path not in files_b:
                report.files.append(FileDiff(path, FileStatus.REMOVED))
            elif path not in files_a:
                report.files.append(FileDiff(path, FileStatus.ADDED))
            elif files_a[path] == files_b[path] and files_a[path] is not None:
                report.files.append(FileDiff(path, FileStatus.UNCHANGED))
            else:
                lines = diff_lines(self._text(files_a[path]), self._text(files_b[path]))
                # Line endings and a missing final newline change the
                # fingerprint but not the line list.
                changed = lines or files_a[path] != files_b[path]
                status = FileStatus.MODIFIED if changed else FileStatus.UNCHANGED
                report.files.append(FileDiff(path, status, lines))
        return report
