"""File access backends for minigit.

Everything minigit persists, and every working-tree file it reads or
overwrites, goes through one of these two classes.  They expose the same
small interface so the rest of the package can run against a real
directory or a plain dict by changing a single constructor call.
"""

from __future__ import annotations

import os
from pathlib import Path

from dulwich.file import FileLocked, GitFile


def _normalize_path(path: str | os.PathLike[str]) -> str:
    """Normalize a path: strip trailing slashes, reject bad segments."""
    path = os.fspath(path)
    if os.name == "nt":
        path = path.replace("\\", "/")
    if path.startswith("/"):
        raise ValueError(f"Path must be relative: {path!r}")
    path = path.rstrip("/")
    if "\n" in path or "\r" in path:
        raise ValueError(f"Path must not contain line breaks: {path!r}")
    if not path:
        raise ValueError("Path must not be empty")
    segments = path.split("/")
    for seg in segments:
        if not seg:
            raise ValueError(f"Empty segment in path: {path!r}")
        if seg in (".", ".."):
            raise ValueError(f"Invalid path segment: {seg!r}")
    return "/".join(segments)


class DiskStorage:
    """Files under a root directory, addressed by relative ``/`` paths.

    Writes go through dulwich's :class:`~dulwich.file.GitFile`, so a file
    is either fully replaced or left as it was.
    """

    def __init__(self, root: str | os.PathLike[str]):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"DiskStorage({str(self.root)!r})"

    def _full(self, name: str) -> Path:
        return self.root.joinpath(*_normalize_path(name).split("/"))

    def read(self, name: str) -> bytes:
        full = self._full(name)
        if not full.is_file():
            raise FileNotFoundError(name)
        return full.read_bytes()

    def write(self, name: str, data: bytes) -> None:
        full = self._full(name)
        full.parent.mkdir(parents=True, exist_ok=True)
        try:
            with GitFile(str(full), "wb") as f:
                f.write(data)
        except FileLocked:
            raise OSError(f"File is locked by another writer: {name}") from None

    def exists(self, name: str) -> bool:
        return self._full(name).is_file()

    def remove(self, name: str) -> None:
        full = self._full(name)
        if not full.is_file():
            raise FileNotFoundError(name)
        full.unlink()

    def list(self, prefix: str) -> list[str]:
        """Return sorted file names directly under directory *prefix*."""
        full = self._full(prefix)
        if not full.is_dir():
            return []
        return sorted(
            p.name for p in full.iterdir()
            if p.is_file() and not p.name.endswith(".lock")
        )


class MemoryStorage:
    """Dict-backed storage with the same interface as :class:`DiskStorage`."""

    def __init__(self, files: dict[str, bytes] | None = None):
        self.files: dict[str, bytes] = {}
        for name, data in (files or {}).items():
            self.write(name, data)

    def __repr__(self) -> str:
        return f"MemoryStorage(files={len(self.files)})"

    def read(self, name: str) -> bytes:
        try:
            return self.files[_normalize_path(name)]
        except KeyError:
            raise FileNotFoundError(name)

    def write(self, name: str, data: bytes) -> None:
        self.files[_normalize_path(name)] = bytes(data)

    def exists(self, name: str) -> bool:
        return _normalize_path(name) in self.files

    def remove(self, name: str) -> None:
        try:
            del self.files[_normalize_path(name)]
        except KeyError:
            raise FileNotFoundError(name)

    def list(self, prefix: str) -> list[str]:
        """Return sorted file names directly under directory *prefix*."""
        head = _normalize_path(prefix) + "/"
        return sorted(
            name[len(head):] for name in self.files
            if name.startswith(head) and "/" not in name[len(head):]
        )
