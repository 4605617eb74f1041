"""Content-addressable blob storage."""

from __future__ import annotations

import logging
import re
from typing import Iterator

from dulwich.objects import Blob

from .exceptions import ObjectNotFoundError

logger = logging.getLogger(__name__)

OBJECTS_DIR = "objects"

_FINGERPRINT_RE = re.compile(r"^[0-9a-f]{40}$")


def fingerprint(data: bytes) -> str:
    """Return the 40-char hex git blob SHA of *data*."""
    return Blob.from_string(data).id.decode("ascii")


def is_fingerprint(value: str) -> bool:
    """Return True if *value* looks like a full 40-char hex fingerprint."""
    return bool(_FINGERPRINT_RE.match(value))


class ObjectStore:
    """Blobs keyed by fingerprint, stored once each under ``objects/``."""

    def __init__(self, storage):
        self._storage = storage

    def __repr__(self) -> str:
        return f"ObjectStore({self._storage!r})"

    def _name(self, fp: str) -> str:
        if not is_fingerprint(fp):
            raise ValueError(f"Invalid fingerprint: {fp!r}")
        return f"{OBJECTS_DIR}/{fp}"

    def put(self, data: bytes) -> str:
        """Store *data* if not already present and return its fingerprint."""
        fp = fingerprint(data)
        name = self._name(fp)
        if not self._storage.exists(name):
            self._storage.write(name, data)
            logger.debug("Saved blob %s (%d bytes)", fp, len(data))
        return fp

    def get(self, fp: str) -> bytes:
        """Return the bytes stored under *fp*.

        Raises:
            ObjectNotFoundError: If nothing is stored under *fp*.
        """
        try:
            return self._storage.read(self._name(fp))
        except (FileNotFoundError, ValueError):
            raise ObjectNotFoundError(fp)

    def __contains__(self, fp: str) -> bool:
        return is_fingerprint(fp) and self._storage.exists(self._name(fp))

    def __iter__(self) -> Iterator[str]:
        return iter(self._storage.list(OBJECTS_DIR))

    def __len__(self) -> int:
        return len(self._storage.list(OBJECTS_DIR))
