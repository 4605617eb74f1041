from .repo import Repository
from .commits import Commit
from .checkout import CheckoutResult
from .merge import MergeResult
from .diff import DiffReport, FileDiff, FileStatus
from .index import StageResult
from .refs import SymbolicHead, DetachedHead, ReflogEntry
from .storage import DiskStorage, MemoryStorage
from .exceptions import (
    MinigitError,
    NothingToCommitError,
    NoCommitsYetError,
    BranchNotFoundError,
    CommitNotFoundError,
    InvalidCommitError,
    ObjectNotFoundError,
    CorruptHistoryError,
)

__all__ = [
    "Repository", "Commit", "CheckoutResult", "MergeResult",
    "DiffReport", "FileDiff", "FileStatus", "StageResult",
    "SymbolicHead", "DetachedHead", "ReflogEntry",
    "DiskStorage", "MemoryStorage",
    "MinigitError", "NothingToCommitError", "NoCommitsYetError",
    "BranchNotFoundError", "CommitNotFoundError", "InvalidCommitError",
    "ObjectNotFoundError", "CorruptHistoryError",
]
