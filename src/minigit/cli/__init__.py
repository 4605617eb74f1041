"""minigit CLI: track, branch, merge, and diff snapshots of a work tree."""

from ._helpers import main  # noqa: F401  entry point

# Import command modules to register Click commands with the main group.
from . import _basic, _refs, _merge  # noqa: F401
