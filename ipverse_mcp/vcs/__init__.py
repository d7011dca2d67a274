"""Version-control backends for the mirror."""

from ipverse_mcp.vcs.base import VCSBackend
from ipverse_mcp.vcs.git import GitBackend
from ipverse_mcp.vcs.models import DiffEntry

__all__ = [
    "DiffEntry",
    "GitBackend",
    "VCSBackend",
]
