"""Abstract VCS interface used by the mirror manager."""

from abc import ABC, abstractmethod
from pathlib import Path

from ipverse_mcp.vcs.models import DiffEntry


class VCSBackend(ABC):
    """Abstract base class for the version-control capability.

    The mirror manager only needs these operations; implementations wrap
    their own exceptions in the ``ipverse_mcp.errors`` taxonomy.
    """

    @abstractmethod
    def open(self, path: Path) -> bool:
        """Return True if a valid repository exists at *path*."""
        ...

    @abstractmethod
    def clone(self, url: str, path: Path, branch: str) -> None:
        """Clone *url* into *path*, checking out *branch*."""
        ...

    @abstractmethod
    def fetch(self, path: Path, remote: str, branch: str) -> Path:
        """Fetch *branch* from *remote* and return the FETCH_HEAD marker path.

        The marker is not guaranteed to exist afterwards; callers check.
        """
        ...

    @abstractmethod
    def resolve(self, path: Path, ref: str) -> str:
        """Resolve *ref* to a commit sha."""
        ...

    @abstractmethod
    def head(self, path: Path) -> str:
        """Return the sha of the commit HEAD points at."""
        ...

    @abstractmethod
    def diff_trees(self, path: Path, old: str, new: str) -> list[DiffEntry]:
        """List changed entries between the trees of commits *old* and *new*."""
        ...

    @abstractmethod
    def checkout(self, path: Path, commit: str) -> None:
        """Move the current branch to *commit*, overwriting the working tree."""
        ...
