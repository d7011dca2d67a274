"""Git backend using GitPython.

GitPython shells out to the ``git`` binary, so every call here blocks.
Run them from a worker thread when an event loop is involved.
"""

from __future__ import annotations

import logging
from pathlib import Path

from git import Repo
from git.exc import (
    BadName,
    BadObject,
    GitError,
    InvalidGitRepositoryError,
    NoSuchPathError,
)

from ipverse_mcp.errors import MirrorIOError, RepositoryStateError, TransportError
from ipverse_mcp.vcs.base import VCSBackend
from ipverse_mcp.vcs.models import DiffEntry

logger = logging.getLogger(__name__)


class GitBackend(VCSBackend):
    """GitPython implementation of VCSBackend."""

    def _repo(self, path: Path) -> Repo:
        try:
            return Repo(path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise RepositoryStateError(
                "open", f"No git repository at {path}", e
            ) from e

    def open(self, path: Path) -> bool:
        try:
            Repo(path)
        except (InvalidGitRepositoryError, NoSuchPathError):
            return False
        return True

    def clone(self, url: str, path: Path, branch: str) -> None:
        logger.debug("git clone %s (%s) -> %s", url, branch, path)
        try:
            Repo.clone_from(url, path, branch=branch)
        except OSError as e:
            raise MirrorIOError("clone", f"Failed to clone into {path}: {e}", e) from e
        except GitError as e:
            raise TransportError("clone", f"Failed to clone {url}: {e}", e) from e

    def fetch(self, path: Path, remote: str, branch: str) -> Path:
        repo = self._repo(path)
        logger.debug("git fetch %s %s in %s", remote, branch, path)
        try:
            repo.git.fetch(remote, branch)
        except GitError as e:
            raise TransportError(
                "fetch", f"Failed to fetch {branch} from {remote}: {e}", e
            ) from e
        return Path(repo.git_dir) / "FETCH_HEAD"

    def resolve(self, path: Path, ref: str) -> str:
        repo = self._repo(path)
        try:
            return repo.commit(ref).hexsha
        except (BadName, BadObject, ValueError, GitError) as e:
            raise RepositoryStateError("resolve", f"Cannot resolve {ref}: {e}", e) from e

    def head(self, path: Path) -> str:
        repo = self._repo(path)
        try:
            return repo.head.commit.hexsha
        except (ValueError, GitError) as e:
            raise RepositoryStateError("head", f"HEAD is not a commit in {path}", e) from e

    def diff_trees(self, path: Path, old: str, new: str) -> list[DiffEntry]:
        repo = self._repo(path)
        try:
            # Renames show up as a delete plus an add, so both paths are reported
            diff_index = repo.commit(old).diff(repo.commit(new), no_renames=True)
        except (BadName, BadObject, ValueError, GitError) as e:
            raise RepositoryStateError(
                "diff", f"Failed to diff {old[:12]}..{new[:12]}: {e}", e
            ) from e

        entries: list[DiffEntry] = []
        for item in diff_index:
            new_path = item.b_path or item.a_path
            if not new_path:
                continue
            entries.append(
                DiffEntry(
                    status=item.change_type or "M",
                    old_path=item.a_path,
                    new_path=new_path,
                )
            )
        return entries

    def checkout(self, path: Path, commit: str) -> None:
        repo = self._repo(path)
        try:
            # Hard reset also clears any leftover MERGE_HEAD from an earlier failure
            repo.head.reset(commit, index=True, working_tree=True)
        except OSError as e:
            raise MirrorIOError("checkout", f"Failed to write working tree: {e}", e) from e
        except GitError as e:
            raise RepositoryStateError(
                "checkout", f"Failed to check out {commit[:12]}: {e}", e
            ) from e
