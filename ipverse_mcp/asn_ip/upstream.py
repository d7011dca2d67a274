"""Local mirror of the ipverse asn-ip repository: provisioning and updates."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from ipverse_mcp.errors import MirrorIOError, RepositoryStateError
from ipverse_mcp.vcs.base import VCSBackend
from ipverse_mcp.vcs.git import GitBackend

if TYPE_CHECKING:
    from ipverse_mcp.config.models import UpstreamConfig

logger = logging.getLogger(__name__)

REPO_URL = "https://github.com/ipverse/asn-ip"
REPO_BRANCH = "main"
REMOTE_NAME = "origin"
ASN_IP_SUBDIR = "ipverse-mcp/asn-ip"


def resolve_state_dir() -> Path:
    """Return the per-user state directory ($XDG_STATE_HOME or ~/.local/state)."""
    xdg = os.environ.get("XDG_STATE_HOME", "")
    if xdg and Path(xdg).is_absolute():
        return Path(xdg)
    try:
        home = Path.home()
    except RuntimeError as e:
        raise MirrorIOError("state_dir", "Home directory not found", e) from e
    return home / ".local" / "state"


@dataclass(frozen=True)
class MirrorState:
    """Snapshot of the provisioned mirror."""

    path: Path
    head: str
    cloned: bool = False


class Upstream:
    """Owns the mirror location and keeps it in sync with the remote.

    All methods block on disk and network I/O. Concurrent callers must go
    through :class:`~ipverse_mcp.asn_ip.state.SharedMirror`, which serializes
    updates against lookups.
    """

    def __init__(
        self,
        repo_path: Path | str | None = None,
        *,
        url: str = REPO_URL,
        branch: str = REPO_BRANCH,
        remote: str = REMOTE_NAME,
        backend: VCSBackend | None = None,
    ) -> None:
        if repo_path is None:
            repo_path = resolve_state_dir() / ASN_IP_SUBDIR
        self._repo_path = Path(repo_path).expanduser().absolute()
        self.url = url
        self.branch = branch
        self.remote = remote
        self._backend = backend or GitBackend()

    @classmethod
    def from_config(cls, config: UpstreamConfig, backend: VCSBackend | None = None) -> Upstream:
        state_dir = Path(config.state_dir).expanduser() if config.state_dir else resolve_state_dir()
        return cls(
            state_dir / config.subdir,
            url=config.url,
            branch=config.branch,
            remote=config.remote,
            backend=backend,
        )

    @property
    def repo_path(self) -> Path:
        """Absolute root of the local mirror."""
        return self._repo_path

    def provision(self) -> MirrorState:
        """Open the mirror, cloning it first if no repository exists yet."""
        if not self._repo_path.exists():
            try:
                self._repo_path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise MirrorIOError(
                    "provision", f"Cannot create {self._repo_path}: {e}", e
                ) from e

        if self._backend.open(self._repo_path):
            return MirrorState(self._repo_path, self._backend.head(self._repo_path))

        try:
            occupied = any(self._repo_path.iterdir())
        except OSError as e:
            raise MirrorIOError("provision", f"Cannot list {self._repo_path}: {e}", e) from e
        if occupied:
            raise MirrorIOError(
                "provision",
                f"{self._repo_path} is not empty and is not a git repository",
            )

        logger.info("Cloning %s (%s) into %s", self.url, self.branch, self._repo_path)
        self._backend.clone(self.url, self._repo_path, self.branch)
        return MirrorState(self._repo_path, self._backend.head(self._repo_path), cloned=True)

    def update(self) -> list[Path]:
        """Fetch upstream, apply it, and return the absolute paths that changed.

        An empty list means upstream had nothing new; HEAD is left alone.
        """
        self.provision()
        fetch_head = self._backend.fetch(self._repo_path, self.remote, self.branch)

        if not fetch_head.exists():
            raise RepositoryStateError("update", "expected FETCH_HEAD file not found")
        try:
            fetch_size = fetch_head.stat().st_size
        except OSError as e:
            raise MirrorIOError("update", f"Cannot stat {fetch_head}: {e}", e) from e
        if fetch_size == 0:
            logger.debug("FETCH_HEAD is empty, nothing to apply")
            return []

        incoming = self._backend.resolve(self._repo_path, "FETCH_HEAD")
        current = self._backend.head(self._repo_path)
        if incoming == current:
            logger.debug("Mirror already at %s", current[:12])
            return []

        changed = self._changed_files(current, incoming)
        self._backend.checkout(self._repo_path, incoming)
        logger.info(
            "Mirror updated %s -> %s (%d files changed)",
            current[:12],
            incoming[:12],
            len(changed),
        )
        return changed

    def _changed_files(self, old: str, new: str) -> list[Path]:
        """New-side paths of the tree diff, absolute and deduplicated in diff order."""
        entries = self._backend.diff_trees(self._repo_path, old, new)
        seen: dict[Path, None] = {}
        for entry in entries:
            seen.setdefault(self._repo_path / entry.new_path, None)
        return list(seen)

    def get_asn_file_path(self, asn: int) -> Path:
        """Path of an ASN's aggregated.json file. Does no I/O."""
        return self._repo_path / "as" / str(asn) / "aggregated.json"
