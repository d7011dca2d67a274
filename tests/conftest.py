"""Shared test fixtures for ipverse-mcp."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from git import Actor, Repo

from ipverse_mcp.asn_ip import LookupService, SharedMirror, Upstream

_AUTHOR = Actor("ipverse tests", "tests@example.com")

GOOGLE = {
    "asn": 15169,
    "handle": "GOOGLE",
    "description": "Google LLC",
    "subnets": {
        "ipv4": ["8.8.4.0/24", "8.8.8.0/24", "34.0.0.0/15"],
        "ipv6": ["2001:4860::/32", "2404:6800::/32"],
    },
}

FORTUM = {
    "asn": 1234,
    "handle": "FORTUM",
    "description": "Fortum",
    "subnets": {
        "ipv4": ["132.171.0.0/16", "137.96.0.0/16", "193.110.32.0/21"],
        "ipv6": ["2405:1800::/32"],
    },
}


def asn_file(asn: int) -> str:
    """Repo-relative path of an ASN record."""
    return f"as/{asn}/aggregated.json"


class UpstreamRepo:
    """A local git repository standing in for the GitHub remote."""

    def __init__(self, path: Path) -> None:
        path.mkdir(parents=True)
        self.path = path
        self.repo = Repo.init(path)

    @property
    def url(self) -> str:
        return str(self.path)

    @property
    def head(self) -> str:
        return self.repo.head.commit.hexsha

    def commit(
        self,
        files: dict[str, dict | str] | None = None,
        remove: list[str] | None = None,
        message: str = "Update dataset",
    ) -> str:
        """Write (or delete) files and commit them. Dicts are written as JSON."""
        files = files or {}
        for rel, content in files.items():
            target = self.path / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, dict):
                content = json.dumps(content, indent=2)
            target.write_text(content)
        if files:
            self.repo.index.add(list(files))
        if remove:
            self.repo.index.remove(remove, working_tree=True)
        commit = self.repo.index.commit(message, author=_AUTHOR, committer=_AUTHOR)
        return commit.hexsha


@pytest.fixture
def upstream_repo(tmp_path):
    repo = UpstreamRepo(tmp_path / "upstream")
    repo.commit(
        {
            "README.md": "# asn-ip\n",
            asn_file(15169): GOOGLE,
            asn_file(1234): FORTUM,
        },
        message="Initial dataset",
    )
    # Independent of the host's init.defaultBranch
    repo.repo.git.branch("-M", "main")
    return repo


@pytest.fixture
def mirror_path(tmp_path):
    return tmp_path / "state" / "ipverse-mcp" / "asn-ip"


@pytest.fixture
def upstream(upstream_repo, mirror_path):
    return Upstream(mirror_path, url=upstream_repo.url)


@pytest.fixture
def synced_mirror(upstream):
    """A SharedMirror that has been cloned from upstream_repo."""
    mirror = SharedMirror(upstream)
    mirror.provision()
    return mirror


@pytest.fixture
def lookup_service(synced_mirror):
    return LookupService(synced_mirror)
