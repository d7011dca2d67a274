"""ASN to IP subnet dataset: mirror management, models and lookups."""

from ipverse_mcp.asn_ip.lookup import LookupService
from ipverse_mcp.asn_ip.models import (
    ASNInfo,
    StrictSubnets,
    SubnetRequest,
    SubnetResponse,
    Subnets,
)
from ipverse_mcp.asn_ip.refresher import MirrorRefresher
from ipverse_mcp.asn_ip.state import ReadWriteLock, SharedMirror, open_mirror
from ipverse_mcp.asn_ip.upstream import MirrorState, Upstream, resolve_state_dir

__all__ = [
    "ASNInfo",
    "LookupService",
    "MirrorRefresher",
    "MirrorState",
    "ReadWriteLock",
    "SharedMirror",
    "StrictSubnets",
    "SubnetRequest",
    "SubnetResponse",
    "Subnets",
    "Upstream",
    "open_mirror",
    "resolve_state_dir",
]
