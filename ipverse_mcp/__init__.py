"""ipverse-mcp: local mirror of the ipverse asn-ip dataset with MCP lookups."""

from ipverse_mcp.asn_ip import (
    ASNInfo,
    LookupService,
    MirrorRefresher,
    SharedMirror,
    Subnets,
    Upstream,
    open_mirror,
)
from ipverse_mcp.config import IpverseConfig, load_config
from ipverse_mcp.errors import (
    MirrorError,
    MirrorIOError,
    NotFoundError,
    ParseError,
    RepositoryStateError,
    TransportError,
)

__version__ = "0.1.0"

__all__ = [
    "ASNInfo",
    "IpverseConfig",
    "LookupService",
    "MirrorError",
    "MirrorIOError",
    "MirrorRefresher",
    "NotFoundError",
    "ParseError",
    "RepositoryStateError",
    "SharedMirror",
    "Subnets",
    "TransportError",
    "Upstream",
    "load_config",
    "open_mirror",
]
