"""Read-through lookups of ASN records in the local mirror."""

from __future__ import annotations

import asyncio
import logging

from ipverse_mcp.asn_ip.models import ASNInfo, SubnetResponse
from ipverse_mcp.asn_ip.state import SharedMirror
from ipverse_mcp.errors import MirrorIOError, NotFoundError

logger = logging.getLogger(__name__)


class LookupService:
    """Resolves an ASN to its file, reads it under the mirror's read lock, and parses it."""

    def __init__(self, mirror: SharedMirror) -> None:
        self.mirror = mirror

    def read_info(self, asn: int) -> ASNInfo:
        """Return the full record for *asn*.

        Raises:
            NotFoundError: no file for this ASN.
            MirrorIOError: the file exists but could not be read.
            ParseError: the content is not a valid ASNInfo document.
        """
        with self.mirror.read() as upstream:
            path = upstream.get_asn_file_path(asn)
            try:
                raw = path.read_bytes()
            except FileNotFoundError as e:
                raise NotFoundError(asn, path, e) from e
            except OSError as e:
                raise MirrorIOError("lookup", f"Cannot read {path}: {e}", e) from e
        return ASNInfo.from_json(raw, path)

    def lookup(self, asn: int) -> SubnetResponse:
        """Return the subnets of *asn*, keyed by the requested ASN."""
        info = self.read_info(asn)
        if info.asn != asn:
            logger.debug("ASN file for %d declares asn=%d", asn, info.asn)
        return SubnetResponse(asn=asn, subnets=info.subnets)

    async def alookup(self, asn: int) -> SubnetResponse:
        """Async variant of :meth:`lookup`; the blocking read runs in a worker thread."""
        return await asyncio.to_thread(self.lookup, asn)
