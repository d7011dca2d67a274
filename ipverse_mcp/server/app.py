"""MCP server exposing ASN subnet lookups as a tool."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from ipverse_mcp.asn_ip.lookup import LookupService
from ipverse_mcp.asn_ip.models import ASN_MAX, SubnetResponse
from ipverse_mcp.asn_ip.refresher import MirrorRefresher
from ipverse_mcp.asn_ip.state import SharedMirror
from ipverse_mcp.config.models import ServerConfig
from ipverse_mcp.errors import MirrorError, MirrorIOError, NotFoundError, ParseError

logger = logging.getLogger(__name__)

SERVER_NAME = "ipverse-mcp"
INSTRUCTIONS = (
    "This server answers questions about autonomous systems using a local "
    "mirror of the ipverse asn-ip dataset. Tools: get_asn_subnets (takes an "
    "ASN number, returns its announced IPv4 and IPv6 prefixes)."
)


class ASNSubnetTools:
    """Tool handlers; flattens typed lookup errors into readable messages."""

    def __init__(self, lookup: LookupService) -> None:
        self.lookup = lookup

    async def get_asn_subnets(self, asn: int) -> SubnetResponse:
        try:
            return await self.lookup.alookup(asn)
        except NotFoundError as e:
            raise ToolError(f"ASN {asn} not found in the dataset") from e
        except MirrorIOError as e:
            raise ToolError(f"Failed to read ASN file: {e}") from e
        except ParseError as e:
            raise ToolError(str(e)) from e


async def _prepare_mirror(mirror: SharedMirror, sync: bool) -> None:
    state = await asyncio.to_thread(mirror.provision)
    logger.info("Mirror ready at %s (%s)", state.path, state.head[:12])
    if sync:
        changed = await asyncio.to_thread(mirror.update)
        logger.info("Startup sync changed %d files", len(changed))


class MirrorLifecycle:
    """Process-wide startup sync and background refresh for a server.

    The sse and streamable-http transports enter the server lifespan once per
    client session. The mirror is prepared on the first session only, and the
    refresher runs while at least one session is open.
    """

    def __init__(self, mirror: SharedMirror, config: ServerConfig) -> None:
        self.mirror = mirror
        self.config = config
        self.prepared = False
        self.sessions = 0
        self.refresher: MirrorRefresher | None = None
        self._lock = asyncio.Lock()

    async def enter(self) -> None:
        async with self._lock:
            self.sessions += 1
            if not self.prepared:
                self.prepared = True
                try:
                    await _prepare_mirror(self.mirror, self.config.sync_on_start)
                except MirrorError as e:
                    # Lookups against an existing mirror still work without a sync
                    logger.error("Mirror preparation failed: %s", e)
            if self.config.refresh_interval > 0 and self.refresher is None:
                self.refresher = MirrorRefresher(self.mirror, self.config.refresh_interval)
                self.refresher.start()

    async def exit(self) -> None:
        async with self._lock:
            self.sessions -= 1
            if self.sessions == 0 and self.refresher is not None:
                refresher, self.refresher = self.refresher, None
                await asyncio.to_thread(refresher.stop)


def create_server(mirror: SharedMirror, config: ServerConfig | None = None) -> FastMCP:
    """Build the FastMCP app around a shared mirror."""
    config = config or ServerConfig()
    tools = ASNSubnetTools(LookupService(mirror))
    lifecycle = MirrorLifecycle(mirror, config)

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[None]:
        await lifecycle.enter()
        try:
            yield
        finally:
            await lifecycle.exit()

    server = FastMCP(
        SERVER_NAME,
        instructions=INSTRUCTIONS,
        lifespan=lifespan,
        host=config.host,
        port=config.port,
    )

    @server.tool(
        name="get_asn_subnets",
        description="Get subnet information for a given ASN number",
    )
    async def get_asn_subnets(
        asn: Annotated[int, Field(ge=0, le=ASN_MAX, description="Autonomous system number")],
    ) -> SubnetResponse:
        return await tools.get_asn_subnets(asn)

    return server
