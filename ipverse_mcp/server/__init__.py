"""MCP adapter for the ASN lookup service."""

from ipverse_mcp.server.app import ASNSubnetTools, MirrorLifecycle, create_server

__all__ = ["ASNSubnetTools", "MirrorLifecycle", "create_server"]
