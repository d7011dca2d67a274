from pydantic import BaseModel, Field
from typing import Literal

from ipverse_mcp.asn_ip.upstream import ASN_IP_SUBDIR, REMOTE_NAME, REPO_BRANCH, REPO_URL


class UpstreamConfig(BaseModel):
    url: str = REPO_URL
    branch: str = REPO_BRANCH
    remote: str = REMOTE_NAME
    subdir: str = ASN_IP_SUBDIR
    state_dir: str | None = None


class ServerConfig(BaseModel):
    transport: Literal["stdio", "sse", "streamable-http"] = "stdio"
    host: str = "127.0.0.1"
    port: int = Field(default=8000, gt=0, lt=65536)
    refresh_interval: int = Field(default=0, ge=0)
    sync_on_start: bool = True


class IpverseConfig(BaseModel):
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
