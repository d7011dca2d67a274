from .loader import load_config
from .models import (
    IpverseConfig,
    ServerConfig,
    UpstreamConfig,
)

__all__ = [
    "IpverseConfig",
    "ServerConfig",
    "UpstreamConfig",
    "load_config",
]
