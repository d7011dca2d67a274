"""YAML config loading with env var expansion and IPVERSE_* overrides."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import IpverseConfig

# Environment variables that win over any config file
ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "IPVERSE_STATE_DIR": ("upstream", "state_dir"),
    "IPVERSE_UPSTREAM_URL": ("upstream", "url"),
    "IPVERSE_UPSTREAM_BRANCH": ("upstream", "branch"),
    "IPVERSE_REFRESH_INTERVAL": ("server", "refresh_interval"),
    "IPVERSE_LOG_LEVEL": ("log_level",),
}


def _config_paths(cli_path: str | None) -> list[Path]:
    paths = [Path(cli_path)] if cli_path else []
    paths.append(Path("./ipverse.yaml"))
    try:
        paths.append(Path.home() / ".ipverse" / "config.yaml")
    except RuntimeError:
        # No resolvable home: the user-global file simply does not apply
        pass
    return paths


def load_config(cli_path: str | None = None) -> IpverseConfig:
    """Load config with resolution order: env > CLI > project-local > user-global > defaults.

    Only the first config file found is read. ``IPVERSE_*`` variables from
    :data:`ENV_OVERRIDES` are applied on top of it.
    """
    if cli_path and not Path(cli_path).exists():
        raise ValueError(f"Config file not found: {cli_path}")

    raw: dict = {}
    source = "defaults"
    for path in _config_paths(cli_path):
        if not path.exists():
            continue
        try:
            with open(path) as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
        if loaded is None:
            continue
        if not isinstance(loaded, dict):
            raise ValueError(f"Invalid config in {path}: expected a mapping at the top level")
        raw = _expand_env_vars(loaded)
        source = str(path)
        break

    applied = _apply_env_overrides(raw)
    if applied:
        source = f"{source} (with {', '.join(applied)})"

    try:
        return IpverseConfig(**raw)
    except ValidationError as e:
        raise ValueError(f"Invalid config in {source}: {e}") from e


def _apply_env_overrides(raw: dict) -> list[str]:
    """Write set IPVERSE_* variables into *raw* in place; return their names."""
    applied = []
    for var, keys in ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if not value:
            continue
        section = raw
        for key in keys[:-1]:
            if not isinstance(section.get(key), dict):
                section[key] = {}
            section = section[key]
        section[keys[-1]] = value
        applied.append(var)
    return applied


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `ipverse-mcp config init`
DEFAULT_CONFIG_TEMPLATE = """\
# ipverse.yaml

# Upstream dataset
upstream:
  url: "https://github.com/ipverse/asn-ip"
  branch: "main"
  remote: "origin"
  subdir: "ipverse-mcp/asn-ip"  # relative to the state directory
  # state_dir: "${XDG_STATE_HOME}"  # default: $XDG_STATE_HOME or ~/.local/state
  # IPVERSE_STATE_DIR, IPVERSE_UPSTREAM_URL and IPVERSE_UPSTREAM_BRANCH override these

# MCP server
server:
  transport: "stdio"           # stdio | sse | streamable-http
  host: "127.0.0.1"
  port: 8000
  refresh_interval: 0          # seconds between upstream syncs, 0 disables
  sync_on_start: true

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
