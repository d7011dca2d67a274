"""CLI entry point for ipverse-mcp."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ipverse_mcp.asn_ip import LookupService, SharedMirror, Upstream, open_mirror
from ipverse_mcp.asn_ip.models import ASN_MAX, ASNInfo, SubnetResponse
from ipverse_mcp.config import IpverseConfig, load_config
from ipverse_mcp.config.loader import DEFAULT_CONFIG_TEMPLATE
from ipverse_mcp.errors import MirrorError, NotFoundError

app = typer.Typer(
    name="ipverse-mcp",
    help="Mirror the ipverse asn-ip dataset and serve ASN subnet lookups over MCP.",
)

config_app = typer.Typer(help="Manage ipverse-mcp configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: IpverseConfig | None = None

# Sample ASN shown after a sync (Google)
_SAMPLE_ASN = 15169

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def _get_config() -> IpverseConfig:
    if _config is None:
        return load_config()
    return _config


class _JsonFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _setup_logging(cfg: IpverseConfig) -> None:
    """Route logs to stderr; stdout belongs to command output and the stdio transport."""
    if cfg.log_format == "json":
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
    else:
        handler = RichHandler(console=Console(stderr=True), show_path=False)
    logging.basicConfig(
        level=_LOG_LEVELS[cfg.log_level],
        format="%(message)s" if cfg.log_format == "text" else None,
        handlers=[handler],
        force=True,
    )


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to ipverse.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    _setup_logging(_config)


def _upstream(cfg: IpverseConfig) -> Upstream:
    try:
        return Upstream.from_config(cfg.upstream)
    except MirrorError as e:
        rprint(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


def _open_mirror(cfg: IpverseConfig) -> SharedMirror:
    return open_mirror(_upstream(cfg))


def _display_info(info: ASNInfo, asn: int) -> None:
    table = Table(title=escape(f"AS{asn} {info.handle} ({info.description})"))
    table.add_column("Family", style="cyan")
    table.add_column("Prefix", style="green")
    for net in info.subnets.ipv4:
        table.add_row("ipv4", net)
    for net in info.subnets.ipv6:
        table.add_row("ipv6", net)
    rprint(table)
    rprint(
        f"[dim]{len(info.subnets.ipv4)} IPv4, {len(info.subnets.ipv6)} IPv6 prefixes[/dim]"
    )


@app.command()
def sync() -> None:
    """Provision the local mirror and pull upstream changes."""
    cfg = _get_config()
    mirror = _open_mirror(cfg)

    try:
        state = mirror.provision()
        rprint(
            f"[bold]{'Cloned' if state.cloned else 'Mirror'}[/bold] {escape(str(state.path))} "
            f"[dim]({state.head[:12]})[/dim]"
        )
        changed = mirror.update()
    except MirrorError as e:
        rprint(f"[red]{type(e).__name__}:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if changed:
        rprint(f"[green]Changed files ({len(changed)}):[/green]")
        for path in changed:
            rprint(f"  {escape(str(path))}")
    else:
        rprint("[dim]Already up to date.[/dim]")

    sample = mirror.upstream.get_asn_file_path(_SAMPLE_ASN)
    rprint(f"ASN {_SAMPLE_ASN} data file path: {sample}")


@app.command()
def lookup(
    asn: int = typer.Argument(..., min=0, max=ASN_MAX, help="Autonomous system number"),
    as_json: bool = typer.Option(False, "--json", help="Print the tool response as JSON"),
) -> None:
    """Look up the subnets announced by an ASN."""
    cfg = _get_config()
    service = LookupService(_open_mirror(cfg))

    try:
        info = service.read_info(asn)
    except NotFoundError:
        rprint(f"[red]Not found:[/red] no data for ASN {asn}. Run `ipverse-mcp sync` first?")
        raise typer.Exit(1)
    except MirrorError as e:
        rprint(f"[red]{type(e).__name__}:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    if as_json:
        response = SubnetResponse(asn=asn, subnets=info.subnets)
        typer.echo(response.model_dump_json(indent=2))
        return
    _display_info(info, asn)


@app.command()
def path(
    asn: int = typer.Argument(..., min=0, max=ASN_MAX, help="Autonomous system number"),
) -> None:
    """Print where an ASN's data file lives in the mirror."""
    cfg = _get_config()
    typer.echo(str(_upstream(cfg).get_asn_file_path(asn)))


@app.command()
def serve(
    transport: str | None = typer.Option(
        None, "--transport", "-t", help="stdio | sse | streamable-http (default from config)"
    ),
) -> None:
    """Run the MCP server."""
    from ipverse_mcp.server import create_server

    cfg = _get_config()
    server_cfg = cfg.server
    if transport is not None:
        if transport not in ("stdio", "sse", "streamable-http"):
            rprint(f"[red]Error:[/red] unknown transport {transport!r}")
            raise typer.Exit(1)
        server_cfg = server_cfg.model_copy(update={"transport": transport})

    server = create_server(_open_mirror(cfg), server_cfg)
    server.run(transport=server_cfg.transport)


# ── config subcommands ──────────────────────────────────────────────


@config_app.command("init")
def config_init(
    path: str = typer.Option("ipverse.yaml", "--path", help="Where to write the config"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a default ipverse.yaml."""
    target = Path(path)
    if target.exists() and not force:
        rprint(f"[yellow]{target} already exists[/yellow] (use --force to overwrite)")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Wrote[/green] {target}")


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration."""
    cfg = _get_config()
    typer.echo(cfg.model_dump_json(indent=2))


if __name__ == "__main__":
    app()
