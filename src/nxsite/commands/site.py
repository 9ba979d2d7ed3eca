"""Site create / enable / disable / list / show / history commands."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from nxsite_common import ExitCode, SiteRecord
from nxsite.audit import AuditLog, audit
from nxsite.config import get_config
from nxsite.errors import NxsiteError, ValidationFailedError
from nxsite.services.lifecycle import CreateStatus, SiteLifecycle
from nxsite.services.nginx import NginxGateway
from nxsite.services.sources import PromptSource, SiteOptions, source_for
from nxsite.services.store import LinkState, SiteStore

console = Console()

_CONFIG_DIR_HELP = "Path to Nginx configuration directory"


def _lifecycle(config_dir: Optional[Path]) -> SiteLifecycle:
    cfg = get_config().with_config_dir(config_dir)
    return SiteLifecycle(SiteStore(cfg.config_dir), NginxGateway.from_config(cfg), console=console)


def _fail(exc: NxsiteError) -> typer.Exit:
    console.print(f"[red]Error:[/red] {exc}")
    if isinstance(exc, ValidationFailedError) and exc.path is not None:
        host = exc.path.stem
        console.print(f"Please fix the parameters and use [bold]nxsite enable {host}[/bold] to enable the site.")
    return typer.Exit(int(exc.exit_code))


def create(
    config_dir: Optional[Path] = typer.Option(None, "--config-dir", help=_CONFIG_DIR_HELP),
    site_name: Optional[str] = typer.Option(None, help="Full site name (e.g., www.example.com)"),
    site_type: Optional[str] = typer.Option(None, help="Site type (proxy or local)"),
    upstream_host: Optional[str] = typer.Option(None, help="Upstream hostname or IP for proxy sites"),
    upstream_port: Optional[str] = typer.Option(None, help="Upstream port for proxy sites"),
    proxy_protocol: Optional[str] = typer.Option(None, help="Proxy protocol for proxy sites (http or https)"),
    fullchain_path: Optional[str] = typer.Option(None, help="Path to fullchain certificate file"),
    privkey_path: Optional[str] = typer.Option(None, help="Path to private key file"),
) -> None:
    """Create a site config in sites-available, named after the first label of the site name.

    Missing values are prompted for. When every required flag is given the
    command runs non-interactively: an existing file is an error, and the
    site is enabled and nginx reloaded without asking.
    """
    cfg = get_config()
    options = SiteOptions(
        site_name=site_name,
        site_type=site_type,
        upstream_host=upstream_host,
        upstream_port=upstream_port,
        proxy_protocol=proxy_protocol,
        fullchain_path=fullchain_path,
        privkey_path=privkey_path,
    )
    source = source_for(
        options,
        default_fullchain=cfg.default_fullchain_path,
        default_privkey=cfg.default_privkey_path,
    )

    try:
        with audit("site.create", batch=not source.interactive) as event:
            try:
                result = _lifecycle(config_dir).create(source)
                event.params["status"] = result.status.value
            finally:
                if source.options.site_name:
                    event.target = SiteRecord(site_name=source.options.site_name).site_host_name
    except NxsiteError as exc:
        raise _fail(exc) from exc

    if result.status is CreateStatus.ACTIVATED:
        console.print(f"\n[green bold]Done![/green bold] {result.site.site_name} is live.")


def enable(
    site: str = typer.Argument(help="Site host name (file name without .conf)"),
    config_dir: Optional[Path] = typer.Option(None, "--config-dir", help=_CONFIG_DIR_HELP),
    force: bool = typer.Option(False, "--force", "-f", help="Reload without prompting if already enabled"),
) -> None:
    """Enable a site by linking it from sites-available into sites-enabled."""
    try:
        with audit("site.enable", target=site, force=force) as event:
            status = _lifecycle(config_dir).enable(site, PromptSource(), force=force)
            event.params["status"] = status.value
    except NxsiteError as exc:
        raise _fail(exc) from exc


def disable(
    site: str = typer.Argument(help="Site host name (file name without .conf)"),
    config_dir: Optional[Path] = typer.Option(None, "--config-dir", help=_CONFIG_DIR_HELP),
) -> None:
    """Disable a site by removing its link from sites-enabled."""
    try:
        with audit("site.disable", target=site):
            _lifecycle(config_dir).disable(site)
    except NxsiteError as exc:
        raise _fail(exc) from exc


def list_sites(
    config_dir: Optional[Path] = typer.Option(None, "--config-dir", help=_CONFIG_DIR_HELP),
) -> None:
    """List sites and whether they are enabled."""
    store = SiteStore(get_config().with_config_dir(config_dir).config_dir)
    try:
        store.ensure_config_dir()
    except NxsiteError as exc:
        raise _fail(exc) from exc

    entries = store.list_sites()
    if not entries:
        console.print("No sites found.")
        return

    styles = {LinkState.ENABLED: "green", LinkState.ABSENT: "dim", LinkState.CONFLICT: "red"}
    table = Table(title="Sites")
    table.add_column("Site", style="cyan")
    table.add_column("Available", style="yellow")
    table.add_column("Link")
    for entry in entries:
        style = styles[entry.link]
        table.add_row(
            entry.host,
            "yes" if entry.available else "missing",
            f"[{style}]{entry.link.value}[/{style}]",
        )
    console.print(table)


def show(
    site: str = typer.Argument(help="Site host name to show config for"),
    config_dir: Optional[Path] = typer.Option(None, "--config-dir", help=_CONFIG_DIR_HELP),
) -> None:
    """Display the NGINX config of a site."""
    store = SiteStore(get_config().with_config_dir(config_dir).config_dir)
    try:
        found = store.exists(site)
    except NxsiteError as exc:
        raise _fail(exc) from exc
    if not found:
        console.print(f"[red]No site config found for {site}[/red]")
        raise typer.Exit(int(ExitCode.ARTIFACT_NOT_FOUND))

    syntax = Syntax(store.read(site), "nginx", theme="monokai")
    console.print(syntax)


def history(
    site: Optional[str] = typer.Argument(None, help="Only show events for this site host name"),
    failed: bool = typer.Option(False, "--failed", help="Only show failed operations"),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of events to show"),
) -> None:
    """Show recent create / enable / disable operations from the audit log."""
    events = AuditLog.from_config(get_config()).query(site=site, failed_only=failed, limit=limit)
    if not events:
        console.print("No audit events found.")
        return

    table = Table(title="Site history")
    table.add_column("When", style="dim")
    table.add_column("Actor")
    table.add_column("Action", style="cyan")
    table.add_column("Site", style="yellow")
    table.add_column("Result")
    table.add_column("Exit", justify="right")
    for event in events:
        result = "[green]ok[/green]" if event.result == "success" else "[red]failed[/red]"
        table.add_row(
            event.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            event.actor,
            event.action,
            event.target,
            result,
            str(event.exit_code),
        )
    console.print(table)
