"""Create / enable / disable flows for one site.

Nothing here is rolled back. A site file that fails validation stays on
disk, a link whose follow-up config test fails stays in place, and a link
removed before a failed config test stays removed. Each external command
runs at most once per step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from rich.console import Console

from nxsite_common import SiteKind, SiteRecord
from nxsite.errors import (
    ArtifactAlreadyExistsError,
    ArtifactNotFoundError,
    LinkConflictError,
    LinkNotFoundError,
    ValidationFailedError,
)
from nxsite.services import validator, vhost_renderer
from nxsite.services.nginx import NginxGateway
from nxsite.services.sources import ParameterSource
from nxsite.services.store import LinkState, SiteStore

log = logging.getLogger(__name__)


class CreateStatus(str, Enum):
    ACTIVATED = "activated"
    WRITTEN = "written"
    ABORTED = "aborted"


class EnableStatus(str, Enum):
    ENABLED = "enabled"
    RELOADED = "reloaded"
    SKIPPED = "skipped"


@dataclass
class CreateResult:
    status: CreateStatus
    site: SiteRecord | None = None
    path: Path | None = None


class SiteLifecycle:
    """Drives a site from parameters to a reloaded nginx."""

    def __init__(self, store: SiteStore, gateway: NginxGateway, console: Console | None = None):
        self.store = store
        self.gateway = gateway
        self.console = console or Console()

    # ------------------------------------------------------------------
    # create
    # ------------------------------------------------------------------

    def create(self, source: ParameterSource) -> CreateResult:
        """Assemble, validate, render and write a site, then enable it.

        Raises ValidationFailedError *after* writing the file when the
        parameters do not validate; enable, test and reload are skipped.
        """
        self.store.ensure_config_dir()

        site_name = source.site_name()
        host = SiteRecord(site_name=site_name).site_host_name
        if not validator.is_safe_host_name(host):
            violations = [
                v for v in validator.validate_site(SiteRecord(site_name=site_name)) if v.field == "site_name"
            ]
            raise ValidationFailedError(violations, None)

        path = self.store.available_path(host)
        if self.store.exists(host):
            if not source.interactive:
                raise ArtifactAlreadyExistsError(
                    f"Configuration file {path} already exists. "
                    "Remove it or choose a different site name."
                )
            if not source.confirm(f"Configuration file {path} already exists. Do you want to reconfigure it?"):
                self.console.print("Operation canceled. No changes made.")
                return CreateResult(CreateStatus.ABORTED, path=path)

        site = self._assemble(source, site_name)
        for warning in validator.upstream_warnings(site):
            self.console.print(f"[yellow]Warning:[/yellow] {warning}")

        violations = validator.validate_site(site)
        content = vhost_renderer.render_vhost(site)
        self.store.write(host, content)
        self.console.print(f"Configuration file created: {path}")
        log.info("site %s written to %s (%d violations)", host, path, len(violations))

        if violations:
            raise ValidationFailedError(violations, path)

        if source.interactive and not source.confirm("Do you want to enable the site and reload Nginx?"):
            self.console.print(f"Nginx reload skipped. Use [bold]nxsite enable {host}[/bold] to enable the site.")
            return CreateResult(CreateStatus.WRITTEN, site=site, path=path)

        self.enable(host, force=True)
        return CreateResult(CreateStatus.ACTIVATED, site=site, path=path)

    def _assemble(self, source: ParameterSource, site_name: str) -> SiteRecord:
        fields = {"site_name": site_name, "site_kind": source.site_kind()}
        if SiteKind.parse(fields["site_kind"]) is SiteKind.PROXY:
            fields["upstream_host"] = source.upstream_host()
            fields["upstream_port"] = source.upstream_port()
            fields["upstream_protocol"] = source.upstream_protocol()
        fields["fullchain_path"] = source.fullchain_path()
        fields["privkey_path"] = source.privkey_path()
        return SiteRecord(**fields)

    # ------------------------------------------------------------------
    # enable / disable
    # ------------------------------------------------------------------

    def enable(self, host: str, source: ParameterSource | None = None, *, force: bool = False) -> EnableStatus:
        """Link sites-enabled/<host>.conf to its artifact, test, and reload.

        The config test runs before any change. An existing link with the
        right target is never recreated; one with any other target is a
        LinkConflictError and is left alone.
        """
        self.store.ensure_config_dir()
        available = self.store.available_path(host)
        if not self.store.exists(host):
            raise ArtifactNotFoundError(f"Configuration file {available} not found.")

        self.console.print("[bold][1/4][/bold] Testing nginx configuration")
        self.gateway.test_config()

        state = self.store.link_state(host)
        if state is LinkState.CONFLICT:
            link = self.store.enabled_path(host)
            target = self.store.link_target(host)
            found = f"points to {target}" if target is not None else "is not a symbolic link"
            raise LinkConflictError(
                f"{link} {found}, expected {available}. Resolve it manually before enabling."
            )

        if state is LinkState.ENABLED:
            self.console.print(f"[yellow]Warning:[/yellow] Site {host} is already enabled in sites-enabled.")
            if not force and not (
                source is not None
                and source.confirm(f"Site {host} is already enabled. Do you want to reload Nginx?")
            ):
                self.console.print("Nginx reload skipped.")
                return EnableStatus.SKIPPED
            status = EnableStatus.RELOADED
            self.console.print("[bold][2/4][/bold] Link already in place")
        else:
            self.console.print(f"[bold][2/4][/bold] Linking {self.store.enabled_path(host)}")
            self.store.create_link(host)
            self.console.print(f"Site {host} enabled successfully.")
            status = EnableStatus.ENABLED

        self.console.print("[bold][3/4][/bold] Re-testing nginx configuration")
        self.gateway.test_config("Nginx configuration test failed after enabling site. Details:")

        self.console.print("[bold][4/4][/bold] Reloading nginx")
        self.gateway.reload()
        self.console.print("Nginx reloaded successfully.")
        return status

    def disable(self, host: str) -> None:
        """Remove sites-enabled/<host>.conf, then test and reload.

        A dangling link still counts as enabled and is removed.
        """
        self.store.ensure_config_dir()
        if not self.store.is_linked(host):
            raise LinkNotFoundError(
                f"Site {host} is not enabled or the symbolic link does not exist."
            )

        self.console.print(f"[bold][1/3][/bold] Removing {self.store.enabled_path(host)}")
        self.store.remove_link(host)
        self.console.print(f"Site {host} disabled successfully.")

        self.console.print("[bold][2/3][/bold] Testing nginx configuration")
        self.gateway.test_config()

        self.console.print("[bold][3/3][/bold] Reloading nginx")
        self.gateway.reload()
        self.console.print("Nginx reloaded successfully.")
