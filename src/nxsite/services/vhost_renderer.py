"""Jinja2-based NGINX vhost config renderer."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from nxsite_common import (
    DHPARAM_PATH,
    NGINX_LOG_DIR,
    SSL_CIPHERS,
    SSL_SESSION_TIMEOUT,
    WEB_ROOT,
    SiteKind,
    SiteRecord,
)
from nxsite.errors import TemplateRenderError

_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

_TEMPLATES = {
    SiteKind.PROXY: "proxy.conf.j2",
    SiteKind.LOCAL: "local.conf.j2",
}


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATE_DIR)),
        autoescape=select_autoescape([]),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def template_for(kind: SiteKind | str | None) -> str:
    """Template name for *kind*; anything but proxy renders as a local site."""
    if not isinstance(kind, SiteKind):
        kind = SiteKind.parse(kind)
    return _TEMPLATES.get(kind, _TEMPLATES[SiteKind.LOCAL])


def render_vhost(site: SiteRecord, kind: SiteKind | str | None = None) -> str:
    """Render the full vhost (HTTP redirect + TLS block) for *site*.

    Works on records that fail validation too: missing values are
    interpolated as-is so the file can still be written for later fixing.
    """
    name = template_for(site.site_kind if kind is None else kind)
    try:
        template = _get_env().get_template(name)
        return template.render(
            site=site,
            log_dir=NGINX_LOG_DIR,
            web_root=WEB_ROOT,
            dhparam_path=DHPARAM_PATH,
            ssl_ciphers=SSL_CIPHERS,
            ssl_session_timeout=SSL_SESSION_TIMEOUT,
        )
    except TemplateError as exc:
        raise TemplateRenderError(f"Failed to render template {name}: {exc}") from exc
