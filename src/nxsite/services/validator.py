"""Site parameter validation.

Every rule is independent: ``validate_site`` collects all violations instead
of stopping at the first one, so the operator sees the full list in one pass.
The only filesystem access is a stat of the two certificate paths.
"""

from __future__ import annotations

import ipaddress
import os
import re
from pathlib import Path

from nxsite_common import SiteKind, SiteRecord, Violation

_DOMAIN_RE = re.compile(r"^[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_WHITESPACE_RE = re.compile(r"\s")

PROTOCOLS = ("http", "https")
PORT_MIN = 1
PORT_MAX = 65535


def is_domain_name(value: str) -> bool:
    """Domain-like: label characters, at least one dot, alphabetic TLD of 2+ chars."""
    return bool(_DOMAIN_RE.match(value))


def has_whitespace(value: str) -> bool:
    return bool(_WHITESPACE_RE.search(value))


def parse_port(value: str) -> int | None:
    """Return the port as an int when it is a decimal in [1, 65535], else None."""
    text = value.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    port = int(text)
    if port < PORT_MIN or port > PORT_MAX:
        return None
    return port


def is_safe_host_name(value: str) -> bool:
    """True when *value* can name a file directly inside sites-available."""
    if value in ("", ".", ".."):
        return False
    separators = {"/", "\x00", os.sep} | ({os.altsep} if os.altsep else set())
    return not any(sep in value for sep in separators)


def is_ip_address(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def _check_file(path: str, field: str, label: str) -> Violation | None:
    if not path:
        return Violation(field=field, message=f"{label} path is empty")
    p = Path(path)
    if not p.exists():
        return Violation(field=field, message=f"{label} file {path} does not exist")
    if p.is_dir():
        return Violation(field=field, message=f"{label} path {path} is not a valid file")
    return None


def validate_site(site: SiteRecord, kind: SiteKind | str | None = None) -> list[Violation]:
    """Return every rule *site* breaks; an empty list means valid."""
    if kind is None:
        kind = site.site_kind
    if not isinstance(kind, SiteKind):
        kind = SiteKind.parse(kind)

    violations: list[Violation] = []

    if not site.site_name:
        violations.append(Violation(field="site_name", message="Site name is empty"))
    elif not is_domain_name(site.site_name):
        violations.append(
            Violation(
                field="site_name",
                message="Invalid site name format (must be a valid domain, e.g., www.example.com)",
            )
        )

    if not site.site_host_name:
        violations.append(
            Violation(
                field="site_name",
                message="Site hostname could not be extracted from site name",
            )
        )
    elif not is_safe_host_name(site.site_host_name):
        violations.append(
            Violation(
                field="site_name",
                message=f"Site hostname {site.site_host_name} contains a path separator",
            )
        )

    if kind is None:
        violations.append(
            Violation(field="site_kind", message="Site type must be 'proxy' or 'local'")
        )

    if kind is SiteKind.PROXY:
        if not site.upstream_host:
            violations.append(
                Violation(field="upstream_host", message="Upstream hostname or IP is empty")
            )
        elif has_whitespace(site.upstream_host):
            violations.append(
                Violation(
                    field="upstream_host",
                    message="Upstream hostname or IP contains invalid characters (spaces)",
                )
            )

        if not site.upstream_port:
            violations.append(Violation(field="upstream_port", message="Upstream port is empty"))
        elif parse_port(site.upstream_port) is None:
            violations.append(
                Violation(
                    field="upstream_port",
                    message=f"Upstream port must be a number between {PORT_MIN} and {PORT_MAX}",
                )
            )

        if site.upstream_protocol not in PROTOCOLS:
            violations.append(
                Violation(field="upstream_protocol", message="Protocol must be 'http' or 'https'")
            )

    for violation in (
        _check_file(site.fullchain_path, "fullchain_path", "Certificate"),
        _check_file(site.privkey_path, "privkey_path", "Private key"),
    ):
        if violation is not None:
            violations.append(violation)

    return violations


def upstream_warnings(site: SiteRecord) -> list[str]:
    """Non-blocking advice about a proxy upstream."""
    if site.kind is not SiteKind.PROXY or not site.upstream_host:
        return []
    if is_ip_address(site.upstream_host):
        return []
    return [
        f"Upstream hostname {site.upstream_host} must be resolvable. "
        "Update /etc/hosts or configure DNS for the site to function properly."
    ]
