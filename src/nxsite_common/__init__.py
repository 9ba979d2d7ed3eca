"""nxsite common — shared models and constants for the nxsite tools."""

from nxsite_common.config import NxsiteConfig
from nxsite_common.constants import (
    DEFAULT_FULLCHAIN_PATH,
    DEFAULT_PRIVKEY_PATH,
    DHPARAM_PATH,
    LOG_DIR,
    NGINX_CONF_DIR,
    NGINX_LOG_DIR,
    SITE_SUFFIX,
    SITES_AVAILABLE_DIR,
    SITES_ENABLED_DIR,
    SSL_CIPHERS,
    SSL_SESSION_TIMEOUT,
    WEB_ROOT,
    ExitCode,
)
from nxsite_common.models.audit_event import AuditEvent
from nxsite_common.models.site import SiteKind, SiteRecord, Violation

__all__ = [
    "AuditEvent",
    "DEFAULT_FULLCHAIN_PATH",
    "DEFAULT_PRIVKEY_PATH",
    "DHPARAM_PATH",
    "ExitCode",
    "LOG_DIR",
    "NGINX_CONF_DIR",
    "NGINX_LOG_DIR",
    "NxsiteConfig",
    "SITE_SUFFIX",
    "SITES_AVAILABLE_DIR",
    "SITES_ENABLED_DIR",
    "SSL_CIPHERS",
    "SSL_SESSION_TIMEOUT",
    "SiteKind",
    "SiteRecord",
    "Violation",
    "WEB_ROOT",
]
