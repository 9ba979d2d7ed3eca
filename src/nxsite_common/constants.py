"""Shared constants for the nxsite tools."""

from enum import IntEnum
from pathlib import Path

# NGINX layout (overridable via NxsiteConfig / env vars)
NGINX_CONF_DIR = Path("/etc/nginx")
SITES_AVAILABLE_DIR = "sites-available"
SITES_ENABLED_DIR = "sites-enabled"
SITE_SUFFIX = ".conf"

# External commands
NGINX_TEST_COMMAND = ("nginx", "-t")
NGINX_RELOAD_COMMAND = ("systemctl", "reload", "nginx")

# Certificates
DEFAULT_FULLCHAIN_PATH = "/opt/certs/fullchain.pem"
DEFAULT_PRIVKEY_PATH = "/opt/certs/privkey.pem"

# Template constants
NGINX_LOG_DIR = "/var/log/nginx"
WEB_ROOT = "/var/www"
DHPARAM_PATH = "/etc/nginx/dhparam.pem"
SSL_SESSION_TIMEOUT = "10m"
SSL_CIPHERS = (
    "ECDHE-RSA-AES256-GCM-SHA384:ECDHE-RSA-AES128-GCM-SHA256:"
    "ECDHE-RSA-AES256-SHA384:ECDHE-RSA-AES128-SHA256"
)

# Audit log directory
LOG_DIR = Path("/var/log/nxsite")


class ExitCode(IntEnum):
    """Process exit status, one per failure category."""

    OK = 0
    CONFIG_DIR_MISSING = 1
    ARTIFACT_EXISTS = 2
    TEMPLATE_ERROR = 3
    FILE_WRITE_ERROR = 4
    LINK_UPDATE_FAILED = 5
    TEST_FAILED = 6
    RELOAD_FAILED = 7
    ARTIFACT_NOT_FOUND = 8
    LINK_NOT_FOUND = 9
    LINK_CONFLICT = 10
    VALIDATION_FAILED = 11
