"""nxsite — nginx virtual host lifecycle CLI."""

__version__ = "0.1.0"
