"""sites-available / sites-enabled filesystem layout.

No locking: writes go through a temp file plus ``os.replace`` and links
through ``os.symlink``, both atomic on one filesystem. Another process can
still change a path between a check here and the following mutation.
"""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from nxsite_common import SITE_SUFFIX, SITES_AVAILABLE_DIR, SITES_ENABLED_DIR
from nxsite.errors import ConfigDirMissingError, FileWriteError, InvalidSiteNameError, LinkUpdateError
from nxsite.services.validator import is_safe_host_name

log = logging.getLogger(__name__)


class LinkState(str, Enum):
    ABSENT = "absent"
    ENABLED = "enabled"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class SiteEntry:
    """One site as seen on disk."""

    host: str
    available: bool
    link: LinkState


def _normalize(path: Path, base: Path) -> str:
    if not path.is_absolute():
        path = base / path
    return os.path.normpath(str(path.absolute()))


class SiteStore:
    """Paths and atomic file operations under an nginx config directory."""

    def __init__(self, config_dir: Path):
        self.config_dir = Path(config_dir)

    @property
    def available_dir(self) -> Path:
        return self.config_dir / SITES_AVAILABLE_DIR

    @property
    def enabled_dir(self) -> Path:
        return self.config_dir / SITES_ENABLED_DIR

    def _site_path(self, directory: Path, host: str) -> Path:
        if not is_safe_host_name(host):
            raise InvalidSiteNameError(f"Invalid site host name {host!r}: must be a single file name.")
        return directory / f"{host}{SITE_SUFFIX}"

    def available_path(self, host: str) -> Path:
        return self._site_path(self.available_dir, host)

    def enabled_path(self, host: str) -> Path:
        return self._site_path(self.enabled_dir, host)

    def ensure_config_dir(self) -> None:
        if not self.config_dir.is_dir():
            raise ConfigDirMissingError(
                f"Configuration directory {self.config_dir} does not exist."
            )

    def exists(self, host: str) -> bool:
        """True when the available artifact for *host* is present."""
        return self.available_path(host).exists()

    def read(self, host: str) -> str:
        return self.available_path(host).read_text()

    def write(self, host: str, content: str) -> Path:
        """Atomically replace the available artifact for *host*."""
        path = self.available_path(host)
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
                encoding="utf-8",
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(content)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise FileWriteError(f"Failed to write config file {path}: {exc}") from exc
        log.debug("wrote %s (%d bytes)", path, len(content))
        return path

    def link_target(self, host: str) -> Path | None:
        """Raw target of the enabled link, or None when no link exists."""
        link = self.enabled_path(host)
        if not link.is_symlink():
            return None
        return Path(os.readlink(link))

    def link_state(self, host: str) -> LinkState:
        """Compare the enabled link's target against the expected artifact."""
        link = self.enabled_path(host)
        if not link.is_symlink():
            if link.exists():
                return LinkState.CONFLICT
            return LinkState.ABSENT
        target = _normalize(Path(os.readlink(link)), link.parent)
        expected = _normalize(self.available_path(host), Path.cwd())
        if target == expected:
            return LinkState.ENABLED
        return LinkState.CONFLICT

    def is_linked(self, host: str) -> bool:
        """True when any symlink sits at the enabled path, dangling or not."""
        return self.enabled_path(host).is_symlink()

    def create_link(self, host: str) -> Path:
        link = self.enabled_path(host)
        target = self.available_path(host).absolute()
        try:
            link.parent.mkdir(parents=True, exist_ok=True)
            os.symlink(target, link)
        except OSError as exc:
            raise LinkUpdateError(f"Failed to create symbolic link {link}: {exc}") from exc
        log.debug("linked %s -> %s", link, target)
        return link

    def remove_link(self, host: str) -> None:
        link = self.enabled_path(host)
        try:
            link.unlink()
        except OSError as exc:
            raise LinkUpdateError(f"Failed to remove symbolic link {link}: {exc}") from exc
        log.debug("unlinked %s", link)

    def list_sites(self) -> list[SiteEntry]:
        """All sites with an artifact or an enabled link, sorted by host."""
        hosts: set[str] = set()
        for directory in (self.available_dir, self.enabled_dir):
            if not directory.is_dir():
                continue
            for entry in directory.iterdir():
                if entry.name.endswith(SITE_SUFFIX) and not entry.name.startswith("."):
                    hosts.add(entry.name[: -len(SITE_SUFFIX)])
        return [
            SiteEntry(host=host, available=self.exists(host), link=self.link_state(host))
            for host in sorted(hosts)
        ]
