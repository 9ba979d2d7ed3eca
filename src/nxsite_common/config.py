"""Central configuration for nxsite tools."""

from __future__ import annotations

import os
import shlex
from pathlib import Path

from pydantic import BaseModel, Field

from nxsite_common.constants import (
    DEFAULT_FULLCHAIN_PATH,
    DEFAULT_PRIVKEY_PATH,
    LOG_DIR,
    NGINX_CONF_DIR,
    NGINX_RELOAD_COMMAND,
    NGINX_TEST_COMMAND,
)


def _env_command(name: str, default: tuple[str, ...]) -> list[str]:
    env = os.environ.get(name)
    if env:
        return shlex.split(env)
    return list(default)


def _default_log_dir() -> Path:
    env = os.environ.get("NXSITE_LOG_DIR")
    return Path(env) if env else LOG_DIR


class NxsiteConfig(BaseModel):
    """Runtime configuration resolved once at startup."""

    config_dir: Path = Field(
        default_factory=lambda: Path(os.environ.get("NXSITE_CONFIG_DIR", str(NGINX_CONF_DIR)))
    )
    test_command: list[str] = Field(
        default_factory=lambda: _env_command("NXSITE_TEST_COMMAND", NGINX_TEST_COMMAND)
    )
    reload_command: list[str] = Field(
        default_factory=lambda: _env_command("NXSITE_RELOAD_COMMAND", NGINX_RELOAD_COMMAND)
    )
    default_fullchain_path: str = DEFAULT_FULLCHAIN_PATH
    default_privkey_path: str = DEFAULT_PRIVKEY_PATH
    log_dir: Path = Field(default_factory=_default_log_dir)
    audit_jsonl_path: Path | None = None
    audit_db_path: Path | None = None

    def model_post_init(self, _context: object) -> None:
        if self.audit_jsonl_path is None:
            self.audit_jsonl_path = self.log_dir / "audit.jsonl"
        if self.audit_db_path is None:
            self.audit_db_path = self.log_dir / "audit.db"

    def with_config_dir(self, config_dir: Path | None) -> NxsiteConfig:
        """Return a copy pointing at *config_dir* (or self when None)."""
        if config_dir is None:
            return self
        return self.model_copy(update={"config_dir": config_dir})
