"""Process-wide NxsiteConfig, resolved from NXSITE_* variables on first use."""

from __future__ import annotations

import logging
from functools import lru_cache

from nxsite_common import NxsiteConfig

log = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_config() -> NxsiteConfig:
    """Resolve the config once per process.

    Call ``get_config.cache_clear()`` after changing the environment.
    """
    cfg = NxsiteConfig()
    log.debug(
        "config dir %s; test %r; reload %r; audit log %s",
        cfg.config_dir,
        " ".join(cfg.test_command),
        " ".join(cfg.reload_command),
        cfg.log_dir,
    )
    return cfg
