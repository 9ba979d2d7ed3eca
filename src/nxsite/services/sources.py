"""Where site parameters come from: command-line flags, prompts, or both.

The lifecycle asks a source for one value at a time, in the order the
operator would answer them, so a prompt-backed source can stop early (for
example when an overwrite is declined).
"""

from __future__ import annotations

import typer
from pydantic import BaseModel

from nxsite_common import DEFAULT_FULLCHAIN_PATH, DEFAULT_PRIVKEY_PATH, SiteKind


class SiteOptions(BaseModel):
    """Raw values supplied up front, e.g. from CLI flags."""

    site_name: str | None = None
    site_type: str | None = None
    upstream_host: str | None = None
    upstream_port: str | None = None
    proxy_protocol: str | None = None
    fullchain_path: str | None = None
    privkey_path: str | None = None

    def is_batch(self) -> bool:
        """True when every value the site type needs was supplied."""
        if not self.site_name or not self.site_type:
            return False
        if SiteKind.parse(self.site_type.strip().lower()) is SiteKind.PROXY:
            return all(
                (self.upstream_host, self.upstream_port, self.fullchain_path, self.privkey_path)
            )
        return True


class ParameterSource:
    """Supplies site values; missing ones fall back to defaults."""

    interactive = False

    def __init__(
        self,
        options: SiteOptions | None = None,
        *,
        default_fullchain: str = DEFAULT_FULLCHAIN_PATH,
        default_privkey: str = DEFAULT_PRIVKEY_PATH,
    ):
        self.options = options or SiteOptions()
        self.default_fullchain = default_fullchain
        self.default_privkey = default_privkey

    def _ask(self, question: str, default: str) -> str:
        return default

    def _value(self, supplied: str | None, question: str, default: str = "") -> str:
        if supplied:
            return supplied.strip()
        return self._ask(question, default).strip()

    def site_name(self) -> str:
        """Ask once; later calls return the same answer."""
        value = self._value(self.options.site_name, "Enter the full site name (e.g., www.example.com)")
        self.options.site_name = value
        return value

    def site_kind(self) -> str:
        return self._value(self.options.site_type, "Is this a proxy or local site? (proxy/local)").lower()

    def upstream_host(self) -> str:
        return self._value(self.options.upstream_host, "Enter the upstream hostname or IP")

    def upstream_port(self) -> str:
        return self._value(self.options.upstream_port, "Enter the upstream port")

    def upstream_protocol(self) -> str:
        return self._value(
            self.options.proxy_protocol, "Use http or https for proxy_pass? (http/https)", "http"
        ).lower()

    def fullchain_path(self) -> str:
        return self._value(
            self.options.fullchain_path, "Enter the fullchain certificate path", self.default_fullchain
        )

    def privkey_path(self) -> str:
        return self._value(self.options.privkey_path, "Enter the private key path", self.default_privkey)

    def confirm(self, question: str) -> bool:
        return False


class BatchSource(ParameterSource):
    """Flags only: never prompts, declines every confirmation."""


class PromptSource(ParameterSource):
    """Prompts on the terminal for anything the flags did not supply."""

    interactive = True

    def _ask(self, question: str, default: str) -> str:
        return typer.prompt(question, default=default, show_default=bool(default))

    def confirm(self, question: str) -> bool:
        return typer.confirm(question, default=False)


def source_for(options: SiteOptions, **defaults: str) -> ParameterSource:
    """Batch source when *options* are complete, prompting source otherwise."""
    if options.is_batch():
        return BatchSource(options, **defaults)
    return PromptSource(options, **defaults)
