"""Site record model."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, field_validator, model_validator


class SiteKind(str, Enum):
    """How a site serves traffic."""

    PROXY = "proxy"
    LOCAL = "local"

    @classmethod
    def parse(cls, value: str | None) -> SiteKind | None:
        """Return the matching kind, or None for anything unrecognized."""
        try:
            return cls(value)
        except ValueError:
            return None


class Violation(BaseModel):
    """A single validation failure, attributed to one record field."""

    field: str
    message: str

    def __str__(self) -> str:
        return self.message


class SiteRecord(BaseModel):
    """Parameters of one virtual host.

    Fields hold the raw operator input so that a record can be rendered and
    persisted even when it does not validate.
    """

    site_name: str = ""
    site_kind: str = ""
    upstream_host: str = ""
    upstream_port: str = ""
    upstream_protocol: str = ""
    fullchain_path: str = ""
    privkey_path: str = ""

    @field_validator("upstream_port", mode="before")
    @classmethod
    def _port_as_text(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @model_validator(mode="after")
    def _drop_upstream_for_local(self) -> SiteRecord:
        if self.kind is SiteKind.LOCAL:
            self.upstream_host = ""
            self.upstream_port = ""
            self.upstream_protocol = ""
        return self

    @property
    def site_host_name(self) -> str:
        """Short identifier: first label of the site name."""
        return self.site_name.split(".", 1)[0]

    @property
    def kind(self) -> SiteKind | None:
        return SiteKind.parse(self.site_kind)
