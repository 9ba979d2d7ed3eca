"""Shared Pydantic models."""

from nxsite_common.models.audit_event import AuditEvent
from nxsite_common.models.site import SiteKind, SiteRecord, Violation

__all__ = ["AuditEvent", "SiteKind", "SiteRecord", "Violation"]
