"""Audit records for shellgate decisions.

* **Records** -- pydantic models describing one decision and its
  segments, with JSON serialisation (:mod:`~shellgate.audit.records`).
"""
from __future__ import annotations

from shellgate.audit.records import (
    AuditEntry,
    AuditMatch,
    AuditRejection,
    AuditSegment,
    build_audit_entry,
)

__all__ = [
    "AuditEntry",
    "AuditMatch",
    "AuditRejection",
    "AuditSegment",
    "build_audit_entry",
]
