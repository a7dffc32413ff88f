"""Audit entry construction.

Converts a :class:`~shellgate.engine.Decision` into the pydantic models
handed to an audit log writer.  Only the decision itself is recorded
here: timestamps, durations, session identifiers and the working
directory are added by the writer.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from shellgate.core.types import PatternKind, RejectionCode
from shellgate.engine import Decision, Matched, Rejected, Segment

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class AuditMatch(BaseModel):
    """The safe rule that approved a segment."""

    model_config = ConfigDict(frozen=True)

    type: PatternKind = Field(description="Shape of the rule that matched.")
    name: str
    pattern: str = Field(description="Regex source of the matching pattern.")


class AuditRejection(BaseModel):
    """Why a segment was rejected."""

    model_config = ConfigDict(frozen=True)

    code: RejectionCode
    detail: str | None = None
    name: str | None = Field(default=None, description="Deny rule name, for DENY_MATCH.")
    pattern: str | None = Field(default=None, description="Deny rule regex, for DENY_MATCH.")


class AuditSegment(BaseModel):
    """One evaluated segment of an audited command line."""

    model_config = ConfigDict(frozen=True)

    command: str = Field(description="Raw segment text, redirections included.")
    approved: bool
    wrappers: list[str] = Field(default_factory=list)
    match: AuditMatch | None = None
    rejection: AuditRejection | None = None


class AuditEntry(BaseModel):
    """Audit view of one decision."""

    model_config = ConfigDict(frozen=True)

    command: str
    approved: bool
    reason: str
    segments: list[AuditSegment] = Field(default_factory=list)
    rejection: AuditRejection | None = Field(
        default=None,
        description="Set when the line was rejected as a whole (parse failure).",
    )

    def to_json(self) -> str:
        """Serialise to compact JSON, leaving out unset optional fields."""
        return self.model_dump_json(exclude_none=True)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def _rejection(outcome: Rejected) -> AuditRejection:
    return AuditRejection(
        code=outcome.code,
        detail=outcome.detail,
        name=outcome.pattern_name,
        pattern=outcome.pattern,
    )


def _segment(segment: Segment) -> AuditSegment:
    outcome = segment.outcome
    if isinstance(outcome, Matched):
        return AuditSegment(
            command=segment.raw_text,
            approved=True,
            wrappers=list(segment.wrappers),
            match=AuditMatch(
                type=outcome.pattern_kind,
                name=outcome.pattern_name,
                pattern=outcome.pattern,
            ),
        )
    return AuditSegment(
        command=segment.raw_text,
        approved=False,
        wrappers=list(segment.wrappers),
        rejection=_rejection(outcome),
    )


def build_audit_entry(decision: Decision) -> AuditEntry:
    """Build the :class:`AuditEntry` for *decision*."""
    return AuditEntry(
        command=decision.command,
        approved=decision.approved,
        reason=decision.reason,
        segments=[_segment(segment) for segment in decision.segments],
        rejection=_rejection(decision.rejection) if decision.rejection is not None else None,
    )
