"""Decision engine.

Decides whether one command line may run without confirmation.  The line
is split into segments and every segment passes through the same steps:

1. **Substitution check** on the raw text (``COMMAND_SUBSTITUTION``).
2. **Deny check** on the raw text (``DENY_MATCH``).
3. **Wrapper strip**, producing the core text.
4. **Deny check** on the core text (``DENY_MATCH``).
5. **Safe match** on the core text (``NO_MATCH`` when nothing matches).

The line is approved only if it parses and every segment matched a safe
rule.  Every segment is evaluated and recorded even after one has been
rejected, so the decision explains the whole line.

Typical usage::

    engine = DecisionEngine(load_rule_set(config))
    decision = engine.decide("git add . && git status")
    if not decision.approved:
        ask_the_human(decision.reason)
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from shellgate.core.errors import UnparseableCommand
from shellgate.core.types import PatternKind, RejectionCode
from shellgate.defense.substitution import SubstitutionDetector
from shellgate.rules.compiler import CompiledPattern, RuleSet
from shellgate.shell.segmenter import ShellSegment, split_command_chain
from shellgate.shell.wrappers import strip_wrappers

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Matched:
    """A segment matched a safe rule."""

    pattern_name: str
    pattern_kind: PatternKind
    pattern: str


@dataclass(frozen=True, slots=True)
class Rejected:
    """A segment (or the whole line) was rejected.

    ``pattern`` and ``pattern_name`` are set for ``DENY_MATCH`` only;
    ``detail`` carries the blocked substitutions or the parser error.
    """

    code: RejectionCode
    detail: str | None = None
    pattern: str | None = None
    pattern_name: str | None = None

    @property
    def summary(self) -> str:
        """Short human-readable reason."""
        if self.code is RejectionCode.COMMAND_SUBSTITUTION:
            return "command substitution"
        if self.code is RejectionCode.DENY_MATCH:
            return f"denied: {self.pattern_name}"
        if self.code is RejectionCode.UNPARSEABLE:
            return "unparseable command"
        return "not in allow list"


Outcome = Matched | Rejected


@dataclass(frozen=True, slots=True)
class Segment:
    """One evaluated segment of a command line."""

    raw_text: str
    core_text: str
    wrappers: tuple[str, ...]
    outcome: Outcome

    @property
    def approved(self) -> bool:
        return isinstance(self.outcome, Matched)

    @property
    def justification(self) -> str:
        """``wrapper+wrapper + name`` for matched segments, else the rejection summary."""
        if isinstance(self.outcome, Rejected):
            return self.outcome.summary
        if self.wrappers:
            return f"{'+'.join(self.wrappers)} + {self.outcome.pattern_name}"
        return self.outcome.pattern_name


@dataclass(frozen=True, slots=True)
class Decision:
    """Final verdict for one command line.

    ``rejection`` is set only when the line as a whole was rejected
    before any segment could be evaluated (parse failure).
    """

    command: str
    approved: bool
    reason: str
    segments: tuple[Segment, ...] = ()
    rejection: Rejected | None = None


# ---------------------------------------------------------------------------
# Pattern checks
# ---------------------------------------------------------------------------


def check_deny(text: str, patterns: Sequence[CompiledPattern]) -> CompiledPattern | None:
    """Return the first deny pattern matching anywhere in *text*."""
    for pattern in patterns:
        if pattern.matches(text):
            return pattern
    return None


def check_safe(text: str, patterns: Sequence[CompiledPattern]) -> CompiledPattern | None:
    """Return the first safe pattern matching *text*.

    Safe patterns carry their own anchors; declaration order decides
    between overlapping patterns.
    """
    for pattern in patterns:
        if pattern.matches(text):
            return pattern
    return None


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def _denied(pattern: CompiledPattern) -> Rejected:
    return Rejected(
        code=RejectionCode.DENY_MATCH,
        pattern=pattern.pattern,
        pattern_name=pattern.name,
    )


def _evaluate_segment(
    rules: RuleSet,
    detector: SubstitutionDetector,
    shell_segment: ShellSegment,
) -> Segment:
    raw = shell_segment.raw_text

    verdict = detector.check(raw)
    if not verdict.allowed:
        detail = ", ".join(occ.display for occ in verdict.blocked)
        return Segment(
            raw_text=raw,
            core_text=shell_segment.text,
            wrappers=(),
            outcome=Rejected(code=RejectionCode.COMMAND_SUBSTITUTION, detail=detail),
        )

    denied = check_deny(raw, rules.deny_patterns)
    if denied is not None:
        return Segment(raw, shell_segment.text, (), _denied(denied))

    core, wrappers = strip_wrappers(shell_segment.text, rules.wrapper_patterns)
    applied = tuple(wrappers)

    denied = check_deny(core, rules.deny_patterns)
    if denied is not None:
        return Segment(raw, core, applied, _denied(denied))

    safe = check_safe(core, rules.safe_patterns)
    if safe is None:
        return Segment(raw, core, applied, Rejected(code=RejectionCode.NO_MATCH))

    return Segment(
        raw,
        core,
        applied,
        Matched(pattern_name=safe.name, pattern_kind=safe.kind, pattern=safe.pattern),
    )


def decide(rules: RuleSet, line: str) -> Decision:
    """Decide whether *line* may run under *rules*.

    Never raises for bad input: a line that cannot be parsed is rejected
    with ``UNPARSEABLE`` and no segments.
    """
    try:
        shell_segments = split_command_chain(line)
    except UnparseableCommand as exc:
        rejection = Rejected(code=RejectionCode.UNPARSEABLE, detail=exc.message)
        logger.debug("rejected %r: %s", line, exc.message)
        return Decision(
            command=line,
            approved=False,
            reason=rejection.summary,
            rejection=rejection,
        )

    detector = SubstitutionDetector(rules.general)
    segments = tuple(_evaluate_segment(rules, detector, seg) for seg in shell_segments)
    for segment in segments:
        logger.debug(
            "segment %r core=%r wrappers=%s outcome=%s",
            segment.raw_text,
            segment.core_text,
            list(segment.wrappers),
            segment.justification,
        )

    approved = all(segment.approved for segment in segments)
    if approved:
        reason = " | ".join(segment.justification for segment in segments)
    else:
        reason = " | ".join(
            segment.justification for segment in segments if not segment.approved
        )

    logger.debug("decision for %r: approved=%s reason=%r", line, approved, reason)
    return Decision(command=line, approved=approved, reason=reason, segments=segments)


class DecisionEngine:
    """Holds the active :class:`RuleSet` and decides command lines against it.

    :meth:`reload` replaces the rule set with a single reference
    assignment.  :meth:`decide` reads the reference once, so a decision in
    progress keeps using the rule set it started with.
    """

    def __init__(self, rules: RuleSet | None = None) -> None:
        self._rules = rules if rules is not None else RuleSet.empty()

    @property
    def rules(self) -> RuleSet:
        return self._rules

    def reload(self, rules: RuleSet) -> None:
        """Make *rules* the active rule set for subsequent decisions."""
        self._rules = rules
        logger.info("rule set reloaded: %s", rules.summary())

    def decide(self, line: str) -> Decision:
        """Decide *line* against the active rule set."""
        rules = self._rules
        return decide(rules, line)
