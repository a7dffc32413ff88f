"""Rule set compilation.

Turns a validated :class:`~shellgate.core.types.RuleSetSpec` into an
immutable :class:`RuleSet` of compiled matchers.  Compilation is
all-or-nothing: the first invalid spec or regex aborts it, and the error
names the section, index and label of the offending rule.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any

from shellgate.core.config import GeneralSettings
from shellgate.core.errors import InvalidPattern
from shellgate.core.types import (
    PatternKind,
    RegexSpec,
    RuleSetSpec,
    RuleSpec,
    SimpleSpec,
    SubcommandSpec,
    WrapperSpec,
)
from shellgate.rules.patterns import (
    build_simple_pattern,
    build_subcommand_pattern,
    build_wrapper_pattern,
    compile_regex,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Compiled data structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CompiledPattern:
    """A compiled matcher tagged with its label and origin.

    Attributes
    ----------
    regex:
        The compiled regular expression.
    name:
        Label reported in justifications and audit records.
    kind:
        Which rule shape produced the pattern.
    pattern:
        The regex source text, kept for audit output.
    """

    regex: re.Pattern[str]
    name: str
    kind: PatternKind
    pattern: str

    def matches(self, text: str) -> bool:
        """Return ``True`` if the pattern matches anywhere in *text*."""
        return self.regex.search(text) is not None

    def match_prefix(self, text: str) -> int | None:
        """Return the length of a non-empty match at offset 0, if any."""
        m = self.regex.match(text)
        if m is None or m.end() == 0:
            return None
        return m.end()


@dataclass(frozen=True, slots=True)
class RuleSet:
    """Immutable, ordered pattern sets plus general settings.

    Safe to share between threads once built.  To change rules, build a
    new instance and swap the reference.
    """

    deny_patterns: tuple[CompiledPattern, ...] = ()
    wrapper_patterns: tuple[CompiledPattern, ...] = ()
    safe_patterns: tuple[CompiledPattern, ...] = ()
    general: GeneralSettings = field(default_factory=GeneralSettings)

    @classmethod
    def empty(cls) -> RuleSet:
        """A rule set that approves nothing."""
        return cls()

    def summary(self) -> dict[str, int]:
        """Pattern counts per section."""
        return {
            "deny": len(self.deny_patterns),
            "wrappers": len(self.wrapper_patterns),
            "commands": len(self.safe_patterns),
        }


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


def compile_pattern(pattern: str, name: str, kind: PatternKind = PatternKind.REGEX) -> CompiledPattern:
    """Compile a single regex into a :class:`CompiledPattern`.

    Raises
    ------
    InvalidPattern
        If *pattern* is not a valid regular expression.
    """
    try:
        regex = compile_regex(pattern)
    except re.error as exc:
        raise InvalidPattern(
            f"Invalid regex pattern {pattern!r} for rule {name!r}: {exc}",
            details={"pattern": pattern, "name": name, "error": str(exc)},
        ) from exc
    return CompiledPattern(regex=regex, name=name, kind=kind, pattern=pattern)


def _expand(spec: RuleSpec, *, as_wrapper: bool) -> Iterator[tuple[str, str, PatternKind]]:
    """Yield ``(regex source, name, kind)`` for every matcher *spec* produces."""
    if isinstance(spec, SimpleSpec):
        for cmd in spec.commands:
            if as_wrapper:
                yield build_wrapper_pattern(cmd), cmd.strip(), PatternKind.SIMPLE
            else:
                yield build_simple_pattern(cmd), spec.name, PatternKind.SIMPLE
    elif isinstance(spec, SubcommandSpec):
        yield (
            build_subcommand_pattern(spec.command, spec.subcommands, spec.flags),
            spec.command,
            PatternKind.SUBCOMMAND,
        )
    elif isinstance(spec, WrapperSpec):
        yield build_wrapper_pattern(spec.command, spec.flags), spec.command, PatternKind.WRAPPER
    elif isinstance(spec, RegexSpec):
        yield spec.pattern, spec.name, PatternKind.REGEX


def _compile_section(
    section: str,
    specs: list[Any],
    *,
    as_wrapper: bool = False,
) -> tuple[CompiledPattern, ...]:
    compiled: list[CompiledPattern] = []
    for index, spec in enumerate(specs):
        for source, name, kind in _expand(spec, as_wrapper=as_wrapper):
            try:
                compiled.append(compile_pattern(source, name, kind))
            except InvalidPattern as exc:
                where = f"{section}[{index}]"
                raise InvalidPattern(
                    f"{where} {spec.label!r}: {exc.message}",
                    details={**exc.details, "location": where},
                ) from exc
    return tuple(compiled)


def compile_rule_set(spec: RuleSetSpec) -> RuleSet:
    """Compile every section of *spec* into a :class:`RuleSet`.

    Raises
    ------
    InvalidPattern
        If any rule produces an invalid regex.  No partial rule set is
        returned.
    """
    rules = RuleSet(
        deny_patterns=_compile_section("deny", spec.deny),
        wrapper_patterns=_compile_section("wrappers", spec.wrappers, as_wrapper=True),
        safe_patterns=_compile_section("commands", spec.commands),
        general=spec.general,
    )
    logger.info("compiled rule set: %s", rules.summary())
    return rules


def load_rule_set(data: Mapping[str, Any]) -> RuleSet:
    """Decode a sectioned configuration mapping and compile it.

    Raises
    ------
    InvalidRuleSpec
        If an entry has the wrong shape.
    InvalidPattern
        If a rule produces an invalid regex.
    """
    return compile_rule_set(RuleSetSpec.from_sections(data))
