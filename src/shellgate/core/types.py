"""shellgate shared domain types.

This module defines the enums and the Pydantic models that describe rule
specifications as they arrive from configuration.

Key design decisions:
* Rule specifications are a *tagged union* discriminated by ``kind``, so a
  malformed entry is rejected at decode time instead of being inspected
  field by field later on.
* Each section of a rule set only admits the shapes that make sense for
  it: wrappers never carry subcommands and deny rules are never wrappers.
* Enums use *string* values so they serialise cleanly to JSON.
"""
from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from shellgate.core.config import GeneralSettings
from shellgate.core.errors import InvalidRuleSpec

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PatternKind(enum.StrEnum):
    """How a compiled pattern was produced."""

    SIMPLE = "simple"
    SUBCOMMAND = "subcommand"
    WRAPPER = "wrapper"
    REGEX = "regex"


class RejectionCode(enum.StrEnum):
    """Closed set of reasons a segment (or a whole line) is rejected.

    * **COMMAND_SUBSTITUTION** -- ``$(...)`` or backticks not permitted
      by the general settings.
    * **UNPARSEABLE** -- the line is not valid shell syntax.
    * **DENY_MATCH** -- an explicit deny rule matched.
    * **NO_MATCH** -- no safe rule matched the core command.
    """

    COMMAND_SUBSTITUTION = "COMMAND_SUBSTITUTION"
    UNPARSEABLE = "UNPARSEABLE"
    DENY_MATCH = "DENY_MATCH"
    NO_MATCH = "NO_MATCH"


# ---------------------------------------------------------------------------
# Rule specifications
# ---------------------------------------------------------------------------

class _RuleSpec(BaseModel):
    model_config = ConfigDict(strict=True, frozen=True, extra="forbid")

    @property
    def label(self) -> str:
        """Name used to identify this spec in error messages."""
        return getattr(self, "name", "") or getattr(self, "command", "")


class SimpleSpec(_RuleSpec):
    """A label plus bare command names; any trailing arguments are accepted."""

    kind: Literal["simple"] = "simple"
    name: str = ""
    commands: list[str] = Field(min_length=1)

    @field_validator("commands")
    @classmethod
    def _no_blank_commands(cls, value: list[str]) -> list[str]:
        if any(not cmd.strip() for cmd in value):
            raise ValueError("command names must not be blank")
        return value


class SubcommandSpec(_RuleSpec):
    """A command that is only accepted with one of the listed subcommands.

    ``flags`` lists optional flag groups that may appear between the
    command and the subcommand, e.g. ``"-C <arg>"`` for ``git -C path``.
    """

    kind: Literal["subcommand"] = "subcommand"
    command: str = Field(min_length=1)
    subcommands: list[str] = Field(min_length=1)
    flags: list[str] = Field(default_factory=list)


class WrapperSpec(_RuleSpec):
    """A wrapper prefix in command form: command name plus optional flags."""

    kind: Literal["wrapper"] = "wrapper"
    command: str = Field(min_length=1)
    flags: list[str] = Field(default_factory=list)


class RegexSpec(_RuleSpec):
    """A raw regular expression compiled verbatim."""

    kind: Literal["regex"] = "regex"
    pattern: str = Field(min_length=1)
    name: str = ""


DenySpec = Annotated[SimpleSpec | SubcommandSpec | RegexSpec, Field(discriminator="kind")]
WrapperRuleSpec = Annotated[SimpleSpec | WrapperSpec | RegexSpec, Field(discriminator="kind")]
CommandSpec = Annotated[SimpleSpec | SubcommandSpec | RegexSpec, Field(discriminator="kind")]

RuleSpec = SimpleSpec | SubcommandSpec | WrapperSpec | RegexSpec

# Sub-table names used by the sectioned configuration layout, mapped to
# the ``kind`` tag they decode to.
_SUBSECTION_KINDS: dict[str, str] = {
    "simple": "simple",
    "subcommand": "subcommand",
    "command": "wrapper",
    "wrapper": "wrapper",
    "regex": "regex",
}

_SECTIONS = ("deny", "wrappers", "commands")

_section_table = TypeAdapter(dict[str, list[dict[str, Any]]])


class RuleSetSpec(BaseModel):
    """Declarative description of a complete rule set.

    Within each section, order is significant: the first matching rule
    wins and no specificity ranking is applied.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    deny: list[DenySpec] = Field(default_factory=list)
    wrappers: list[WrapperRuleSpec] = Field(default_factory=list)
    commands: list[CommandSpec] = Field(default_factory=list)
    general: GeneralSettings = Field(default_factory=GeneralSettings)

    @classmethod
    def parse(cls, data: Mapping[str, Any]) -> RuleSetSpec:
        """Validate a mapping whose rule entries carry an explicit ``kind``.

        Raises
        ------
        InvalidRuleSpec
            If any entry has the wrong shape.  The message names the
            section and index of the first offending entry.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise _invalid_spec(exc, data) from exc

    @classmethod
    def from_sections(cls, data: Mapping[str, Any]) -> RuleSetSpec:
        """Decode the sectioned layout used by configuration files.

        The layout groups entries by shape inside each section::

            {"deny": {"simple": [...], "regex": [...]},
             "wrappers": {"simple": [...], "command": [...]},
             "commands": {"subcommand": [...]},
             "general": {"allow_subshells": False}}

        The sub-table name supplies each entry's ``kind``.  Sub-tables are
        read in mapping order, entries in list order.
        """
        payload: dict[str, Any] = {}
        for section in _SECTIONS:
            try:
                table = _section_table.validate_python(data.get(section) or {})
            except ValidationError as exc:
                raise InvalidRuleSpec(
                    f"Section {section!r} must map rule shapes to lists of tables",
                    details={"section": section, "errors": exc.errors(include_url=False)},
                ) from exc
            entries: list[dict[str, Any]] = []
            for shape, items in table.items():
                kind = _SUBSECTION_KINDS.get(shape, shape)
                entries.extend({**item, "kind": kind} for item in items)
            payload[section] = entries
        if "general" in data:
            payload["general"] = data["general"]

        ignored = sorted(set(data) - set(payload) - set(_SECTIONS))
        if ignored:
            logger.debug("ignoring unknown configuration keys: %s", ignored)
        return cls.parse(payload)


def _invalid_spec(exc: ValidationError, data: Mapping[str, Any]) -> InvalidRuleSpec:
    """Build an :class:`InvalidRuleSpec` naming the first offending entry."""
    errors = exc.errors(include_url=False)
    loc = errors[0]["loc"] if errors else ()
    where = _describe_location(loc)

    label = ""
    if len(loc) >= 2 and isinstance(loc[0], str) and isinstance(loc[1], int):
        entries = data.get(loc[0]) or []
        if loc[1] < len(entries) and isinstance(entries[loc[1]], Mapping):
            entry = entries[loc[1]]
            label = str(entry.get("name") or entry.get("command") or "")

    subject = f"{where} {label!r}" if label else where
    reason = errors[0]["msg"] if errors else str(exc)
    return InvalidRuleSpec(
        f"Invalid rule specification at {subject}: {reason}",
        details={"location": where, "name": label, "errors": errors},
    )


def _describe_location(loc: tuple[Any, ...]) -> str:
    """Render a pydantic error location as ``section[index].field``."""
    out = ""
    for part in loc:
        if isinstance(part, int):
            out += f"[{part}]"
        elif part in _SUBSECTION_KINDS.values():
            # discriminator tag inserted by pydantic, not a real field
            continue
        else:
            out += f".{part}" if out else str(part)
    return out or "<root>"
