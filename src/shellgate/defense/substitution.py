"""Command substitution detection.

Flags ``$(...)`` and backtick constructs in a segment's raw text.  Bodies
of heredocs whose delimiter is quoted (``<<'EOF'``, ``<<"EOF"``,
``<<\\EOF``) are literal text for the shell and are never scanned; every
other occurrence is, including ones nested inside another substitution
or inside quotes.

Each occurrence is judged on its own against :class:`GeneralSettings`:

* ``allow_subshells`` / ``allow_backticks`` permit every occurrence of
  the matching syntax.
* Otherwise an occurrence is permitted only when its inner command (the
  first word) is listed in ``allowed_subshell_commands`` and its body
  holds no further command separators, pipes or redirections.

A segment passes only when *every* occurrence is permitted.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from shellgate.core.config import GeneralSettings
from shellgate.core.errors import UnparseableCommand
from shellgate.shell.parser import normalize_heredocs, parse, walk

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

_SUBSTITUTION_RE = re.compile(r"\$\(|`")

# Characters that would let an allow-listed inner command chain another one.
_INNER_OPERATORS = frozenset(";&|<>\n")

DOLLAR_PAREN = "$("
BACKTICK = "`"


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Substitution:
    """One ``$(...)`` or backtick occurrence."""

    kind: str
    start: int
    inner_text: str
    inner_command: str

    @property
    def display(self) -> str:
        if self.kind == BACKTICK:
            return f"`{self.inner_text}`"
        return f"$({self.inner_text})"


@dataclass(frozen=True, slots=True)
class SubstitutionVerdict:
    """Outcome of checking one segment."""

    allowed: bool
    occurrences: tuple[Substitution, ...] = ()
    blocked: tuple[Substitution, ...] = ()


# ---------------------------------------------------------------------------
# Heredoc exemption
# ---------------------------------------------------------------------------

def find_quoted_heredoc_ranges(text: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` offsets of quoted-delimiter heredoc bodies.

    If *text* cannot be parsed no range is returned, so the whole text is
    scanned.
    """
    if "<<" not in text:
        return []
    # Segment text is stripped; the terminator line still needs its newline.
    source = text if text.endswith("\n") else text + "\n"
    _, quoted_starts = normalize_heredocs(source)
    if not quoted_starts:
        return []
    try:
        trees = parse(source)
        nodes = [node for tree in trees for node in walk(tree)]
    except UnparseableCommand as exc:
        logger.debug("heredoc scan skipped: %s", exc.message)
        return []
    except RecursionError:
        logger.debug("heredoc scan skipped: nesting too deep")
        return []

    ranges: list[tuple[int, int]] = []
    for node in nodes:
        if node.kind != "redirect" or not str(getattr(node, "type", "")).startswith("<<"):
            continue
        heredoc = getattr(node, "heredoc", None)
        if heredoc is None:
            continue
        start, end = node.pos
        if not any(start <= q < end for q in quoted_starts):
            continue
        body_start, body_end = heredoc.pos
        body_end = min(body_end, len(text))
        if 0 <= body_start < body_end:
            ranges.append((body_start, body_end))
    return ranges


# ---------------------------------------------------------------------------
# Occurrence scanning
# ---------------------------------------------------------------------------

def _paren_body(text: str, start: int) -> str:
    """Text from *start* up to the ``)`` closing a ``$(`` (or end of text)."""
    depth = 1
    quote = ""
    i = start
    while i < len(text):
        ch = text[i]
        if quote == "'":
            if ch == "'":
                quote = ""
        elif ch == "\\":
            i += 2
            continue
        elif quote == '"':
            if ch == '"':
                quote = ""
        elif ch in "'\"":
            quote = ch
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return text[start:i]
        i += 1
    return text[start:]


def _first_word(inner: str) -> str:
    words = inner.split()
    return words[0] if words else ""


def find_substitutions(text: str) -> list[Substitution]:
    """Return every substitution occurrence in *text*, in source order."""
    excluded = find_quoted_heredoc_ranges(text)

    def _exempt(pos: int) -> bool:
        return any(start <= pos < end for start, end in excluded)

    found: list[Substitution] = []
    backticks: list[int] = []
    for m in _SUBSTITUTION_RE.finditer(text):
        if _exempt(m.start()):
            continue
        if m.group() == DOLLAR_PAREN:
            inner = _paren_body(text, m.end())
            found.append(Substitution(DOLLAR_PAREN, m.start(), inner, _first_word(inner)))
        else:
            backticks.append(m.start())

    # Backticks pair up in order; an unpaired opener runs to the end.
    for i in range(0, len(backticks), 2):
        opener = backticks[i]
        closer = backticks[i + 1] if i + 1 < len(backticks) else len(text)
        inner = text[opener + 1:closer]
        found.append(Substitution(BACKTICK, opener, inner, _first_word(inner)))

    found.sort(key=lambda s: s.start)
    return found


def contains_substitution(text: str) -> bool:
    """Return ``True`` if *text* holds any non-exempt substitution."""
    return bool(find_substitutions(text))


# ---------------------------------------------------------------------------
# SubstitutionDetector
# ---------------------------------------------------------------------------

class SubstitutionDetector:
    """Judges substitution occurrences against :class:`GeneralSettings`."""

    def __init__(self, settings: GeneralSettings | None = None) -> None:
        self._settings = settings or GeneralSettings()

    @property
    def settings(self) -> GeneralSettings:
        return self._settings

    def is_permitted(self, occurrence: Substitution) -> bool:
        """Return ``True`` if this single occurrence is allowed."""
        if occurrence.kind == DOLLAR_PAREN and self._settings.allow_subshells:
            return True
        if occurrence.kind == BACKTICK and self._settings.allow_backticks:
            return True
        if occurrence.inner_command not in self._settings.allowed_subshell_commands:
            return False
        return _INNER_OPERATORS.isdisjoint(occurrence.inner_text)

    def check(self, text: str) -> SubstitutionVerdict:
        """Scan *text* and report which occurrences, if any, are blocked."""
        occurrences = tuple(find_substitutions(text))
        blocked = tuple(occ for occ in occurrences if not self.is_permitted(occ))
        return SubstitutionVerdict(
            allowed=not blocked,
            occurrences=occurrences,
            blocked=blocked,
        )


def check_substitutions(text: str, settings: GeneralSettings | None = None) -> SubstitutionVerdict:
    """Functional form of :meth:`SubstitutionDetector.check`."""
    return SubstitutionDetector(settings).check(text)
