"""Command line segmentation.

Splits one command line into independently checkable segments using a
real shell grammar parse.  Sequencing and pipe operators (``&&``, ``||``,
``;``, ``|``, ``&`` and newlines) separate segments; operators inside
quotes or heredocs do not.

Control structures are flattened:

* ``for NAME in WORDS; do BODY; done`` yields the header
  ``for NAME in WORDS`` followed by the body commands.
* ``while``/``until``/``if`` yield their condition commands and bodies.
* Groups ``{ ...; }``, subshells ``( ... )`` and function bodies yield
  their commands.
* Process substitutions ``<(...)``/``>(...)`` yield their inner commands
  after the command that contains them.

Redirections on a compound command (``done < file``) are reported as a
segment of their own with empty command text, so they are scanned and
deny-checked but never approved by an allow rule.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from shellgate.core.errors import UnparseableCommand
from shellgate.shell.parser import Node, parse, walk

logger = logging.getLogger(__name__)

_SEPARATOR_KINDS = frozenset({"operator", "pipe", "reservedword"})
_HEADER_TERMINATORS = frozenset({";", "do", "{", "\n"})


@dataclass(frozen=True, slots=True)
class ShellSegment:
    """One segment of a command line.

    Attributes
    ----------
    raw_text:
        Exact source of the segment, including its redirections and any
        heredoc bodies.
    text:
        The command's words and assignments joined by single spaces, with
        redirections removed.
    """

    raw_text: str
    text: str


def split_command_chain(line: str) -> list[ShellSegment]:
    """Split *line* into segments.

    Returns an empty list for empty or whitespace-only input.

    Raises
    ------
    UnparseableCommand
        If the line has unclosed quotes, incomplete control structures,
        a dangling operator, syntax the parser does not support (``case``,
        ``[[ ]]``, ``time``, ``coproc``), or nesting too deep to flatten.
    """
    if not line.strip():
        return []

    trees = parse(line)
    segments: list[ShellSegment] = []
    try:
        for tree in trees:
            _collect(line, tree, segments)
    except RecursionError as exc:
        raise UnparseableCommand(
            "Command line is nested too deeply to analyse",
            details={"error": str(exc), "error_type": type(exc).__name__},
        ) from exc
    logger.debug("split %r into %d segment(s)", line, len(segments))
    return segments


# ---------------------------------------------------------------------------
# AST flattening
# ---------------------------------------------------------------------------

def _source(line: str, node: Node) -> str:
    start, end = node.pos
    return line[start:end]


def _collect(line: str, node: Node, out: list[ShellSegment]) -> None:
    kind = node.kind

    if kind == "command":
        _collect_command(line, node, out)
    elif kind in ("list", "pipeline"):
        for child in node.parts:
            if child.kind not in _SEPARATOR_KINDS:
                _collect(line, child, out)
    elif kind == "compound":
        for child in node.list:
            if child.kind not in _SEPARATOR_KINDS:
                _collect(line, child, out)
        _collect_redirects(line, getattr(node, "redirects", None) or [], out)
    elif kind == "for":
        _collect_for(line, node, out)
    elif kind in ("if", "while", "until", "function"):
        for child in node.parts:
            if child.kind not in _SEPARATOR_KINDS and child.kind != "word":
                _collect(line, child, out)
    elif kind in _SEPARATOR_KINDS:
        pass
    else:
        # Anything else stands for itself and must match a rule verbatim.
        text = _source(line, node).strip()
        if text:
            out.append(ShellSegment(raw_text=text, text=text))


def _collect_command(line: str, node: Node, out: list[ShellSegment]) -> None:
    start, end = node.pos
    words: list[str] = []
    for part in node.parts:
        if part.kind == "redirect":
            heredoc = getattr(part, "heredoc", None)
            if heredoc is not None:
                end = max(end, heredoc.pos[1])
        elif part.kind != "reservedword":
            words.append(_source(line, part))

    raw = line[start:end].strip()
    if raw:
        out.append(ShellSegment(raw_text=raw, text=" ".join(words)))

    for part in node.parts:
        for inner in walk(part):
            if inner.kind == "processsubstitution" and getattr(inner, "command", None) is not None:
                _collect(line, inner.command, out)


def _collect_for(line: str, node: Node, out: list[ShellSegment]) -> None:
    parts = list(node.parts)
    header_end = 0
    for i, part in enumerate(parts):
        if part.kind == "reservedword" and i > 0 and part.word in _HEADER_TERMINATORS:
            break
        if part.kind not in ("word", "reservedword"):
            break
        header_end = i + 1

    header = parts[:header_end]
    if header:
        start = header[0].pos[0]
        end = header[-1].pos[1]
        text = line[start:end].strip()
        words = " ".join(_source(line, part) for part in header)
        out.append(ShellSegment(raw_text=text, text=words))

    for part in parts[header_end:]:
        if part.kind not in _SEPARATOR_KINDS and part.kind != "word":
            _collect(line, part, out)


def _collect_redirects(line: str, redirects: list[Node], out: list[ShellSegment]) -> None:
    if not redirects:
        return
    start = min(r.pos[0] for r in redirects)
    end = max(r.pos[1] for r in redirects)
    for redirect in redirects:
        heredoc = getattr(redirect, "heredoc", None)
        if heredoc is not None:
            end = max(end, heredoc.pos[1])
    raw = line[start:end].strip()
    if raw:
        out.append(ShellSegment(raw_text=raw, text=""))
