"""Thin wrapper around the ``bashlex`` shell grammar parser.

``bashlex`` is a port of bash's own parser.  Besides
:class:`bashlex.errors.ParsingError` it raises a handful of builtin
exceptions on syntax it does not support (``case`` statements, ``[[ ]]``
tests, ``time`` and ``coproc``) and can exhaust the interpreter stack on
deeply nested input; all of them mean the same thing to us: the line
cannot be analysed and must not be approved.

``bashlex`` also matches a quoted heredoc delimiter literally, waiting
for a terminator line that reads ``'EOF'`` instead of ``EOF``.  Before
parsing, every quoted delimiter is rewritten to its unquoted word padded
with spaces to the same length, so node offsets still index the original
text.
"""
from __future__ import annotations

from collections.abc import Iterator

import bashlex
import bashlex.ast
import bashlex.errors

from shellgate.core.errors import UnparseableCommand

_PARSER_FAILURES: tuple[type[Exception], ...] = (
    bashlex.errors.ParsingError,
    NotImplementedError,
    AssertionError,
    AttributeError,
    IndexError,
    KeyError,
    TypeError,
    ValueError,
    RecursionError,
)

# Characters that end an unquoted word.
_WORD_BREAKS = frozenset(" \t\n;&|<>()")

_QUOTES = "'\""

Node = bashlex.ast.node


def _read_delimiter(text: str, start: int) -> tuple[int, str, bool]:
    """Read the heredoc delimiter word at *start*.

    Returns ``(end, unquoted word, was quoted)``.
    """
    out: list[str] = []
    quoted = False
    quote = ""
    i = start
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == quote:
                quote = ""
            else:
                out.append(ch)
        elif ch in _QUOTES:
            quote = ch
            quoted = True
        elif ch == "\\" and i + 1 < len(text):
            quoted = True
            out.append(text[i + 1])
            i += 1
        elif ch in _WORD_BREAKS:
            break
        else:
            out.append(ch)
        i += 1
    return i, "".join(out), quoted


def normalize_heredocs(text: str) -> tuple[str, frozenset[int]]:
    """Unquote heredoc delimiters without moving any offset.

    Returns the rewritten text and the start offsets of the delimiters
    that were quoted.  ``<<<`` here-strings and ``<<`` inside quotes are
    left alone.
    """
    if "<<" not in text:
        return text, frozenset()

    chars = list(text)
    quoted_starts: set[int] = set()
    quote = ""
    i = 0
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
        elif ch in _QUOTES:
            quote = ch
        elif text.startswith("<<<", i):
            i += 3
            continue
        elif text.startswith("<<", i):
            j = i + 2
            if j < len(text) and text[j] == "-":
                j += 1
            while j < len(text) and text[j] in " \t":
                j += 1
            end, word, was_quoted = _read_delimiter(text, j)
            if was_quoted and word:
                chars[j:end] = word.ljust(end - j)
                quoted_starts.add(j)
            i = max(end, i + 2)
            continue
        i += 1
    return "".join(chars), frozenset(quoted_starts)


def parse(text: str) -> list[Node]:
    """Parse *text* into a list of top-level AST nodes.

    Node positions index *text* itself, quoted heredoc delimiters
    included.

    Raises
    ------
    UnparseableCommand
        If the parser rejects the input for any reason.
    """
    source, _ = normalize_heredocs(text)
    try:
        return bashlex.parse(source)
    except _PARSER_FAILURES as exc:
        raise UnparseableCommand(
            f"Command line could not be parsed: {exc}",
            details={"error": str(exc), "error_type": type(exc).__name__},
        ) from exc


def walk(node: Node) -> Iterator[Node]:
    """Yield *node* and every node below it, depth first."""
    yield node
    for attr in ("parts", "list", "redirects"):
        for child in getattr(node, attr, None) or ():
            if isinstance(child, Node):
                yield from walk(child)
    for attr in ("output", "heredoc", "command"):
        child = getattr(node, attr, None)
        if isinstance(child, Node):
            yield from walk(child)
