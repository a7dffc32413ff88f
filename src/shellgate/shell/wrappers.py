"""Wrapper resolution.

Wrappers are benign prefixes (``timeout 30``, ``nice -n 5``, ``FOO=bar``,
``.venv/bin/``) that run another command.  They are stripped repeatedly
until none applies, leaving the *core* command that must itself match a
safe rule.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from shellgate.rules.compiler import CompiledPattern

logger = logging.getLogger(__name__)


def strip_wrappers(
    text: str,
    wrapper_patterns: Sequence[CompiledPattern],
) -> tuple[str, list[str]]:
    """Strip wrapper prefixes from *text*.

    Wrapper patterns are tried in declaration order.  The first one with a
    non-empty match at offset 0 is recorded and its prefix removed, then
    the scan restarts on the shorter text.  The loop ends when no pattern
    matches; every pass consumes at least one character, so it always
    terminates.

    Returns
    -------
    tuple[str, list[str]]
        The core text and the names of the wrappers applied, outermost
        first.  Running this again on the core text applies nothing.
    """
    core = text.strip()
    applied: list[str] = []

    while core:
        for wrapper in wrapper_patterns:
            end = wrapper.match_prefix(core)
            if end is not None:
                applied.append(wrapper.name)
                core = core[end:].lstrip()
                break
        else:
            break

    if applied:
        logger.debug("stripped wrappers %s from %r -> %r", applied, text, core)
    return core, applied
