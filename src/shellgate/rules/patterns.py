"""Regular expression builders for declarative command rules.

Each builder turns one piece of a rule specification into regex source
text.  Literals coming from configuration are always escaped, so a
command such as ``run.py`` matches only itself, never ``runxpy``.

Examples::

    build_simple_pattern("pytest")                          -> ^pytest\\b
    build_subcommand_pattern("git", ["diff"], ["-C <arg>"]) -> ^git\\s+(\\-C\\s*\\S+\\s+)?(diff)\\b
    build_wrapper_pattern("timeout", ["<arg>"])             -> ^timeout\\s+(\\S+\\s+)?
"""
from __future__ import annotations

import re
from functools import lru_cache

ARG_PLACEHOLDER = "<arg>"


def build_flag_pattern(flag: str) -> str:
    """Convert one flag specification into an optional regex group.

    * ``""``         -> ``""`` (no-op, allows the bare command)
    * ``"<arg>"``    -> ``(\\S+\\s+)?`` (one optional positional token)
    * ``"-n <arg>"`` -> ``(-n\\s*\\S+\\s+)?`` (accepts ``-n10`` and ``-n 10``)
    * ``"-v"``       -> ``(-v\\s+)?``
    """
    flag = flag.strip()
    if not flag:
        return ""
    if flag == ARG_PLACEHOLDER:
        return r"(\S+\s+)?"
    suffix = " " + ARG_PLACEHOLDER
    if flag.endswith(suffix):
        name = flag[: -len(suffix)].strip()
        return "(" + re.escape(name) + r"\s*\S+\s+)?"
    return "(" + re.escape(flag) + r"\s+)?"


def build_flag_groups(flags: list[str] | tuple[str, ...]) -> str:
    """Concatenate flag groups in declaration order."""
    return "".join(build_flag_pattern(flag) for flag in flags)


def build_simple_pattern(command: str) -> str:
    """Literal command name followed by a word boundary."""
    return "^" + re.escape(command.strip()) + r"\b"


def build_subcommand_pattern(
    command: str,
    subcommands: list[str] | tuple[str, ...],
    flags: list[str] | tuple[str, ...] = (),
) -> str:
    """Command, whitespace, optional flag groups, then one of *subcommands*."""
    alternatives = "|".join(re.escape(sub.strip()) for sub in subcommands)
    return (
        "^" + re.escape(command.strip()) + r"\s+"
        + build_flag_groups(flags)
        + "(" + alternatives + r")\b"
    )


def build_wrapper_pattern(
    command: str,
    flags: list[str] | tuple[str, ...] = (),
) -> str:
    """Command, whitespace, optional flag groups; no subcommand consumed."""
    return "^" + re.escape(command.strip()) + r"\s+" + build_flag_groups(flags)


# ---------------------------------------------------------------------------
# Compilation cache (module-level)
# ---------------------------------------------------------------------------

@lru_cache(maxsize=1024)
def compile_regex(pattern: str) -> re.Pattern[str]:
    """Compile and cache a regex pattern.

    Raises
    ------
    re.error
        If the pattern is syntactically invalid.
    """
    return re.compile(pattern)


def clear_cache() -> None:
    """Clear the compiled pattern cache."""
    compile_regex.cache_clear()
