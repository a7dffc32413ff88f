"""Default rule set.

A ready-to-use rule set for developer workstations: version control,
Python, Node.js, Rust and Go tooling, read-only utilities, and the shell
builtins needed by simple loops.  A deny list covering privilege
escalation and destructive disk operations is checked before anything
else.

Callers without configuration should use :meth:`RuleSet.empty` instead;
these defaults are opt-in.
"""
from __future__ import annotations

from shellgate.core.config import GeneralSettings
from shellgate.core.types import (
    RegexSpec,
    RuleSetSpec,
    SimpleSpec,
    SubcommandSpec,
    WrapperSpec,
)
from shellgate.rules.compiler import RuleSet, compile_rule_set


def _build_default_rules() -> RuleSetSpec:
    # -- Deny list ----------------------------------------------------------
    deny = [
        SimpleSpec(name="privilege escalation", commands=["sudo", "su", "doas"]),
        RegexSpec(pattern=r"rm\s+(-[rRfF]+\s+)*/", name="rm root"),
        RegexSpec(pattern=r"chmod\s+(777|a\+rwx)", name="chmod world-writable"),
        RegexSpec(pattern=r"dd\s+.*of=/dev/", name="dd to device"),
        RegexSpec(pattern=r">\s*/dev/sd[a-z]", name="write to disk"),
        RegexSpec(pattern=r"mkfs\.", name="format filesystem"),
        RegexSpec(pattern=r":\(\)\s*\{\s*:\s*\|\s*:\s*&\s*\}\s*;\s*:", name="fork bomb"),
    ]

    # -- Wrappers -----------------------------------------------------------
    wrappers = [
        SimpleSpec(name="env", commands=["env", "do"]),
        WrapperSpec(command="timeout", flags=["<arg>"]),
        WrapperSpec(command="nice", flags=["-n <arg>", ""]),
        RegexSpec(pattern=r"^([A-Z_][A-Z0-9_]*=[^\s]*\s+)+", name="env vars"),
        RegexSpec(pattern=r"^(\.\./)*\.?venv/bin/", name=".venv"),
        RegexSpec(pattern=r"^/[^\s]+/\.?venv/bin/", name=".venv"),
    ]

    # -- Safe commands ------------------------------------------------------
    commands = [
        SubcommandSpec(
            command="git",
            subcommands=[
                "diff", "log", "status", "show", "branch", "stash", "bisect",
                "fetch", "add", "checkout", "merge", "rebase", "worktree", "commit",
            ],
            flags=["-C <arg>"],
        ),
        SimpleSpec(name="python", commands=["pytest", "python", "ruff", "uvx"]),
        SubcommandSpec(
            command="uv",
            subcommands=["pip", "run", "sync", "venv", "add", "remove", "lock"],
        ),
        SimpleSpec(name="node", commands=["npx"]),
        SubcommandSpec(command="npm", subcommands=["install", "run", "test", "build", "ci"]),
        SubcommandSpec(
            command="cargo",
            subcommands=["build", "test", "run", "check", "clippy", "fmt", "clean"],
        ),
        SubcommandSpec(command="maturin", subcommands=["develop", "build"]),
        SimpleSpec(name="go", commands=["go"]),
        SimpleSpec(
            name="read-only",
            commands=[
                "ls", "cat", "head", "tail", "wc", "find", "grep", "rg", "file",
                "which", "pwd", "du", "df", "curl", "sort", "uniq", "cut", "tr",
                "awk", "sed", "xargs",
            ],
        ),
        SimpleSpec(name="common", commands=["make", "touch", "echo", "sleep"]),
        SimpleSpec(name="process-mgmt", commands=["pkill", "kill"]),
        SimpleSpec(name="loops", commands=["done"]),
        RegexSpec(pattern=r"^(true|false|exit(\s+\d+)?)$", name="shell builtin"),
        RegexSpec(pattern=r"^cd\s", name="cd"),
        RegexSpec(pattern=r"^(source|\.) [^\s]*venv/bin/activate", name="venv activate"),
        RegexSpec(pattern=r"^[A-Z_][A-Z0-9_]*=\S*$", name="var assignment"),
        RegexSpec(pattern=r"^for\s+\w+\s+in\s", name="for loop"),
        RegexSpec(pattern=r"^while\s", name="while loop"),
    ]

    return RuleSetSpec(
        deny=deny,
        wrappers=wrappers,
        commands=commands,
        general=GeneralSettings(),
    )


DEFAULT_RULES: RuleSetSpec = _build_default_rules()


def build_default_rule_set() -> RuleSet:
    """Compile :data:`DEFAULT_RULES`."""
    return compile_rule_set(DEFAULT_RULES)
