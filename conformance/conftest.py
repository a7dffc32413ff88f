"""Shared fixtures for shellgate conformance tests.

Provides compiled rule sets covering the shipped defaults, the empty
fail-secure rule set, and a small hand-written rule set whose behaviour
is easy to reason about.
"""
from __future__ import annotations

import pytest

from shellgate.core.config import GeneralSettings
from shellgate.core.types import RegexSpec, RuleSetSpec, SimpleSpec, SubcommandSpec, WrapperSpec
from shellgate.engine import DecisionEngine
from shellgate.rules import RuleSet, build_default_rule_set, compile_rule_set

# ---------------------------------------------------------------------------
# Rule set specs used across tests
# ---------------------------------------------------------------------------
SMALL_SPEC = RuleSetSpec(
    deny=[
        SimpleSpec(name="privilege escalation", commands=["sudo"]),
        RegexSpec(pattern=r"rm\s+-[rRfF]+", name="recursive delete"),
    ],
    wrappers=[
        WrapperSpec(command="timeout", flags=["<arg>"]),
        WrapperSpec(command="nice", flags=["-n <arg>"]),
        SimpleSpec(commands=["env"]),
        RegexSpec(pattern=r"^([A-Z_][A-Z0-9_]*=\S*\s+)+", name="env vars"),
    ],
    commands=[
        SubcommandSpec(command="git", subcommands=["status", "add", "diff"], flags=["-C <arg>"]),
        SimpleSpec(name="python", commands=["pytest"]),
        SimpleSpec(name="files", commands=["ls", "rm", "echo"]),
    ],
)


# ---------------------------------------------------------------------------
# Rule set fixtures
# ---------------------------------------------------------------------------
@pytest.fixture(scope="session")
def default_rules() -> RuleSet:
    return build_default_rule_set()


@pytest.fixture(scope="session")
def small_rules() -> RuleSet:
    return compile_rule_set(SMALL_SPEC)


@pytest.fixture(scope="session")
def whoami_rules() -> RuleSet:
    spec = SMALL_SPEC.model_copy(
        update={"general": GeneralSettings(allowed_subshell_commands=frozenset({"whoami"}))},
    )
    return compile_rule_set(spec)


@pytest.fixture()
def engine(small_rules: RuleSet) -> DecisionEngine:
    return DecisionEngine(small_rules)
