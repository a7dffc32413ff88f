"""Rule compilation.

* **Patterns** -- regex builders for each rule shape
  (:mod:`~shellgate.rules.patterns`).
* **Compiler** -- validated specs to an immutable :class:`RuleSet`
  (:mod:`~shellgate.rules.compiler`).
* **Defaults** -- an opt-in rule set for developer workstations
  (:mod:`~shellgate.rules.defaults`).
"""
from __future__ import annotations

from shellgate.rules.compiler import (
    CompiledPattern,
    RuleSet,
    compile_pattern,
    compile_rule_set,
    load_rule_set,
)
from shellgate.rules.defaults import DEFAULT_RULES, build_default_rule_set
from shellgate.rules.patterns import (
    build_flag_pattern,
    build_simple_pattern,
    build_subcommand_pattern,
    build_wrapper_pattern,
)

__all__ = [
    "DEFAULT_RULES",
    "CompiledPattern",
    "RuleSet",
    "build_default_rule_set",
    "build_flag_pattern",
    "build_simple_pattern",
    "build_subcommand_pattern",
    "build_wrapper_pattern",
    "compile_pattern",
    "compile_rule_set",
    "load_rule_set",
]
