"""shellgate -- command approval for automated agents.

Decides whether a proposed shell command line may run without human
confirmation, using a static, auditable rule set.  Commands are parsed,
never executed.

Components
----------
1. Pattern compiler (:mod:`shellgate.rules`)
2. Substitution detector (:mod:`shellgate.defense`)
3. Segmenter and wrapper resolver (:mod:`shellgate.shell`)
4. Decision engine (:mod:`shellgate.engine`)
5. Audit records (:mod:`shellgate.audit`)
"""
from __future__ import annotations

__version__ = "0.1.0"

from shellgate.audit import AuditEntry, AuditSegment, build_audit_entry
from shellgate.core.config import GeneralSettings
from shellgate.core.errors import (
    CommandError,
    ConfigurationError,
    InvalidPattern,
    InvalidRuleSpec,
    ShellGateError,
    UnparseableCommand,
)
from shellgate.core.types import (
    PatternKind,
    RegexSpec,
    RejectionCode,
    RuleSetSpec,
    SimpleSpec,
    SubcommandSpec,
    WrapperSpec,
)
from shellgate.engine import (
    Decision,
    DecisionEngine,
    Matched,
    Rejected,
    Segment,
    check_deny,
    check_safe,
    decide,
)
from shellgate.rules import (
    DEFAULT_RULES,
    CompiledPattern,
    RuleSet,
    build_default_rule_set,
    compile_rule_set,
    load_rule_set,
)

__all__ = [
    # Meta
    "__version__",
    # Types & config
    "GeneralSettings",
    "PatternKind",
    "RejectionCode",
    "RuleSetSpec",
    "SimpleSpec",
    "SubcommandSpec",
    "WrapperSpec",
    "RegexSpec",
    # Error hierarchy
    "ShellGateError",
    "ConfigurationError",
    "CommandError",
    "InvalidRuleSpec",
    "InvalidPattern",
    "UnparseableCommand",
    # Rules
    "CompiledPattern",
    "RuleSet",
    "DEFAULT_RULES",
    "build_default_rule_set",
    "compile_rule_set",
    "load_rule_set",
    # Engine
    "Decision",
    "DecisionEngine",
    "Matched",
    "Rejected",
    "Segment",
    "check_deny",
    "check_safe",
    "decide",
    # Audit
    "AuditEntry",
    "AuditSegment",
    "build_audit_entry",
]
