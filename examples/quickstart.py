#!/usr/bin/env python3
"""shellgate quickstart.

Demonstrates the core workflow:

1. Load a rule set from a sectioned configuration mapping.
2. Create a DecisionEngine holding it.
3. Decide a few command lines and print the justification.
4. Build the audit entry for a decision.
5. Swap in the shipped default rules.

Run:
    python examples/quickstart.py
"""
from __future__ import annotations

import logging

from shellgate import DecisionEngine, build_audit_entry, build_default_rule_set, load_rule_set

CONFIG = {
    "deny": {
        "simple": [{"name": "privilege escalation", "commands": ["sudo", "doas"]}],
    },
    "wrappers": {
        "command": [{"command": "timeout", "flags": ["<arg>"]}],
    },
    "commands": {
        "subcommand": [
            {"command": "git", "subcommands": ["status", "diff", "log"], "flags": ["-C <arg>"]},
        ],
        "simple": [{"name": "python", "commands": ["pytest"]}],
    },
    "general": {"allowed_subshell_commands": ["pwd"]},
}


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    # -- Step 1: Compile the rule set ----------------------------------------
    rules = load_rule_set(CONFIG)
    print(f"[1] Rule set compiled: {rules.summary()}")

    # -- Step 2: Create the engine -------------------------------------------
    engine = DecisionEngine(rules)
    print("[2] Decision engine ready")

    # -- Step 3: Decide some command lines -----------------------------------
    for line in [
        "git status && timeout 60 pytest -x",
        "git -C $(pwd) log",
        "sudo git status",
        "git push --force",
        "echo 'unterminated",
    ]:
        decision = engine.decide(line)
        verdict = "APPROVE" if decision.approved else "ASK"
        print(f"[3] {verdict:<7} {line!r}: {decision.reason}")

    # -- Step 4: Audit entry -------------------------------------------------
    entry = build_audit_entry(engine.decide("git diff | cat"))
    print(f"[4] Audit: {entry.to_json()}")

    # -- Step 5: Reload with the shipped defaults ------------------------------
    engine.reload(build_default_rule_set())
    decision = engine.decide("git diff | cat")
    print(f"[5] After reload: approved={decision.approved} reason={decision.reason!r}")


if __name__ == "__main__":
    main()
