"""shellgate error-code hierarchy.

Hierarchy
---------
::

    ShellGateError
    +-- ConfigurationError   (SG-E1xx)  fatal, raised while compiling rules
    +-- CommandError         (SG-E2xx)  raised while analysing a command line

Configuration errors abort rule compilation as a whole: the engine never
runs with a partially compiled rule set.  Command errors never escape the
decision engine; they are converted into rejection outcomes.

Usage
-----
Catch by category::

    try:
        rules = load_rule_set(raw_config)
    except ConfigurationError as exc:
        print(exc.to_dict())
"""
from __future__ import annotations

from typing import Any

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class ShellGateError(Exception):
    """Base exception for all shellgate errors.

    Attributes
    ----------
    code : str
        Error code, e.g. ``"SG-E100"``.
    message : str
        Human-readable description.
    details : dict[str, Any]
        Machine-readable context specific to the error instance.
    resolution : str
        Suggested action for the caller.
    """

    code: str = "SG-E000"
    message: str = "Unknown shellgate error"
    resolution: str = ""

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        resolution: str | None = None,
    ) -> None:
        self.details: dict[str, Any] = details or {}
        if message is not None:
            self.message = message
        if resolution is not None:
            self.resolution = resolution
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialise the error for structured output."""
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details:
            payload["detail"] = self.details
        if self.resolution:
            payload["resolution"] = self.resolution
        return {"error": payload}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


# ===================================================================
# Category base classes
# ===================================================================

class ConfigurationError(ShellGateError):
    """SG-E1xx -- Rule specification and compilation errors."""

    code = "SG-E1XX"


class CommandError(ShellGateError):
    """SG-E2xx -- Command line analysis errors."""

    code = "SG-E2XX"


# ===================================================================
# SG-E1xx  Configuration Errors
# ===================================================================

class InvalidRuleSpec(ConfigurationError):
    """SG-E100 -- A rule specification has the wrong shape."""

    code = "SG-E100"
    message = "Invalid rule specification"
    resolution = (
        "Check the offending entry: simple rules need 'commands', "
        "subcommand rules need 'command' and 'subcommands', wrapper rules "
        "need 'command', regex rules need 'pattern'."
    )


class InvalidPattern(ConfigurationError):
    """SG-E101 -- A rule produced a regular expression that does not compile."""

    code = "SG-E101"
    message = "Rule pattern is not a valid regular expression"
    resolution = "Fix the regular expression syntax of the offending rule."


# ===================================================================
# SG-E2xx  Command Errors
# ===================================================================

class UnparseableCommand(CommandError):
    """SG-E200 -- The command line is not valid shell syntax."""

    code = "SG-E200"
    message = "Command line could not be parsed"
    resolution = (
        "Close all quotes and control structures, and do not end the "
        "line with a dangling operator."
    )
