"""shellgate general settings.

Defines the validated settings model that governs how command
substitution is treated.  All defaults are fail-secure: substitution is
forbidden and no inner command is exempt.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GeneralSettings(BaseModel):
    """General settings attached to a compiled rule set.

    A minimal configuration (no fields at all) forbids every ``$(...)``
    and backtick construct.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allow_subshells: bool = Field(
        default=False,
        description="When True, every $(...) construct is permitted.",
    )
    allow_backticks: bool = Field(
        default=False,
        description="When True, every backtick construct is permitted.",
    )
    allowed_subshell_commands: frozenset[str] = Field(
        default=frozenset(),
        description=(
            "Inner commands (first word of the substitution) that are "
            "permitted even when the matching global flag is off."
        ),
    )

    @field_validator("allowed_subshell_commands")
    @classmethod
    def _strip_blank_commands(cls, value: frozenset[str]) -> frozenset[str]:
        return frozenset(cmd.strip() for cmd in value if cmd.strip())
