"""Detection of dangerous shell constructs.

* **Substitution** -- ``$(...)`` and backtick detection with a per
  occurrence allow list (:mod:`~shellgate.defense.substitution`).
"""
from __future__ import annotations

from shellgate.defense.substitution import (
    Substitution,
    SubstitutionDetector,
    SubstitutionVerdict,
    check_substitutions,
    contains_substitution,
    find_quoted_heredoc_ranges,
    find_substitutions,
)

__all__ = [
    "Substitution",
    "SubstitutionDetector",
    "SubstitutionVerdict",
    "check_substitutions",
    "contains_substitution",
    "find_quoted_heredoc_ranges",
    "find_substitutions",
]
