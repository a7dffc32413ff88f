"""Shell syntax handling: parsing, segmentation and wrapper resolution."""
from __future__ import annotations

from shellgate.shell.segmenter import ShellSegment, split_command_chain
from shellgate.shell.wrappers import strip_wrappers

__all__ = [
    "ShellSegment",
    "split_command_chain",
    "strip_wrappers",
]
