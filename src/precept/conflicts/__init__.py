"""Conflict detection between instruction artifacts.

Detection is a review aid, not a contract: detectors are pluggable and
best effort. Findings are logged and optionally appended to
``.copilot/conflicts.jsonl`` for a human to decide.
"""

from precept.conflicts.base import Conflict, ConflictDetector
from precept.conflicts.logger import ConflictLogger, overlaps, read_conflict_log
from precept.conflicts.polarity import DirectivePolarityDetector, extract_directives

__all__ = [
    "Conflict",
    "ConflictDetector",
    "ConflictLogger",
    "DirectivePolarityDetector",
    "extract_directives",
    "overlaps",
    "read_conflict_log",
]
