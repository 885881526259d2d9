"""Conflict Logger: record possible contradictions for human review."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import datetime
from itertools import combinations
from pathlib import Path

from precept.artifacts.base import InstructionArtifact
from precept.conflicts.base import Conflict, ConflictDetector
from precept.conflicts.polarity import DirectivePolarityDetector
from precept.locator import MATCH_ALL

logger = logging.getLogger(__name__)


def overlaps(a: InstructionArtifact, b: InstructionArtifact) -> bool:
    """Whether two artifacts can apply to the same file or scenario."""
    if any(g in MATCH_ALL for g in a.apply_to + b.apply_to):
        return True
    if set(a.apply_to) & set(b.apply_to):
        return True
    if a.language and a.language == b.language:
        return True
    return bool(a.scenario and a.scenario == b.scenario)


class ConflictLogger:
    """Runs pluggable detectors over a resolved sequence.

    Detection is best effort: a detector that fails is logged and skipped,
    and the scan itself never raises.
    """

    def __init__(
        self,
        detectors: Sequence[ConflictDetector] | None = None,
        log_path: Path | None = None,
    ) -> None:
        if detectors is None:
            detectors = [DirectivePolarityDetector()]
        self.detectors = list(detectors)
        self.log_path = log_path

    def scan(
        self,
        ordered: Sequence[InstructionArtifact],
        *,
        same_context: bool = False,
    ) -> list[Conflict]:
        """Compare every overlapping pair in resolved order.

        With ``same_context=True`` all artifacts are known to apply to one
        context and every pair is compared.
        """
        conflicts: list[Conflict] = []
        for first, second in combinations(ordered, 2):
            if not same_context and not overlaps(first, second):
                continue
            for detector in self.detectors:
                try:
                    descriptions = detector.detect(first, second)
                except Exception:
                    logger.exception(
                        "Conflict detector %s failed on %s / %s",
                        getattr(detector, "name", detector), first.id, second.id,
                    )
                    continue
                for description in descriptions:
                    conflicts.append(Conflict(first, second, description, detector.name))

        for c in conflicts:
            logger.warning("Instruction conflict (%s wins): %s", c.first.id, c.description)
        if conflicts and self.log_path:
            self._append(conflicts)
        return conflicts

    def _append(self, conflicts: list[Conflict]) -> None:
        """Append conflicts as JSON lines for the review feedback loop."""
        ts = datetime.now().isoformat(timespec="seconds")
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with self.log_path.open("a", encoding="utf-8") as f:
                for c in conflicts:
                    f.write(json.dumps({"at": ts, **c.to_dict()}, ensure_ascii=False) + "\n")
        except OSError as e:
            logger.error("Cannot write conflict log %s: %s", self.log_path, e)


def read_conflict_log(path: Path) -> list[dict]:
    """Read back the conflict log, skipping corrupt lines."""
    if not path.exists():
        return []
    records = []
    for line in path.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError:
            logger.warning("Skipping corrupt conflict log line in %s", path)
    return records
