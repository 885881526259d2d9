"""Heuristic detector for "always X" / "never X" style contradictions."""

from __future__ import annotations

import re

from precept.artifacts.base import InstructionArtifact

_LIST_MARKER = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+")
_SENTENCE_SPLIT = re.compile(r"(?<=[.!;])\s+")
_EMPHASIS = re.compile(r"[*_`]+")

# Negative forms first so "do not" wins over "do" and "must not" over "must".
_NEGATIVE = re.compile(
    r"^(?:never|must not|mustn't|should not|shouldn't|do not|don't|avoid|no longer use)\s+(.+)$"
)
_POSITIVE = re.compile(r"^(?:always|must|should|use|prefer|do)\s+(.+)$")
_LEADING_VERB = re.compile(r"^(?:use|using|to use)\s+")
_TRAILING = re.compile(r"[\s.!;:,]+$")


def _subject(text: str) -> str:
    text = _LEADING_VERB.sub("", text.strip())
    text = _TRAILING.sub("", text)
    return re.sub(r"\s+", " ", text)


def extract_directives(body: str) -> dict[str, bool]:
    """Map normalized directive subject → True (required) / False (forbidden).

    Headings and code fences are skipped. When one artifact states both
    polarities for a subject, the last one wins.
    """
    directives: dict[str, bool] = {}
    in_fence = False
    for raw in body.splitlines():
        line = raw.strip()
        if line.startswith("```") or line.startswith("~~~"):
            in_fence = not in_fence
            continue
        if in_fence or not line or line.startswith("#"):
            continue
        line = _EMPHASIS.sub("", _LIST_MARKER.sub("", line))
        for sentence in _SENTENCE_SPLIT.split(line):
            s = sentence.strip().lower()
            neg = _NEGATIVE.match(s)
            if neg:
                subject = _subject(neg.group(1))
                if subject:
                    directives[subject] = False
                continue
            pos = _POSITIVE.match(s)
            if pos:
                subject = _subject(pos.group(1))
                if subject:
                    directives[subject] = True
    return directives


class DirectivePolarityDetector:
    """Flags subjects one artifact requires and the other forbids."""

    @property
    def name(self) -> str:
        return "directive-polarity"

    def detect(self, first: InstructionArtifact, second: InstructionArtifact) -> list[str]:
        a = extract_directives(first.body)
        if not a:
            return []
        b = extract_directives(second.body)
        found = []
        for subject in sorted(a.keys() & b.keys()):
            if a[subject] != b[subject]:
                verb_a = "requires" if a[subject] else "forbids"
                verb_b = "requires" if b[subject] else "forbids"
                found.append(
                    f"{first.id} {verb_a} '{subject}' but {second.id} {verb_b} it"
                )
        return found
