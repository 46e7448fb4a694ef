"""Exact-ID duplicate detection and advisory text similarity."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

STOP_WORDS = ("what", "how", "why", "when", "where", "is", "are", "the", "a", "an")
_STOP_WORD_RE = re.compile(r"\b(?:" + "|".join(STOP_WORDS) + r")\b")


def is_duplicate(candidate_id: str, existing_ids: Iterable[str]) -> bool:
    """Exact, case-sensitive membership test."""
    return any(candidate_id == existing for existing in existing_ids)


def _tokens(text: str) -> List[str]:
    stripped = _STOP_WORD_RE.sub("", (text or "").lower().strip())
    return stripped.split()


def similarity(text_a: str, text_b: str) -> float:
    """Share of overlapping non-stop-word tokens, in [0, 1]."""
    tokens_a = _tokens(text_a)
    tokens_b = _tokens(text_b)
    denominator = max(len(tokens_a), len(tokens_b))
    if denominator == 0:
        return 0.0
    matching = [token for token in tokens_a if token in tokens_b]
    return min(1.0, len(matching) / denominator)


def find_similar(
    text: str,
    candidates: Iterable[Tuple[str, str]],
    threshold: float = 0.8,
) -> Optional[Tuple[str, float]]:
    """Return ``(id, score)`` of the best ``(id, text)`` pair at or above ``threshold``."""
    best: Optional[Tuple[str, float]] = None
    for candidate_id, candidate_text in candidates:
        score = similarity(text, candidate_text)
        if score >= threshold and (best is None or score > best[1]):
            best = (candidate_id, score)
    return best
