"""
String similarity scores used by name resolution and spelling correction.

All scores are normalized to [0, 1] where 1 means identical.
"""

import re
from typing import Set

from rapidfuzz.distance import JaroWinkler, Levenshtein, OSA

from club_stats_qa.config import QA_CONFIG, ResolverConfig


_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(text: str) -> str:
    """Trim, collapse whitespace, strip punctuation, lower-case."""
    text = _WHITESPACE.sub(" ", text.strip())
    return _PUNCTUATION.sub("", text).lower()


def levenshtein_similarity(a: str, b: str) -> float:
    """1 - levenshtein(a, b) / max(len(a), len(b))."""
    return Levenshtein.normalized_similarity(a, b)


def edit_similarity(a: str, b: str) -> float:
    """
    Like levenshtein_similarity but an adjacent transposition costs one edit,
    so "gaols" vs "goals" scores 0.8 rather than 0.6.
    """
    return OSA.normalized_similarity(a, b)


def jaro_winkler_similarity(a: str, b: str) -> float:
    return JaroWinkler.normalized_similarity(a, b)


def _bigrams(text: str) -> Set[str]:
    return {text[i:i + 2] for i in range(len(text) - 1)}


def dice_coefficient(a: str, b: str) -> float:
    """Sorensen-Dice over the sets of 2-character shingles."""
    if a == b:
        return 1.0
    first, second = _bigrams(a), _bigrams(b)
    if not first or not second:
        return 0.0
    return 2 * len(first & second) / (len(first) + len(second))


def combined_similarity(a: str, b: str, config: ResolverConfig = None) -> float:
    """Weighted blend of Jaro-Winkler, Levenshtein and Dice on normalized strings."""
    config = config or QA_CONFIG["resolver"]
    a, b = normalize_name(a), normalize_name(b)
    score = (
        jaro_winkler_similarity(a, b) * config.jaro_winkler_weight
        + levenshtein_similarity(a, b) * config.levenshtein_weight
        + dice_coefficient(a, b) * config.dice_weight
    )
    return max(0.0, min(1.0, score))
