"""
Club Stats QA - Spelling Corrector

Dictionary-based token correction run before question analysis. The
dictionary is built once from every entity corpus (full names and their
individual words, lower-cased) plus static domain terms and the analyzer's
keyword tables.
"""

import asyncio
import re
import logging
from typing import Optional, Set, List, Tuple

from club_stats_qa.config import QA_CONFIG, SpellingConfig
from club_stats_qa.constants import (
    COMMON_TERMS, STAT_TYPE_PSEUDONYMS, LOCATION_PSEUDONYMS, POSITION_PSEUDONYMS,
    TIME_FRAME_PSEUDONYMS, FIRST_PERSON_TOKENS, TEAM_ALIASES,
)
from club_stats_qa.models import EntityType, Correction, CorrectionResult
from club_stats_qa.similarity import edit_similarity

logger = logging.getLogger("club_stats_qa")

_TOKEN_SPLIT = re.compile(r"(\s+)")
_TOKEN_PARTS = re.compile(r"^(\W*)(.*?)(\W*)$", re.DOTALL)
_NON_WORD = re.compile(r"[^\w]")


def _match_case(original: str, corrected: str) -> str:
    """Carry the original token's casing onto the correction."""
    if len(original) > 1 and original.isupper():
        return corrected.upper()
    if original[:1].isupper():
        return corrected[:1].upper() + corrected[1:]
    return corrected


def keyword_vocabulary() -> Set[str]:
    """
    Every word the question analyzer matches on.

    Hyphenated words are kept both split and joined, since tokens are
    checked with their punctuation stripped ("non-penalty" -> "nonpenalty").
    """
    phrases = list(FIRST_PERSON_TOKENS) + list(TEAM_ALIASES)
    for table in (STAT_TYPE_PSEUDONYMS, LOCATION_PSEUDONYMS, POSITION_PSEUDONYMS, TIME_FRAME_PSEUDONYMS):
        for pseudonyms in table.values():
            phrases.extend(pseudonyms)

    words = set()
    for phrase in phrases:
        for word in phrase.lower().split():
            words.add(_NON_WORD.sub("", word))
            words.update(_NON_WORD.sub(" ", word).split())
    words.discard("")
    return words


class SpellingCorrector:
    def __init__(self, resolver=None, config: Optional[SpellingConfig] = None):
        """
        Args:
            resolver: EntityNameResolver supplying entity corpora. Without one
                (or when the store is down) only the static terms are used.
            config: thresholds and the strict word list
        """
        self.resolver = resolver
        self.config = config or QA_CONFIG["spelling"]
        self._dictionary: Optional[Set[str]] = None
        self._words: List[str] = []
        self._lock = asyncio.Lock()

    @property
    def strict_words(self) -> Set[str]:
        return {w.lower() for w in self.config.strict_words}

    async def load_dictionary(self) -> Set[str]:
        if self._dictionary is not None:
            return self._dictionary

        async with self._lock:
            if self._dictionary is not None:
                return self._dictionary

            words = {term.lower() for term in COMMON_TERMS}
            words.update(keyword_vocabulary())
            words.update(self.strict_words)

            if self.resolver is not None:
                for entity_type in EntityType:
                    for name in await self.resolver.get_all_entities(entity_type):
                        lower = name.lower()
                        words.add(lower)
                        words.update(w for w in _NON_WORD.sub(" ", lower).split() if len(w) >= self.config.min_token_length)

            self._dictionary = words
            # Multi-word names can never match a single token
            self._words = sorted(w for w in words if " " not in w)
            logger.info(f"Spelling dictionary loaded: {len(words)} entries")
            return self._dictionary

    def reset_dictionary(self):
        self._dictionary = None
        self._words = []

    def _threshold_for(self, token: str, candidate: str) -> float:
        strict = self.strict_words
        if token in strict or candidate in strict:
            return self.config.strict_similarity
        return self.config.min_similarity

    def _best_candidate(self, token: str) -> Optional[Tuple[str, float]]:
        best: Optional[Tuple[str, float]] = None
        floor = min(self.config.min_similarity, self.config.strict_similarity)
        for candidate in self._words:
            longest = max(len(token), len(candidate))
            # Edit distance is at least the length difference
            if 1 - abs(len(token) - len(candidate)) / longest < floor:
                continue
            score = edit_similarity(token, candidate)
            if score < self._threshold_for(token, candidate):
                continue
            if best is None or score > best[1]:
                best = (candidate, score)
        return best

    async def needs_correction(self, word: str) -> bool:
        """True when the word is long enough to check and not in the dictionary."""
        dictionary = await self.load_dictionary()
        clean = _NON_WORD.sub("", word).lower()
        return len(clean) >= self.config.min_token_length and clean not in dictionary

    async def correct(self, question: str) -> CorrectionResult:
        dictionary = await self.load_dictionary()
        parts = _TOKEN_SPLIT.split(question)
        corrections: List[Correction] = []

        for i, part in enumerate(parts):
            if not part or part.isspace():
                continue
            leading, core, trailing = _TOKEN_PARTS.match(part).groups()
            clean = _NON_WORD.sub("", core).lower()
            if len(clean) < self.config.min_token_length or clean in dictionary:
                continue

            best = self._best_candidate(clean)
            if best is None:
                continue

            corrected = _match_case(core, best[0])
            corrections.append(Correction(original=core, corrected=corrected, confidence=best[1]))
            parts[i] = f"{leading}{corrected}{trailing}"

        if not corrections:
            return CorrectionResult(corrected_text=question)

        logger.debug(f"Spelling corrections: {[(c.original, c.corrected) for c in corrections]}")
        return CorrectionResult(corrected_text="".join(parts), corrections=corrections)
