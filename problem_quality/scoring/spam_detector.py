"""Spam probability - rule-based, deterministic, explainable"""

import re
from collections import Counter
from typing import List, Pattern, Tuple

from problem_quality.utils.logger import get_logger

logger = get_logger(__name__)

FLAG_WEIGHT = 0.2
PATTERN_MATCH_WEIGHT = 0.1
REPETITION_PENALTY = 0.3
REPETITION_RATIO = 0.3
REPETITION_MIN_WORD_LENGTH = 4  # words longer than 3 characters

WHITESPACE_RUN = re.compile(r"\s+")

# (flag name, pattern, match against original case)
SPAM_PATTERNS: List[Tuple[str, Pattern[str], bool]] = [
    ("promotional_phrase", re.compile(r"\b(buy now|click here|free money|guaranteed|limited time)\b"), False),
    ("scam_keyword", re.compile(r"\b(viagra|casino|lottery|winner|congratulations)\b"), False),
    ("excessive_caps", re.compile(r"[A-Z]{5,}"), True),
    ("exclamation_run", re.compile(r"!{3,}"), False),
    ("dollar_run", re.compile(r"\${2,}"), False),
]


class SpamDetector:
    """
    Spam probability from moderation flags, pattern families and word repetition.

    Every rule that fires is reported as a flag so the score can be explained.
    """

    def assess(self, title: str, description: str, flag_count: int = 0) -> Tuple[float, List[str]]:
        """
        Returns:
            (spam probability 0~1, fired rule names)
        """
        text = f"{title or ''} {description or ''}"
        text_lower = text.lower()
        flags: List[str] = []

        score = flag_count * FLAG_WEIGHT
        if flag_count > 0:
            flags.append("pending_flags")

        pattern_score, pattern_flags = self._check_patterns(text, text_lower)
        score += pattern_score
        flags.extend(pattern_flags)

        if self._is_repetitive(text_lower):
            score += REPETITION_PENALTY
            flags.append("repetitive_word")

        probability = min(score, 1.0)
        if flags:
            logger.debug("Spam rules fired for %r: %s -> %.2f", (title or "")[:30], flags, probability)
        return probability, flags

    def probability(self, title: str, description: str, flag_count: int = 0) -> float:
        return self.assess(title, description, flag_count)[0]

    @staticmethod
    def _check_patterns(text: str, text_lower: str) -> Tuple[float, List[str]]:
        """0.1 per match of each pattern family."""
        score = 0.0
        flags: List[str] = []
        for name, pattern, case_sensitive in SPAM_PATTERNS:
            matches = sum(1 for _ in pattern.finditer(text if case_sensitive else text_lower))
            if matches:
                score += matches * PATTERN_MATCH_WEIGHT
                flags.append(name)
        return score, flags

    @staticmethod
    def _is_repetitive(text_lower: str) -> bool:
        """
        Any single long word making up more than 30% of all tokens.

        Tokens come from splitting on whitespace runs, so the empty token left
        by a missing description still counts toward the total.
        """
        words = WHITESPACE_RUN.split(text_lower)
        freq = Counter(w for w in words if len(w) >= REPETITION_MIN_WORD_LENGTH)
        if not freq:
            return False
        return max(freq.values()) > len(words) * REPETITION_RATIO
