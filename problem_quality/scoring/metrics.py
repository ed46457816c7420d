"""Metric Calculators - completeness, readability, engagement, uniqueness, overall"""

import math
from typing import Dict, Optional, Sequence, Tuple

# ─── Completeness buckets (min length, points), checked top-down ───
TITLE_LENGTH_POINTS: Sequence[Tuple[int, int]] = ((20, 30), (10, 20), (5, 10))
DESCRIPTION_LENGTH_POINTS: Sequence[Tuple[int, int]] = ((200, 50), (100, 35), (50, 20), (20, 10))
CATEGORY_POINTS = 20

# ─── Readability ───
READABILITY_BASE = 50
OPTIMAL_WORDS_PER_SENTENCE = (10, 20)
ACCEPTABLE_WORDS_PER_SENTENCE = (5, 30)
OPTIMAL_CHARS_PER_WORD = (4, 6)
ACCEPTABLE_CHARS_PER_WORD = (3, 8)
OPTIMAL_BONUS = 25
ACCEPTABLE_BONUS = 15

# ─── Engagement: (min votes per day, score) ───
NEUTRAL_ENGAGEMENT = 50
VOTES_PER_DAY_SCORES: Sequence[Tuple[float, int]] = ((5, 100), (2, 80), (1, 60), (0.5, 40), (0.1, 20))
MIN_ENGAGEMENT = 10

# ─── Uniqueness: (min similarity, score) ───
SIMILARITY_UNIQUENESS_SCORES: Sequence[Tuple[float, int]] = ((0.9, 10), (0.8, 30), (0.7, 50), (0.6, 70))
LOW_SIMILARITY_UNIQUENESS = 90
NO_MATCH_UNIQUENESS = 100

# ─── Overall weights, sum to 1.0 ───
QUALITY_WEIGHTS: Dict[str, float] = {
    "completeness": 0.25,
    "readability": 0.20,
    "engagement": 0.25,
    "uniqueness": 0.20,
    "spam": 0.10,
}


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with ties going up (2.5 -> 3), unlike the built-in round()."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def completeness_score(title_length: int, description_length: int, has_category: bool) -> int:
    """Additive length/category buckets, capped at 100."""
    score = 0

    for min_length, points in TITLE_LENGTH_POINTS:
        if title_length >= min_length:
            score += points
            break

    for min_length, points in DESCRIPTION_LENGTH_POINTS:
        if description_length >= min_length:
            score += points
            break

    if has_category:
        score += CATEGORY_POINTS

    return min(score, 100)


def readability_score(word_count: int, sentence_count: int, description_length: int) -> int:
    """
    Sentence-length and word-length heuristic.

    Returns 0 when there are no sentences or no words.
    """
    if sentence_count == 0 or word_count == 0:
        return 0

    avg_words_per_sentence = word_count / sentence_count
    avg_chars_per_word = description_length / word_count

    score = READABILITY_BASE
    score += _range_bonus(avg_words_per_sentence, OPTIMAL_WORDS_PER_SENTENCE, ACCEPTABLE_WORDS_PER_SENTENCE)
    score += _range_bonus(avg_chars_per_word, OPTIMAL_CHARS_PER_WORD, ACCEPTABLE_CHARS_PER_WORD)

    return min(max(score, 0), 100)


def _range_bonus(value: float, optimal: Tuple[float, float], acceptable: Tuple[float, float]) -> int:
    if optimal[0] <= value <= optimal[1]:
        return OPTIMAL_BONUS
    if acceptable[0] <= value <= acceptable[1]:
        return ACCEPTABLE_BONUS
    return 0


def engagement_score(vote_count: int, days_since_creation: int) -> int:
    """Step function over votes per day. Day-zero records get a neutral 50."""
    if days_since_creation == 0:
        return NEUTRAL_ENGAGEMENT

    votes_per_day = vote_count / days_since_creation
    for min_rate, score in VOTES_PER_DAY_SCORES:
        if votes_per_day >= min_rate:
            return score
    return MIN_ENGAGEMENT


def uniqueness_score(max_similarity: Optional[float]) -> int:
    """
    Map the highest similarity to any comparable record onto 0-100.

    Args:
        max_similarity: None when there is nothing comparable.
    """
    if max_similarity is None:
        return NO_MATCH_UNIQUENESS

    for min_similarity, score in SIMILARITY_UNIQUENESS_SCORES:
        if max_similarity >= min_similarity:
            return score
    return LOW_SIMILARITY_UNIQUENESS


def overall_quality_score(
    completeness: float,
    readability: float,
    engagement: float,
    uniqueness: float,
    spam_probability: float,
) -> int:
    """Weighted sum of the sub-scores with spam inverted, rounded half-up."""
    weighted = (
        completeness * QUALITY_WEIGHTS["completeness"]
        + readability * QUALITY_WEIGHTS["readability"]
        + engagement * QUALITY_WEIGHTS["engagement"]
        + uniqueness * QUALITY_WEIGHTS["uniqueness"]
        + (100 - spam_probability * 100) * QUALITY_WEIGHTS["spam"]
    )
    return int(round_half_up(weighted))
