"""Similarity Engine - Jaccard overlap of normalized word sets"""

from typing import AbstractSet

from problem_quality.text.tokenizer import normalize_words


def jaccard_similarity(words_a: AbstractSet[str], words_b: AbstractSet[str]) -> float:
    """
    |A ∩ B| / |A ∪ B|, 0.0 when both sets are empty.

    Both sets must already be normalized by the tokenizer.
    """
    union = len(words_a | words_b)
    if union == 0:
        return 0.0
    return len(words_a & words_b) / union


def title_similarity(title_a: str, title_b: str) -> float:
    """Jaccard similarity of two raw titles."""
    return jaccard_similarity(normalize_words(title_a), normalize_words(title_b))
