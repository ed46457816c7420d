"""Tokenizer / Normalizer - word sets and text statistics"""

import re
from dataclasses import dataclass, field
from typing import FrozenSet, List

MIN_NORMALIZED_WORD_LENGTH = 3  # words must be longer than 2 characters

SENTENCE_SPLIT_PATTERN = re.compile(r"[.!?]+")


@dataclass(frozen=True)
class TextStats:
    """Normalized view of a record's title and description."""

    normalized_words: FrozenSet[str] = field(default_factory=frozenset)
    title_words: FrozenSet[str] = field(default_factory=frozenset)
    word_count: int = 0
    sentence_count: int = 0
    title_length: int = 0
    description_length: int = 0


def normalize_words(text: str) -> FrozenSet[str]:
    """
    Lowercase, split on whitespace, keep words longer than 2 characters.

    Punctuation stays attached to the word ("quality." != "quality").
    """
    return frozenset(
        word for word in text.lower().split()
        if len(word) >= MIN_NORMALIZED_WORD_LENGTH
    )


def count_words(text: str) -> int:
    """All whitespace-delimited tokens, short ones included."""
    return len(text.split())


def split_sentences(text: str) -> List[str]:
    """Non-empty segments between runs of ., ! and ?."""
    return [s for s in SENTENCE_SPLIT_PATTERN.split(text or "") if s.strip()]


def tokenize(title: str, description: str) -> TextStats:
    """
    Compute the text statistics every metric works from.

    Args:
        title: Record title.
        description: Record description, may be empty.

    Returns:
        TextStats. sentence_count comes from the description alone and is 0
        for an empty description.
    """
    title = title or ""
    description = description or ""
    combined = f"{title} {description}"

    return TextStats(
        normalized_words=normalize_words(combined),
        title_words=normalize_words(title),
        word_count=count_words(combined),
        sentence_count=len(split_sentences(description)),
        title_length=len(title),
        description_length=len(description),
    )
