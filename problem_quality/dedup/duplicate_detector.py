"""Duplicate Cluster Builder - greedy single-link grouping by title similarity"""

from dataclasses import dataclass, field
from typing import AbstractSet, Callable, FrozenSet, Iterable, List, Optional, Set

from problem_quality.dedup.similarity import jaccard_similarity
from problem_quality.models.quality import DuplicateCluster, DuplicateMatch
from problem_quality.models.record import Record
from problem_quality.scoring.metrics import round_half_up
from problem_quality.text.tokenizer import normalize_words
from problem_quality.utils.logger import get_logger

logger = get_logger(__name__)

CLUSTER_THRESHOLD = 0.7
POTENTIAL_DUPLICATE_THRESHOLD = 0.6
MAX_POTENTIAL_DUPLICATES = 5


@dataclass(frozen=True)
class CorpusEntry:
    """A record reduced to what title comparison needs, tokenized once."""

    record_id: str
    title: str
    title_words: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_record(cls, record: Record) -> "CorpusEntry":
        return cls(record_id=record.id, title=record.title, title_words=normalize_words(record.title))


def build_corpus(records: Iterable[Record]) -> List[CorpusEntry]:
    """Tokenize titles once, keeping input order."""
    return [CorpusEntry.from_record(r) for r in records]


class DuplicateDetector:
    """
    Near-duplicate detection over record titles.

    cluster(): greedy pass. Each unprocessed record anchors a group and
    absorbs every later unprocessed record above the threshold. Records are
    never re-evaluated once absorbed, so the result depends on input order.

    find_similar(): one record against a corpus, for potential duplicates.

    similarity must be symmetric; defaults to Jaccard over title words.
    """

    def __init__(
        self,
        similarity: Callable[[AbstractSet[str], AbstractSet[str]], float] = jaccard_similarity,
        cluster_threshold: float = CLUSTER_THRESHOLD,
        match_threshold: float = POTENTIAL_DUPLICATE_THRESHOLD,
        max_matches: int = MAX_POTENTIAL_DUPLICATES,
    ) -> None:
        self._similarity = similarity
        self._cluster_threshold = cluster_threshold
        self._match_threshold = match_threshold
        self._max_matches = max_matches

    def cluster(self, corpus: List[CorpusEntry]) -> List[DuplicateCluster]:
        """
        Partition the corpus into disjoint duplicate clusters.

        Args:
            corpus: Entries in the order they should be scanned.

        Returns:
            Clusters of two or more members, numbered from 1.
        """
        processed: Set[str] = set()
        clusters: List[DuplicateCluster] = []

        for i, anchor in enumerate(corpus):
            if anchor.record_id in processed:
                continue

            members = [DuplicateMatch(record_id=anchor.record_id, title=anchor.title, similarity_score=1.0)]

            for candidate in corpus[i + 1:]:
                if candidate.record_id in processed or candidate.record_id == anchor.record_id:
                    continue
                sim = self._similarity(anchor.title_words, candidate.title_words)
                if sim > self._cluster_threshold:
                    members.append(DuplicateMatch(
                        record_id=candidate.record_id,
                        title=candidate.title,
                        similarity_score=round_half_up(sim, 2),
                    ))
                    processed.add(candidate.record_id)

            if len(members) > 1:
                members.sort(key=lambda m: m.similarity_score, reverse=True)
                clusters.append(DuplicateCluster(cluster_id=len(clusters) + 1, members=members))
                logger.debug("Cluster %d: %d members, anchor %r", len(clusters), len(members), anchor.title[:50])

            processed.add(anchor.record_id)

        logger.info("Duplicate clustering done: %d records -> %d clusters", len(corpus), len(clusters))
        return clusters

    def find_similar(
        self,
        title: str,
        corpus: Iterable[CorpusEntry],
        exclude_id: Optional[str] = None,
    ) -> List[DuplicateMatch]:
        """
        Records whose title similarity to `title` exceeds the match threshold.

        Returns:
            Up to max_matches entries, similarity descending.
        """
        words = normalize_words(title)
        matches: List[DuplicateMatch] = []

        for entry in corpus:
            if exclude_id is not None and entry.record_id == exclude_id:
                continue
            sim = self._similarity(words, entry.title_words)
            if sim > self._match_threshold:
                matches.append(DuplicateMatch(
                    record_id=entry.record_id,
                    title=entry.title,
                    similarity_score=round_half_up(sim, 2),
                ))

        matches.sort(key=lambda m: m.similarity_score, reverse=True)
        return matches[:self._max_matches]
