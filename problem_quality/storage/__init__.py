from problem_quality.storage.base import QualityStore
from problem_quality.storage.memory_store import InMemoryQualityStore

__all__ = [
    "QualityStore",
    "InMemoryQualityStore",
]
