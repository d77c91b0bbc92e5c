from .semantic import SemanticCache, CacheEntry, IndexedAnswerSet

__all__ = ["SemanticCache", "CacheEntry", "IndexedAnswerSet"]
