"""
The semantic answer cache.

Queries that are equal up to variable renaming share one equivalence
class, and each class keeps one set of answers written in the class's
canonical frame (variables V0, V1, ...). The cache unifier of a query
translates between the query's variables and that frame, so an answer
recorded through parent(X, Y) is found again through parent(A, B) or
through parent(alice, B).

Recording deduplicates: an answer is skipped when an equal or subsuming
answer is already in the class. Finding is read-only with respect to the
store: on a cache miss it reads the knowledge base and remembers what it
read, but never writes a fact.

Each class has a re-entrant lock. Callers that probe and then write (the
materialising path of AtomicState) hold the class lock across both steps.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional

from ..core.errors import CacheError, UnifierError
from ..core.query import Atom, AtomicQuery, atomic
from ..core.substitution import Substitution, EMPTY
from ..core.unification import canonical_unifier, is_variable
from ..core.unifier import Unifier, MultiUnifier

logger = logging.getLogger(__name__)


class IndexedAnswerSet:
    """
    Answers of one class, indexed by the values of any variable set.

    Indexes are built lazily the first time a lookup binds a given set of
    variables, and kept up to date on every insertion after that.
    """

    def __init__(self):
        self._answers = []
        self._members = set()
        self._indexes = {}

    def __len__(self):
        return len(self._answers)

    def __iter__(self):
        return iter(list(self._answers))

    def __contains__(self, answer):
        return answer in self._members

    def _index_for(self, variables: frozenset) -> dict:
        index = self._indexes.get(variables)
        if index is None:
            index = {}
            for answer in self._answers:
                self._index_answer(index, variables, answer)
            self._indexes[variables] = index
        return index

    @staticmethod
    def _index_answer(index, variables, answer):
        if variables <= answer.vars:
            key = frozenset(answer.project(variables).items())
            index.setdefault(key, []).append(answer)

    def get(self, partial: Substitution) -> list:
        """Every answer that agrees with all bindings of partial."""
        if partial.is_empty:
            return list(self._answers)
        index = self._index_for(partial.vars)
        return list(index.get(frozenset(partial.items()), ()))

    def covers(self, answer: Substitution) -> bool:
        """Is answer, or an answer subsuming it, already here?"""
        return answer in self._members or bool(self.get(answer))

    def add(self, answer: Substitution) -> bool:
        """Insert answer unless it is covered. Returns whether it was inserted."""
        if answer.is_empty or self.covers(answer):
            return False
        self._answers.append(answer)
        self._members.add(answer)
        for variables, index in self._indexes.items():
            self._index_answer(index, variables, answer)
        return True


@dataclass(eq=False)
class CacheEntry:
    """Handle on one equivalence class: its canonical query and its answers."""
    structural_key: tuple
    query: AtomicQuery
    answers: IndexedAnswerSet = field(default_factory=IndexedAnswerSet)
    lock: threading.RLock = field(default_factory=threading.RLock)

    def __repr__(self):
        return f"CacheEntry({self.query.pattern}, {len(self.answers)} answers)"


def _as_multi(unifier) -> MultiUnifier:
    if isinstance(unifier, Unifier):
        return MultiUnifier([unifier])
    return unifier


def _canonical_query(query: AtomicQuery, unifier: Unifier) -> AtomicQuery:
    def rename(var):
        targets = unifier.get(var)
        return next(iter(targets)) if targets else var

    atom = query.atom
    roles = tuple(rename(r) if is_variable(r) else r for r in atom.roles)
    return AtomicQuery(Atom(atom.predicate, tuple(rename(a) for a in atom.args), roles))


class SemanticCache:
    """Answers per query equivalence class, shared by every state of one session."""

    def __init__(self, kb):
        self.kb = kb
        self._entries = {}
        self._locks = {}
        self._unifiers = {}
        self._guard = threading.RLock()

    def __len__(self):
        return len(self._entries)

    def entries(self) -> list:
        return list(self._entries.values())

    def size(self) -> int:
        """Total number of answers over all classes."""
        return sum(len(e.answers) for e in self._entries.values())

    def clear(self):
        """Drop every class. States still holding an entry re-classify on their next record."""
        with self._guard:
            self._entries.clear()

    def get_cache_unifier(self, query: AtomicQuery) -> MultiUnifier:
        """Unifiers from query's variables into its class's canonical frame."""
        unifier = self._unifiers.get(query.atom)
        if unifier is None:
            unifier = canonical_unifier(query.atom)
            if not unifier:
                raise UnifierError(f"no canonical mapping for {query.pattern}")
            self._unifiers[query.atom] = unifier
        return unifier

    def lock(self, query: AtomicQuery) -> threading.RLock:
        with self._guard:
            return self._locks.setdefault(query.structural_key, threading.RLock())

    def get_entry(self, query: AtomicQuery) -> Optional[CacheEntry]:
        return self._entries.get(query.structural_key)

    def _classify(self, query: AtomicQuery) -> CacheEntry:
        with self._guard:
            entry = self._entries.get(query.structural_key)
            if entry is None:
                canonical = _canonical_query(query, self.get_cache_unifier(query).get_unifier())
                entry = CacheEntry(query.structural_key, canonical,
                                   lock=self.lock(query))
                self._entries[query.structural_key] = entry
                logger.debug("new cache class %s", canonical.pattern)
            return entry

    def record(self, query: AtomicQuery, answer: Substitution,
               entry: Optional[CacheEntry] = None, unifier=None) -> CacheEntry:
        """
        Remember answer for query; returns the class entry for reuse.

        Without an entry the query is classified first. With an entry and a
        unifier the answer is translated through that unifier. Answers
        already covered by the class are skipped.
        """
        if entry is None:
            entry = self._classify(query)
        elif entry.structural_key != query.structural_key:
            raise CacheError(f"{query.pattern} does not belong to {entry!r}")
        elif self._entries.get(entry.structural_key) is not entry:
            # the class was dropped by clear() while a state still held it
            entry = self._classify(query)
        if unifier is None:
            unifier = self.get_cache_unifier(query)

        with entry.lock:
            for translated in _as_multi(unifier).apply(answer.project(query.var_names)):
                if entry.answers.add(translated):
                    logger.debug("cached %s for %s", translated, entry.query.pattern)
        return entry

    def _cached(self, query: AtomicQuery, partial: Substitution) -> list:
        """Cached answers agreeing with partial, translated into query's frame."""
        entry = self._entries.get(query.structural_key)
        if entry is None:
            return []
        results = []
        with entry.lock:
            for unifier in self.get_cache_unifier(query):
                canonical = unifier.apply(partial)
                if canonical.is_empty and not partial.is_empty:
                    continue
                back = unifier.inverse()
                for cached in entry.answers.get(canonical):
                    answer = back.apply(cached).project(query.var_names)
                    if answer.is_empty or not answer.consistent_with(partial):
                        continue
                    if answer not in results:
                        results.append(answer)
        return results

    def answers(self, query: AtomicQuery) -> list:
        """Every cached answer of query's class, in query's frame, that fits its substitution."""
        return self._cached(query, query.substitution)

    def find_answer(self, query: AtomicQuery, sub: Substitution) -> Substitution:
        """
        An answer to query consistent with sub, or empty.

        The cache is consulted first, then the knowledge base. Nothing is
        ever written to the knowledge base.
        """
        extra = sub.project(query.var_names)
        if not query.substitution.consistent_with(extra):
            return EMPTY
        partial = query.substitution.merge(extra)

        for answer in self._cached(query, partial):
            return answer

        probe = atomic(query, partial)
        for answer in self.kb.lookup(probe):
            self.record(probe, answer)
            return answer
        return EMPTY
