"""
The atomic resolver: resolution state of one atomic query.

Children of an AtomicState, produced lazily in this order:
    1. facts matching the query, read from the knowledge base
    2. answers already cached for the query's equivalence class
    3. one RuleState per rule whose head unifies with the atom (per unifier),
       unless the query is already being resolved higher up the tree

Every child answer comes back through propagate_answer, which first
consumes it -- merges, derives or materialises, and records it in the
semantic cache -- and then passes it either to role expansion or to the
parent.

The materialising path is where the single-write guarantee lives: before
a derived fact is written, the cache (and through it the store) is probed
for the rule head and, when the query is equivalent to the head, for the
query itself. Only when both probes come back empty is the fact written.
"""

import logging

from .answer import AnswerState
from .base import QueryState
from .role_expansion import RoleExpansionState
from .rule import RuleState
from ..core.explanation import RuleExplanation
from ..core.query import atomic
from ..core.substitution import Substitution, EMPTY, merge_answers
from ..core.unifier import Unifier

logger = logging.getLogger(__name__)


class AtomicState(QueryState):

    def __init__(self, query, sub, unifier, parent, ctx):
        super().__init__(atomic(query, sub), sub, unifier, parent, ctx)
        self._cache_unifier = None
        self._cache_entry = None
        self.in_flight = None

    @property
    def cache_unifier(self):
        """Unifier into the query's cache class. Computed once per state."""
        if self._cache_unifier is None:
            self._cache_unifier = self.ctx.cache.get_cache_unifier(self.query)
        return self._cache_unifier

    @property
    def cache_entry(self):
        return self._cache_entry

    def _child_states(self):
        query = self.query
        if query is None:
            return
        seen = set()
        for answer in self.ctx.kb.lookup(query):
            seen.add(answer)
            yield AnswerState(answer, Unifier.identity(), self.index)
        for answer in self.ctx.cache.answers(query):
            if answer not in seen:
                seen.add(answer)
                yield AnswerState(answer, Unifier.identity(), self.index)

        if not self.ctx.acquire(query.key):
            logger.debug("cycle: %s already in flight, rules skipped", query.pattern)
            return
        self.in_flight = query.key
        for rule in self.ctx.rules:
            for unifier in rule.unifiers(query.atom):
                yield RuleState(rule, unifier, query.substitution, self.index, self.ctx)
        self.release()

    def release(self):
        """Drop this query from the cycle guard, if it holds a place there."""
        if self.in_flight is not None:
            key, self.in_flight = self.in_flight, None
            self.ctx.release(key)

    def propagate_answer(self, candidate):
        answer = self.consume_answer(candidate)
        if answer.is_empty:
            return None

        atom = self.query.atom
        if candidate.rule is not None and atom.requires_role_expansion:
            # parent is this state, not ours: expansions are consumed here too
            return RoleExpansionState(answer, self.unifier, atom.role_expansion_variables,
                                      self.index, self.ctx)
        return AnswerState(answer, self.unifier, self.parent)

    def consume_answer(self, candidate) -> Substitution:
        query = self.query
        base = candidate.sub
        rule = candidate.rule
        unifier = candidate.unifier
        if query is None or base.is_empty:
            return EMPTY

        if rule is None:
            answer = merge_answers(base, query.substitution).project(query.var_names)
        elif rule.requires_materialisation(query.atom):
            answer = self._materialised_answer(base, rule, unifier)
        else:
            answer = self._rule_answer(base, rule, unifier)
        return self._record_answer(query, answer)

    def _record_answer(self, query, answer: Substitution) -> Substitution:
        if answer.is_empty:
            return answer
        cache = self.ctx.cache
        if self._cache_entry is None:
            self._cache_entry = cache.record(query, answer)
            return answer
        self._cache_entry = cache.record(query, answer, self._cache_entry, self.cache_unifier)
        return answer

    def _rule_answer(self, base, rule, unifier) -> Substitution:
        query = self.query
        answer = unifier.apply(merge_answers(base, rule.head.role_substitution))
        if answer.is_empty:
            return answer

        merged = merge_answers(answer, query.substitution)
        if merged.is_empty:
            return EMPTY
        return merged.project(query.var_names).explain(
            RuleExplanation(rule.rule_id, query.pattern, (base,))
        )

    def _materialised_answer(self, base, rule, unifier) -> Substitution:
        query = self.query
        cache = self.ctx.cache
        explanation = RuleExplanation(rule.rule_id, query.pattern, (base,))

        translated = unifier.apply(base)
        if translated.is_empty:
            # e.g. ancestor(A, A) against {X: alice, Y: bob}
            return EMPTY
        subbed_query = atomic(query, translated)
        rule_head = atomic(rule.head, base)

        query_vars = (unifier.keys()
                      if len(query.var_names) < len(rule_head.var_names)
                      else rule_head.var_names | rule.head.role_vars)

        head_equiv = subbed_query is not None and subbed_query.is_equivalent(rule_head)

        with cache.lock(rule_head):
            # write vs. reuse is decided on the untranslated probes
            found = cache.find_answer(rule_head, base)
            if found.is_empty and head_equiv:
                found_query = cache.find_answer(query, translated)
            else:
                found_query = EMPTY

            if found.is_empty and found_query.is_empty:
                fact = next(self.ctx.kb.materialise(rule_head, base), None)
                if fact is None:
                    logger.debug("rule %s produced nothing for %s", rule.rule_id, rule_head.pattern)
                    return EMPTY
                if not head_equiv:
                    cache.record(rule_head, fact.explain(explanation))
                answer = unifier.apply(fact.project(query_vars))
            elif not found.is_empty:
                found = merge_answers(found, rule.head.role_substitution)
                answer = unifier.apply(found.project(query_vars))
                logger.debug("reused %s for %s, nothing written", found, rule_head.pattern)
            else:
                answer = found_query
                logger.debug("reused %s for %s, nothing written", answer, query.pattern)

        if answer.is_empty:
            return answer
        merged = merge_answers(answer, query.substitution)
        if merged.is_empty:
            return EMPTY
        return merged.project(query.var_names).explain(explanation)
