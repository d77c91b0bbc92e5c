"""
Rule application states.

RuleState applies one rule to the AtomicState that spawned it. The
parent's bindings are pushed into the rule's variable space, the body is
resolved, and every body answer goes back to the parent tagged with the
rule and the unifier that relates the rule to the parent's query.

CumulativeState resolves a conjunction of atoms left to right: the first
atom is resolved, and each of its answers seeds a CumulativeState for
the remaining atoms with the accumulated bindings.
"""

import logging

from .answer import AnswerState
from .base import QueryState, ResolutionState
from ..core.explanation import JoinExplanation
from ..core.query import AtomicQuery
from ..core.substitution import merge_answers
from ..core.unifier import Unifier

logger = logging.getLogger(__name__)


class RuleState(QueryState):

    def __init__(self, rule, unifier, sub, parent, ctx):
        rule_sub = unifier.inverse().apply(sub)
        super().__init__(rule.head_query, rule_sub, unifier, parent, ctx)
        self.rule = rule
        # the parent's bindings do not fit the head: nothing to resolve
        self.consistent = ((sub.is_empty or not rule_sub.is_empty)
                           and rule_sub.consistent_with(rule.head.role_substitution))

    def _child_states(self):
        if not self.consistent:
            logger.debug("rule %s: bindings do not fit %s", self.rule.rule_id, self.rule.head)
            return
        yield CumulativeState(self.rule.body, self.sub, self.index, self.ctx)

    def consume_answer(self, candidate):
        return candidate.sub

    def propagate_answer(self, candidate):
        answer = self.consume_answer(candidate)
        # a query repeating a variable needs equal values in the body answer
        if answer.is_empty or self.unifier.apply(answer).is_empty:
            return None
        return AnswerState(answer, self.unifier, self.parent, rule=self.rule)


class CumulativeState(ResolutionState):

    def __init__(self, atoms, sub, parent, ctx, premises=()):
        super().__init__(sub, Unifier.identity(), parent, ctx)
        self.atoms = tuple(atoms)
        self.premises = tuple(premises)

    def _child_states(self):
        if not self.atoms:
            yield AnswerState(self.sub.explain(JoinExplanation(self.premises)),
                              Unifier.identity(), self.parent)
            return
        from .atomic import AtomicState
        yield AtomicState(AtomicQuery(self.atoms[0]), self.sub, Unifier.identity(),
                          self.index, self.ctx)

    def propagate_answer(self, candidate):
        merged = merge_answers(self.sub, candidate.sub)
        if merged.is_empty:
            return None
        premises = self.premises + (candidate.sub,)
        rest = self.atoms[1:]
        if rest:
            return CumulativeState(rest, merged, self.parent, self.ctx, premises)
        return AnswerState(merged.explain(JoinExplanation(premises)),
                           Unifier.identity(), self.parent)
