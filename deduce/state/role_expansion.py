"""
Role expansion.

A role variable in a query, as in marriage(R: X, spouse: Y), matches the
role a fact names and every super-role of it. Answers derived by rules
bind the role variable to exactly the role the rule head names, so they
are widened here before being accepted: one answer per combination of
super-roles. The widened answers go back to the AtomicState that asked
for the expansion, which consumes and caches them like any other answer.
"""

from itertools import product

from .answer import AnswerState
from .base import ResolutionState
from ..core.substitution import Substitution
from ..core.unifier import Unifier


class RoleExpansionState(ResolutionState):

    def __init__(self, sub, unifier, role_vars, parent, ctx):
        super().__init__(sub, unifier, parent, ctx)
        self.role_vars = tuple(sorted(v for v in role_vars if v in sub))

    def expansions(self) -> list:
        kb = self.ctx.kb
        choices = [kb.super_roles(self.sub[var]) for var in self.role_vars]
        results = []
        for labels in product(*choices):
            bindings = dict(self.sub)
            bindings.update(zip(self.role_vars, labels))
            results.append(Substitution(bindings, self.sub.explanation))
        return results

    def _child_states(self):
        for expanded in self.expansions():
            yield AnswerState(expanded, Unifier.identity(), self.parent)
