"""
Resolution states: the nodes of a resolution tree.

A state means "resolve this under substitution S and report to parent P".
States never own their parent. The tree driver keeps every state in an
arena (a list) and a state refers to its parent by index; parent None
marks the top of the tree.

Everything a state needs from the world -- the knowledge base, the rules,
the semantic cache and the set of queries currently being resolved (the
cycle guard) -- comes from one shared ResolutionContext, passed by
reference to every state of the tree.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..cache.semantic import SemanticCache
from ..core.errors import CycleGuardError
from ..core.store import KnowledgeBase
from ..core.substitution import Substitution, EMPTY
from ..core.unifier import Unifier


@dataclass
class ResolutionContext:
    """
    Shared by every state of one session.

    subgoals: equivalence keys of the atomic queries currently being
              resolved. A key is added when a query starts applying rules
              and removed only once all of its children are exhausted.
    """
    kb: KnowledgeBase = field(default_factory=KnowledgeBase)
    rules: tuple = ()
    cache: Optional[SemanticCache] = None
    subgoals: set = field(default_factory=set)

    def __post_init__(self):
        self.rules = tuple(self.rules)
        if self.cache is None:
            self.cache = SemanticCache(self.kb)

    def acquire(self, key) -> bool:
        """Mark key in flight. False if it already is (a cycle)."""
        if key in self.subgoals:
            return False
        self.subgoals.add(key)
        return True

    def release(self, key):
        if key not in self.subgoals:
            raise CycleGuardError(f"query {key} released but not in flight")
        self.subgoals.remove(key)


class ResolutionState:
    """Base of every state: a substitution, a unifier to the parent, a parent index."""

    is_answer_state = False

    def __init__(self, sub: Substitution, unifier: Unifier, parent: Optional[int], ctx=None):
        self.sub = sub if sub is not None else EMPTY
        self.unifier = unifier if unifier is not None else Unifier.identity()
        self.parent = parent
        self.ctx = ctx
        self.index = None
        self._children = None

    @property
    def is_top_state(self) -> bool:
        return self.parent is None

    def _child_states(self):
        return iter(())

    def generate_child_state(self):
        """Next child of this state, or None once it has no more."""
        if self._children is None:
            self._children = self._child_states()
        return next(self._children, None)

    def __repr__(self):
        return f"{type(self).__name__}#{self.index}({self.sub})"


class QueryState(ResolutionState):
    """A state resolving a query: it consumes child answers and propagates results."""

    def __init__(self, query, sub, unifier, parent, ctx):
        super().__init__(sub, unifier, parent, ctx)
        self.query = query

    def consume_answer(self, candidate) -> Substitution:
        raise NotImplementedError

    def propagate_answer(self, candidate):
        raise NotImplementedError
