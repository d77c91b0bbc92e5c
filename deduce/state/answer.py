"""Terminal states carrying one resolved answer towards a parent."""

from typing import Optional

from .base import ResolutionState
from ..core.substitution import Substitution
from ..core.unifier import Unifier


class AnswerState(ResolutionState):
    """
    One answer on its way to parent.

    rule is the inference rule that produced the answer, or None for
    answers read from the store or the cache. unifier translates the
    answer into the parent's variable space.
    """

    is_answer_state = True

    def __init__(self, sub: Substitution, unifier: Unifier, parent: Optional[int], rule=None):
        super().__init__(sub, unifier, parent)
        self.rule = rule

    @property
    def answer(self) -> Substitution:
        return self.sub

    def __repr__(self):
        via = f" via {self.rule.rule_id}" if self.rule is not None else ""
        return f"AnswerState#{self.index}({self.sub}{via} -> {self.parent})"
