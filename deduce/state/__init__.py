from .base import ResolutionContext, ResolutionState, QueryState
from .answer import AnswerState
from .atomic import AtomicState
from .role_expansion import RoleExpansionState
from .rule import RuleState, CumulativeState

__all__ = [
    "ResolutionContext", "ResolutionState", "QueryState",
    "AnswerState", "AtomicState", "RoleExpansionState",
    "RuleState", "CumulativeState",
]
