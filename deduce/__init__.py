"""
Deduce: atomic resolution with a semantic answer cache.

A small rule-based deductive reasoner over a knowledge base of facts.
An atomic query is answered by reading matching facts or by applying
inference rules; derived answers are cached per query equivalence class,
and facts that rules must materialise are written to the store exactly
once, however many equivalent queries ask for them.

Usage:
    python -m deduce --domain family
    python -m deduce --domain marriage
"""

from .core.substitution import Substitution, merge_answers
from .core.unifier import Unifier, MultiUnifier
from .core.query import Atom, AtomicQuery, atomic, from_literal
from .core.explanation import RuleExplanation, extract_explanation, print_explanation
from .core.errors import ResolutionError, DuplicateMaterialisationError
from .core.store import Fact, KnowledgeBase
from .inference.rule import InferenceRule
from .cache.semantic import SemanticCache, CacheEntry, IndexedAnswerSet
from .state import (
    ResolutionContext, AnswerState, AtomicState, RoleExpansionState,
    RuleState, CumulativeState,
)
from .core.engine import ResolutionTree, resolution_round, resolve, run_resolution

__all__ = [
    "Substitution", "merge_answers",
    "Unifier", "MultiUnifier",
    "Atom", "AtomicQuery", "atomic", "from_literal",
    "RuleExplanation", "extract_explanation", "print_explanation",
    "ResolutionError", "DuplicateMaterialisationError",
    "Fact", "KnowledgeBase",
    "InferenceRule",
    "SemanticCache", "CacheEntry", "IndexedAnswerSet",
    "ResolutionContext", "AnswerState", "AtomicState", "RoleExpansionState",
    "RuleState", "CumulativeState",
    "ResolutionTree", "resolution_round", "resolve", "run_resolution",
]
