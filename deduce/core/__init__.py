from .substitution import Substitution, merge_answers
from .unifier import Unifier, MultiUnifier
from .unification import (
    is_variable, implicit_role_var, unify_atoms,
    canonical_form, canonical_unifier,
)
from .query import Atom, AtomicQuery, atomic, from_literal
from .explanation import (
    LookupExplanation, JoinExplanation, RuleExplanation,
    extract_explanation, print_explanation,
)
from .errors import (
    ResolutionError, DuplicateMaterialisationError, CycleGuardError,
    UnifierError, CacheError, RuleError,
)
from .store import Fact, KnowledgeBase

__all__ = [
    "Substitution", "merge_answers",
    "Unifier", "MultiUnifier",
    "is_variable", "implicit_role_var", "unify_atoms",
    "canonical_form", "canonical_unifier",
    "Atom", "AtomicQuery", "atomic", "from_literal",
    "LookupExplanation", "JoinExplanation", "RuleExplanation",
    "extract_explanation", "print_explanation",
    "ResolutionError", "DuplicateMaterialisationError", "CycleGuardError",
    "UnifierError", "CacheError", "RuleError",
    "Fact", "KnowledgeBase",
]
