"""
Domain: Marriage (relations with roles).

Roles form a hierarchy:

    wife    -> spouse -> partner
    husband -> spouse -> partner

Marriages name the specific roles. A rule derives a symmetric union
relation between the two spouses; unions are relations, so every derived
union is materialised as a new fact.

    union(spouse: X, spouse: Y) :- marriage(wife: X, husband: Y)

Querying union(R: X, spouse: Y) with a role variable R shows role
expansion: a derived union binds R to spouse, and expansion adds the
answer with R bound to partner as well.
"""

from ..core.query import Atom
from ..core.store import KnowledgeBase
from ..inference.rule import InferenceRule
from ..state.base import ResolutionContext

ROLES = [
    ("wife",    "spouse"),
    ("husband", "spouse"),
    ("spouse",  "partner"),
]

MARRIAGES = [
    ("ann",  "ben"),
    ("cleo", "dan"),
]

RULES = (
    InferenceRule(
        "union",
        body=(Atom("marriage", ("X", "Y"), roles=("wife", "husband")),),
        head=Atom("union", ("X", "Y"), roles=("spouse", "spouse")),
    ),
)

QUERIES = [
    ("union", ("spouse", "ann"), ("spouse", "Who")),
    ("union", ("spouse", "Who"), ("spouse", "ann")),
    ("union", ("R", "X"), ("spouse", "Y")),
    ("marriage", ("R", "X"), ("husband", "ben")),
]


def make_marriage_kb() -> KnowledgeBase:
    kb = KnowledgeBase()
    for role, parent in ROLES:
        kb.add_role(role, parent)
    for wife, husband in MARRIAGES:
        kb.insert("marriage", wife, husband, roles=("wife", "husband"))
    return kb


def make_marriage_context(kb=None) -> ResolutionContext:
    return ResolutionContext(kb=kb if kb is not None else make_marriage_kb(), rules=RULES)
