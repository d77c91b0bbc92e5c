"""
Domain: Family tree.

Parent facts over three generations, with two kinds of derived knowledge:

    grandparent(X, Z) :- parent(X, Y), parent(Y, Z)     virtual answers only
    ancestor(X, Y)    :- parent(X, Y)                   materialised
    ancestor(X, Z)    :- parent(X, Y), ancestor(Y, Z)   materialised, recursive

Grandparents are assembled from substitutions and never stored. Ancestor
facts are written to the knowledge base the first time they are derived,
and found there by every later query -- including queries that ask the
same thing with different variable names.
"""

from ..core.query import Atom
from ..core.store import KnowledgeBase
from ..inference.rule import InferenceRule
from ..state.base import ResolutionContext

PARENTS = [
    ("alice", "bob"),
    ("alice", "carol"),
    ("bob",   "dave"),
    ("carol", "erin"),
    ("dave",  "frank"),
]

RULES = (
    InferenceRule(
        "grandparent",
        body=(Atom("parent", ("X", "Y")), Atom("parent", ("Y", "Z"))),
        head=Atom("grandparent", ("X", "Z")),
    ),
    InferenceRule(
        "ancestor-base",
        body=(Atom("parent", ("X", "Y")),),
        head=Atom("ancestor", ("X", "Y")),
        materialise=True,
    ),
    InferenceRule(
        "ancestor-step",
        body=(Atom("parent", ("X", "Y")), Atom("ancestor", ("Y", "Z"))),
        head=Atom("ancestor", ("X", "Z")),
        materialise=True,
    ),
)

QUERIES = [
    ("grandparent", "alice", "Who"),
    ("ancestor", "alice", "Who"),
    ("ancestor", "Someone", "frank"),
    ("ancestor", "A", "B"),
]


def make_family_kb() -> KnowledgeBase:
    kb = KnowledgeBase()
    for parent, child in PARENTS:
        kb.insert("parent", parent, child)
    return kb


def make_family_context(kb=None) -> ResolutionContext:
    return ResolutionContext(kb=kb if kb is not None else make_family_kb(), rules=RULES)
