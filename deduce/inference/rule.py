"""
Inference rules: when every atom of the body holds, the head holds.

    grandparent(X, Z) :- parent(X, Y), parent(Y, Z)

    InferenceRule("grandparent",
                  body=(Atom("parent", ("X", "Y")), Atom("parent", ("Y", "Z"))),
                  head=Atom("grandparent", ("X", "Z")))

Applying a rule either materialises a new fact for the head in the store,
or produces a purely virtual answer assembled from substitutions. Relation
heads create instances and are always materialised; plain predicate heads
are virtual unless the rule or the query atom asks otherwise.
"""

from dataclasses import dataclass
from typing import Optional

from ..core.errors import RuleError
from ..core.query import Atom, AtomicQuery
from ..core.unification import is_variable, unify_atoms
from ..core.unifier import MultiUnifier


@dataclass(frozen=True)
class InferenceRule:
    rule_id: str
    body: tuple
    head: Atom
    materialise: Optional[bool] = None

    def __post_init__(self):
        object.__setattr__(self, "body", tuple(self.body))
        body_vars = set()
        for atom in self.body:
            body_vars |= atom.var_names
        unsafe = set(self.head.args) - body_vars
        if unsafe:
            raise RuleError(f"rule {self.rule_id}: head variables {sorted(unsafe)} not bound by the body")
        if any(is_variable(role) for role in self.head.roles):
            raise RuleError(f"rule {self.rule_id}: head roles must be labels")

    @property
    def head_query(self) -> AtomicQuery:
        return AtomicQuery(self.head)

    def requires_materialisation(self, atom: Atom) -> bool:
        """Must applying this rule to atom write a new fact into the store?"""
        if self.materialise is not None:
            return self.materialise
        return atom.requires_materialisation or self.head.requires_materialisation

    def unifiers(self, atom: Atom) -> MultiUnifier:
        """Ways of renaming the head into atom's variable space."""
        return unify_atoms(self.head, atom)

    def __str__(self):
        body = ", ".join(str(a) for a in self.body)
        return f"[{self.rule_id}] {self.head} :- {body}"
