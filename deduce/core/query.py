"""
Atoms and atomic queries.

An Atom is a single predicate over player variables:

    Atom("parent", ("X", "Y"))                                 parent(X, Y)
    Atom("marriage", ("X", "Y"), roles=("spouse", "spouse"))   marriage(spouse: X, spouse: Y)
    Atom("marriage", ("X", "Y"), roles=("R", "spouse"))        marriage(R: X, spouse: Y)

Atoms hold variables only. Constants live in the substitution of the
AtomicQuery that wraps the atom, so parent(alice, Y) is the atom
parent(X, Y) under {X: alice}. from_literal() does that lifting for you.

Two atomic queries are equivalent when they are equal up to variable
renaming and bind the same positions to the same values. The semantic
cache groups queries by the coarser structural key, which ignores the
substitution.
"""

from dataclasses import dataclass
from functools import cached_property

from .substitution import Substitution, EMPTY
from .unification import is_variable, implicit_role_var, canonical_form


@dataclass(frozen=True)
class Atom:
    predicate: str
    args: tuple
    roles: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "roles", tuple(self.roles))
        if self.roles and len(self.roles) != len(self.args):
            raise ValueError(f"{self.predicate}: one role per player expected")
        for arg in self.args:
            if not is_variable(arg):
                raise ValueError(f"{self.predicate}: player {arg!r} is not a variable")

    def role_var(self, index: int) -> str:
        role = self.roles[index]
        return role if is_variable(role) else implicit_role_var(index)

    @property
    def is_relation(self) -> bool:
        return bool(self.roles)

    @property
    def var_names(self) -> frozenset:
        return frozenset(self.args) | self.role_expansion_variables

    @property
    def role_vars(self) -> frozenset:
        """Every role variable, implicit ones included."""
        return frozenset(self.role_var(i) for i in range(len(self.roles)))

    @property
    def role_expansion_variables(self) -> frozenset:
        return frozenset(r for r in self.roles if is_variable(r))

    @property
    def requires_role_expansion(self) -> bool:
        return bool(self.role_expansion_variables)

    @property
    def requires_materialisation(self) -> bool:
        # relations are instances in the graph; deriving one means creating it
        return self.is_relation

    @property
    def role_substitution(self) -> Substitution:
        """Implicit role variable -> label, for every labelled slot."""
        return Substitution({
            implicit_role_var(i): role
            for i, role in enumerate(self.roles) if not is_variable(role)
        })

    def render(self, sub=None) -> str:
        sub = sub or {}
        parts = []
        for i, arg in enumerate(self.args):
            player = str(sub.get(arg, arg))
            if self.roles:
                role = self.roles[i]
                parts.append(f"{sub.get(role, role)}: {player}")
            else:
                parts.append(player)
        return f"{self.predicate}({', '.join(parts)})"

    def __str__(self):
        return self.render()


class AtomicQuery:
    """An atom under a partial binding. Immutable; equality is equivalence."""

    def __init__(self, atom: Atom, sub=None):
        self.atom = atom
        if sub is None:
            sub = EMPTY
        elif not isinstance(sub, Substitution):
            sub = Substitution(sub)
        self.substitution = sub.project(atom.var_names)

    @property
    def var_names(self) -> frozenset:
        return self.atom.var_names

    @property
    def pattern(self) -> str:
        return self.atom.render(self.substitution)

    @cached_property
    def key(self):
        key, _ = canonical_form(self.atom, self.substitution)
        return key

    @cached_property
    def structural_key(self):
        key, _ = canonical_form(self.atom)
        return key

    def is_equivalent(self, other) -> bool:
        return isinstance(other, AtomicQuery) and self.key == other.key

    def __eq__(self, other):
        return self.is_equivalent(other)

    def __hash__(self):
        return hash(self.key)

    def __repr__(self):
        return f"AtomicQuery({self.pattern})"


def atomic(query, sub=None):
    """
    Build an atomic query from a template query (or bare atom) and a binding.

    Only the bindings of sub that concern the template's variables are kept.
    Returns None when sub contradicts the template's own substitution: such
    a query has no answers and no meaningful shape.
    """
    if isinstance(query, Atom):
        query = AtomicQuery(query)
    if sub is None or len(sub) == 0:
        return query
    if not isinstance(sub, Substitution):
        sub = Substitution(sub)
    extra = sub.project(query.var_names)
    if not query.substitution.consistent_with(extra):
        return None
    return AtomicQuery(query.atom, query.substitution.merge(extra))


def from_literal(literal) -> AtomicQuery:
    """
    Build a query from a plain tuple.

        ("parent", "X", "alice")                          parent(X, alice)
        ("marriage", ("spouse", "X"), ("spouse", "bob"))  marriage(spouse: X, spouse: bob)

    Constants are replaced by fresh variables bound in the substitution.
    """
    predicate, raw = literal[0], literal[1:]
    relation = any(isinstance(a, tuple) for a in raw)
    slots = [a if isinstance(a, tuple) else (None, a) for a in raw]
    if relation and any(role is None for role, _ in slots):
        raise ValueError(f"{predicate}: mix of role and positional players")

    used = {term for _, term in slots if is_variable(term)}
    used |= {role for role, _ in slots if is_variable(role)}
    fresh = (f"C{n}" for n in range(len(slots) * 2 + len(used) + 1))

    args, roles, bindings = [], [], {}
    for role, term in slots:
        if is_variable(term):
            var = term
        else:
            var = next(v for v in fresh if v not in used)
            bindings[var] = term
        args.append(var)
        if relation:
            roles.append(role)
    return AtomicQuery(Atom(predicate, tuple(args), tuple(roles)), Substitution(bindings))
