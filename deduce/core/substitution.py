"""
Substitutions: immutable partial bindings from query variables to values.

A Substitution is both the answer type of the reasoner and the partial
binding a query is resolved under. The empty substitution plays two roles:
it is the identity for merge, and it is the "no valid binding" signal that
dead branches return. Keep that in mind when reading merge:

    merge(S, {})            == S
    merge(S, S)             == S
    merge({X: a}, {X: b})   == {}      conflicting bindings fail the merge

Explanations (provenance) ride along with a substitution but never take
part in equality or hashing.
"""

from collections.abc import Mapping


class Substitution(Mapping):
    """Immutable variable -> value mapping with an optional explanation."""

    __slots__ = ("_map", "_hash", "explanation")

    def __init__(self, bindings=None, explanation=None):
        self._map = dict(bindings) if bindings else {}
        self._hash = None
        self.explanation = explanation

    def __getitem__(self, var):
        return self._map[var]

    def __iter__(self):
        return iter(self._map)

    def __len__(self):
        return len(self._map)

    def __eq__(self, other):
        if isinstance(other, Substitution):
            return self._map == other._map
        if isinstance(other, Mapping):
            return self._map == dict(other)
        return NotImplemented

    def __hash__(self):
        if self._hash is None:
            self._hash = hash(frozenset(self._map.items()))
        return self._hash

    def __repr__(self):
        inner = ", ".join(f"{var}: {self._map[var]}" for var in sorted(self._map))
        return "{" + inner + "}"

    @property
    def is_empty(self) -> bool:
        return not self._map

    @property
    def vars(self) -> frozenset:
        return frozenset(self._map)

    def merge(self, other: "Substitution") -> "Substitution":
        return merge_answers(self, other)

    def project(self, variables) -> "Substitution":
        """Drop every binding whose variable is not in variables."""
        variables = set(variables)
        return Substitution(
            {var: val for var, val in self._map.items() if var in variables},
            self.explanation,
        )

    def explain(self, explanation) -> "Substitution":
        return Substitution(self._map, explanation)

    def consistent_with(self, other: Mapping) -> bool:
        """No variable bound by both sides is bound to different values."""
        return all(
            self._map[var] == val for var, val in other.items() if var in self._map
        )

    def contains(self, other: Mapping) -> bool:
        """Every binding of other is also a binding of self (self subsumes other)."""
        return all(
            var in self._map and self._map[var] == val for var, val in other.items()
        )


EMPTY = Substitution()


def merge_answers(a: Substitution, b: Substitution) -> Substitution:
    """
    Merge two substitutions.

    Empty is the identity. Shared variables must agree; a single
    disagreement makes the whole merge empty. The explanation of the
    result is the first operand's, else the second's.
    """
    if b.is_empty:
        return a
    if a.is_empty:
        return b
    if not a.consistent_with(b):
        return EMPTY
    merged = dict(a)
    merged.update(b)
    explanation = a.explanation if a.explanation is not None else b.explanation
    return Substitution(merged, explanation)
