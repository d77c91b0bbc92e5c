"""
Unifiers: variable renamings between two queries' variable spaces.

A Unifier is a multimap  source variable -> {target variables}. Applying it
to a substitution renames every mapped key to each of its targets; keys
that are neither mapped nor targets pass through unchanged. If two values
land on the same target they must agree, otherwise the result is empty.

A pair of queries may unify in more than one way -- a symmetric relation
such as marriage(spouse: X, spouse: Y) matches marriage(spouse: A,
spouse: B) with X->A, Y->B and with X->B, Y->A. A MultiUnifier is the set
of all such alternatives.
"""

from typing import Iterator

from .substitution import Substitution, EMPTY


class Unifier:
    """Immutable variable multimap. The empty unifier is the identity."""

    __slots__ = ("_map", "_hash")

    def __init__(self, mapping=None):
        frozen = {}
        for var, targets in (mapping or {}).items():
            if isinstance(targets, str):
                targets = (targets,)
            frozen[var] = frozenset(targets)
        self._map = frozen
        self._hash = None

    @classmethod
    def identity(cls) -> "Unifier":
        return cls()

    @classmethod
    def from_pairs(cls, pairs) -> "Unifier":
        mapping = {}
        for source, target in pairs:
            mapping.setdefault(source, set()).add(target)
        return cls(mapping)

    def __eq__(self, other):
        return isinstance(other, Unifier) and self._map == other._map

    def __hash__(self):
        if self._hash is None:
            self._hash = hash(frozenset(self._map.items()))
        return self._hash

    def __repr__(self):
        parts = []
        for var in sorted(self._map):
            for target in sorted(self._map[var]):
                parts.append(f"{var}->{target}")
        return "Unifier(" + ", ".join(parts) + ")"

    def __bool__(self):
        return bool(self._map)

    @property
    def is_identity(self) -> bool:
        return not self._map

    def keys(self) -> frozenset:
        return frozenset(self._map)

    def values(self) -> frozenset:
        return frozenset(t for targets in self._map.values() for t in targets)

    def get(self, var) -> frozenset:
        return self._map.get(var, frozenset())

    def pairs(self):
        for var, targets in self._map.items():
            for target in targets:
                yield var, target

    def apply(self, sub: Substitution) -> Substitution:
        """Rename the keys of sub into the target space."""
        if self.is_identity or sub.is_empty:
            return sub
        targets = self.values()
        unified = {}
        for var, val in sub.items():
            renamed = self._map.get(var)
            if renamed is None:
                if var in targets:
                    # a mapped variable already claims this name
                    continue
                renamed = (var,)
            for target in renamed:
                if target in unified and unified[target] != val:
                    return EMPTY
                unified[target] = val
        return Substitution(unified, sub.explanation)

    def inverse(self) -> "Unifier":
        return Unifier.from_pairs((target, var) for var, target in self.pairs())

    def compose(self, other: "Unifier") -> "Unifier":
        """self then other: X -> Y under self and Y -> Z under other gives X -> Z."""
        pairs = []
        for var, target in self.pairs():
            onward = other.get(target)
            if onward:
                pairs.extend((var, t) for t in onward)
            else:
                pairs.append((var, target))
        return Unifier.from_pairs(pairs)


class MultiUnifier:
    """A set of alternative unifiers between the same pair of queries."""

    __slots__ = ("unifiers",)

    def __init__(self, unifiers=()):
        self.unifiers = frozenset(unifiers)

    def __iter__(self) -> Iterator[Unifier]:
        # deterministic order
        return iter(sorted(self.unifiers, key=repr))

    def __len__(self):
        return len(self.unifiers)

    def __bool__(self):
        return bool(self.unifiers)

    def __eq__(self, other):
        return isinstance(other, MultiUnifier) and self.unifiers == other.unifiers

    def __hash__(self):
        return hash(self.unifiers)

    def __repr__(self):
        return "MultiUnifier(" + ", ".join(repr(u) for u in self) + ")"

    def get_unifier(self) -> Unifier:
        """The single unifier; only meaningful when there is exactly one."""
        return next(iter(self))

    def apply(self, sub: Substitution) -> list:
        """One translated substitution per alternative; empty results are dropped."""
        results = []
        for unifier in self:
            translated = unifier.apply(sub)
            if not translated.is_empty and translated not in results:
                results.append(translated)
        return results

    def inverse(self) -> "MultiUnifier":
        return MultiUnifier(u.inverse() for u in self.unifiers)
