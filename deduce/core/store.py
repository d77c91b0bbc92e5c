"""
The knowledge base: facts, the role hierarchy, lookup and materialisation.

Facts are ground predicates over constants. Relation facts also name the
role each player plays:

    Fact("parent", ("alice", "bob"))                       parent(alice, bob)
    Fact("marriage", ("ann", "ben"), ("wife", "husband"))  marriage(wife: ann, husband: ben)

Roles form a hierarchy (wife -> spouse -> partner). A role variable in a
query is bound to the role a fact names and to every super-role of it.

The store is the only place a derived fact becomes durable. Writing the
same fact twice is a broken invariant, not a no-op: the reasoner promises
to probe before it writes, so a duplicate here means that promise failed.

The whole knowledge base is serializable to JSON for continuity.
"""

import json
import logging
from dataclasses import dataclass, field
from itertools import permutations, product
from typing import Iterator

from .errors import DuplicateMaterialisationError
from .explanation import LookupExplanation
from .substitution import Substitution
from .unification import is_variable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fact:
    predicate: str
    players: tuple
    roles: tuple = ()

    def __str__(self):
        if self.roles:
            inner = ", ".join(f"{r}: {p}" for r, p in zip(self.roles, self.players))
        else:
            inner = ", ".join(str(p) for p in self.players)
        return f"{self.predicate}({inner})"


@dataclass
class KnowledgeBase:
    """
    In-memory fact store.

    facts:         every fact, base or derived
    derived:       the facts written by materialise
    role_parents:  role -> direct super-role
    writes:        number of materialisations performed
    """
    facts: set = field(default_factory=set)
    derived: set = field(default_factory=set)
    role_parents: dict = field(default_factory=dict)
    writes: int = 0

    def __post_init__(self):
        self._by_predicate = {}
        for fact in self.facts:
            self._by_predicate.setdefault(fact.predicate, []).append(fact)

    # ── Schema ──────────────────────────────────────────────────────────────

    def add_role(self, role: str, parent: str = None):
        if parent is not None:
            self.role_parents[role] = parent

    def super_roles(self, role: str) -> list:
        """role followed by its ancestors, nearest first."""
        chain = [role]
        while chain[-1] in self.role_parents:
            parent = self.role_parents[chain[-1]]
            if parent in chain:
                break
            chain.append(parent)
        return chain

    # ── Facts ───────────────────────────────────────────────────────────────

    def insert(self, predicate: str, *players, roles=()) -> Fact:
        """Add a base fact. Re-inserting a base fact is harmless."""
        fact = Fact(predicate, tuple(players), tuple(roles))
        if fact not in self.facts:
            self._add(fact)
        return fact

    def _add(self, fact: Fact):
        self.facts.add(fact)
        self._by_predicate.setdefault(fact.predicate, []).append(fact)

    def __contains__(self, fact):
        return fact in self.facts

    def __len__(self):
        return len(self.facts)

    def _match(self, atom, fact) -> list:
        """Every binding of atom's variables that makes it describe fact."""
        if len(atom.args) != len(fact.players) or bool(atom.roles) != bool(fact.roles):
            return []

        if not atom.roles:
            binding = {}
            for var, value in zip(atom.args, fact.players):
                if binding.setdefault(var, value) != value:
                    return []
            return [binding]

        results = []
        for order in permutations(range(len(fact.players))):
            binding = {}
            role_choices = []
            ok = True
            for i, j in enumerate(order):
                role = atom.roles[i]
                if is_variable(role):
                    role_choices.append((role, self.super_roles(fact.roles[j])))
                elif role != fact.roles[j]:
                    ok = False
                    break
                value = fact.players[j]
                if binding.setdefault(atom.args[i], value) != value:
                    ok = False
                    break
            if not ok:
                continue
            role_vars = [var for var, _ in role_choices]
            for labels in product(*(choices for _, choices in role_choices)):
                full = dict(binding)
                if all(full.setdefault(var, label) == label for var, label in zip(role_vars, labels)):
                    if full not in results:
                        results.append(full)
        return results

    def lookup(self, query) -> Iterator[Substitution]:
        """
        Answers to query read straight from the stored facts.
        Read-only. Each answer binds exactly the query's variables.
        """
        explanation = LookupExplanation(query.pattern)
        seen = set()
        for fact in self._by_predicate.get(query.atom.predicate, ()):
            for binding in self._match(query.atom, fact):
                answer = Substitution(binding, explanation)
                if not answer.consistent_with(query.substitution):
                    continue
                if answer in seen:
                    continue
                seen.add(answer)
                yield answer

    def materialise(self, query, sub) -> Iterator[Substitution]:
        """
        Write the fact query describes under sub and yield its binding.

        Every player and role variable must be bound by sub or by the query's
        own substitution; otherwise nothing is written and nothing is yielded.
        The yielded binding covers the players and every role variable,
        implicit ones included.
        """
        atom = query.atom
        bound = dict(query.substitution)
        bound.update({var: val for var, val in sub.items() if var not in bound})

        players = tuple(bound.get(arg) for arg in atom.args)
        roles = tuple(
            bound.get(role) if is_variable(role) else role for role in atom.roles
        )
        if any(p is None for p in players) or any(r is None for r in roles):
            logger.debug("cannot materialise %s: unbound variables under %s", query.pattern, sub)
            return

        fact = Fact(atom.predicate, players, roles)
        if fact in self.facts:
            raise DuplicateMaterialisationError(fact)
        self._add(fact)
        self.derived.add(fact)
        self.writes += 1
        logger.debug("materialised %s", fact)

        binding = dict(zip(atom.args, players))
        for i, role in enumerate(roles):
            binding[atom.role_var(i)] = role
        yield Substitution(binding)

    # ── Persistence ─────────────────────────────────────────────────────────

    def to_dict(self):
        def serialize(fact):
            return {"predicate": fact.predicate,
                    "players": list(fact.players),
                    "roles": list(fact.roles),
                    "derived": fact in self.derived}

        return {
            "facts": [serialize(f) for f in sorted(self.facts, key=str)],
            "role_parents": dict(self.role_parents),
            "writes": self.writes,
        }

    @classmethod
    def from_dict(cls, d):
        kb = cls(role_parents=dict(d.get("role_parents", {})),
                 writes=d.get("writes", 0))
        for data in d["facts"]:
            fact = Fact(data["predicate"], tuple(data["players"]), tuple(data.get("roles", ())))
            kb._add(fact)
            if data.get("derived"):
                kb.derived.add(fact)
        return kb

    def save(self, path="deduce_kb.json"):
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path="deduce_kb.json"):
        with open(path) as f:
            return cls.from_dict(json.load(f))
