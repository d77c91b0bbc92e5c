"""
Terms, atom unification and canonical forms.

This is the structural foundation the rest of the reasoner builds on.
Given two atoms, find every variable renaming that makes one an instance
of the other -- or report that none exists. Given one atom, find its
canonical shape so that atoms equal up to variable renaming land in the
same place.

Terms:
    str starting with uppercase -> variable:   "X", "Person"
    anything else               -> constant / role label:  "alice", "spouse"

Role slots of a relation atom hold either a role label or a role variable.
A labelled slot i still gets a variable, the implicit role variable
"Role_<i>", so that role bindings can be carried by substitutions and
renamed by unifiers like any other binding.
"""

from itertools import permutations

from .unifier import Unifier, MultiUnifier

ROLE_VAR_PREFIX = "Role_"


def is_variable(term) -> bool:
    """Variables start with uppercase. Everything else is a constant or label."""
    return isinstance(term, str) and len(term) > 0 and term[0].isupper()


def implicit_role_var(index: int) -> str:
    return f"{ROLE_VAR_PREFIX}{index}"


def is_implicit_role_var(var) -> bool:
    return isinstance(var, str) and var.startswith(ROLE_VAR_PREFIX) and var[len(ROLE_VAR_PREFIX):].isdigit()


def _slot_orders(atom):
    """Every order in which the slots of atom may be read. Plain atoms are positional."""
    n = len(atom.args)
    if not atom.roles:
        return [tuple(range(n))]
    return list(permutations(range(n)))


def _roles_compatible(source_role, target_role) -> bool:
    if is_variable(source_role) or is_variable(target_role):
        return True
    return source_role == target_role


def unify_atoms(source, target) -> MultiUnifier:
    """
    All unifiers renaming source's variables into target's.

    Same predicate, same arity and the same kind (plain or relation) are
    required. Plain atoms unify positionally, so at most one unifier comes
    back. Relation atoms are matched slot by slot under every permutation
    whose roles are compatible, which is where multiple unifiers come from.
    Returns an empty MultiUnifier if the atoms do not unify.
    """
    if source.predicate != target.predicate:
        return MultiUnifier()
    if len(source.args) != len(target.args):
        return MultiUnifier()
    if bool(source.roles) != bool(target.roles):
        return MultiUnifier()

    if not source.roles:
        return MultiUnifier([Unifier.from_pairs(zip(source.args, target.args))])

    unifiers = set()
    for order in permutations(range(len(target.args))):
        pairs = []
        for i, j in enumerate(order):
            if not _roles_compatible(source.roles[i], target.roles[j]):
                break
            pairs.append((source.role_var(i), target.role_var(j)))
            pairs.append((source.args[i], target.args[j]))
        else:
            unifiers.add(Unifier.from_pairs(pairs))
    return MultiUnifier(unifiers)


def canonical_form(atom, sub=None):
    """
    Canonical shape of atom, optionally with the bindings of sub folded in.

    Variables are renamed V0, V1, ... in order of first appearance; a bound
    variable is replaced by its value instead. For relation atoms every slot
    order is tried and the smallest reading wins, so the slot order written
    by the user does not matter.

    Returns (key, renamings) where renamings lists every variable -> canonical
    variable dict that produces key. Two atoms have equal keys iff they are
    equal up to variable renaming (and, with sub, bound to the same values).
    """
    sub = sub or {}
    best = None
    renamings = []
    for order in _slot_orders(atom):
        names = {}
        slots = []

        def canon(var):
            if var in sub:
                return "=" + repr(sub[var])
            if var not in names:
                names[var] = f"V{len(names)}"
            return "?" + names[var]

        for i in order:
            if atom.roles:
                role = atom.roles[i]
                role_str = canon(role) if is_variable(role) else "#" + role
            else:
                role_str = ""
            slots.append((role_str, canon(atom.args[i])))
        reading = tuple(slots)
        if best is None or reading < best:
            best = reading
            renamings = [names]
        elif reading == best and names not in renamings:
            renamings.append(names)

    key = (atom.predicate, bool(atom.roles), best)
    return key, renamings


def canonical_unifier(atom) -> MultiUnifier:
    """Unifiers from atom's variables to the canonical variables of its shape."""
    _, renamings = canonical_form(atom)
    return MultiUnifier(Unifier(dict(names)) for names in renamings)
