"""
Unit tests for inference rules: validation, materialisation policy and
head unification.
"""

import pytest

from deduce.core.errors import RuleError
from deduce.core.query import Atom
from deduce.inference.rule import InferenceRule


# ── Helpers ──────────────────────────────────────────────────────────────────

GRANDPARENT = InferenceRule(
    "grandparent",
    body=(Atom("parent", ("X", "Y")), Atom("parent", ("Y", "Z"))),
    head=Atom("grandparent", ("X", "Z")),
)

UNION = InferenceRule(
    "union",
    body=(Atom("marriage", ("X", "Y"), roles=("wife", "husband")),),
    head=Atom("union", ("X", "Y"), roles=("spouse", "spouse")),
)


# ── Unit tests ───────────────────────────────────────────────────────────────

class TestValidation:
    def test_unsafe_head_rejected(self):
        with pytest.raises(RuleError):
            InferenceRule("bad", body=(Atom("parent", ("X", "Y")),),
                          head=Atom("grandparent", ("X", "Z")))

    def test_role_variable_in_head_rejected(self):
        with pytest.raises(RuleError):
            InferenceRule("bad", body=(Atom("marriage", ("X", "Y"), roles=("wife", "husband")),),
                          head=Atom("union", ("X", "Y"), roles=("R", "spouse")))

    def test_body_stored_as_tuple(self):
        rule = InferenceRule("r", body=[Atom("p", ("X",))], head=Atom("q", ("X",)))
        assert isinstance(rule.body, tuple)


class TestMaterialisationPolicy:
    def test_plain_head_is_virtual(self):
        assert not GRANDPARENT.requires_materialisation(GRANDPARENT.head)

    def test_relation_head_is_materialised(self):
        assert UNION.requires_materialisation(UNION.head)

    def test_relation_query_forces_materialisation(self):
        rule = InferenceRule("r", body=(Atom("p", ("X", "Y")),), head=Atom("q", ("X", "Y")))
        assert rule.requires_materialisation(Atom("q", ("A", "B"), roles=("a", "b")))

    def test_explicit_override(self):
        rule = InferenceRule("r", body=(Atom("p", ("X",)),), head=Atom("q", ("X",)), materialise=True)
        assert rule.requires_materialisation(rule.head)
        rule = InferenceRule("r", body=(Atom("p", ("X", "Y")),),
                             head=Atom("q", ("X", "Y"), roles=("a", "b")), materialise=False)
        assert not rule.requires_materialisation(rule.head)


class TestUnifiers:
    def test_head_into_query(self):
        mu = GRANDPARENT.unifiers(Atom("grandparent", ("A", "B")))
        assert len(mu) == 1
        assert mu.get_unifier().get("X") == {"A"}

    def test_symmetric_head_unifies_twice(self):
        assert len(UNION.unifiers(Atom("union", ("A", "B"), roles=("spouse", "spouse")))) == 2

    def test_other_predicate(self):
        assert not GRANDPARENT.unifiers(Atom("parent", ("A", "B")))

    def test_str(self):
        assert str(GRANDPARENT) == "[grandparent] grandparent(X, Z) :- parent(X, Y), parent(Y, Z)"
