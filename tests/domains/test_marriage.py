"""
Tests for the marriage domain: relations with roles, the role hierarchy,
materialised symmetric unions and role expansion.
"""

import pytest

from deduce.core.engine import run_resolution
from deduce.core.store import Fact
from deduce.domains.marriage import make_marriage_context, make_marriage_kb


# ── Unit tests ───────────────────────────────────────────────────────────────

class TestMarriageKB:
    def test_roles(self):
        kb = make_marriage_kb()
        assert kb.super_roles("wife") == ["wife", "spouse", "partner"]
        assert kb.super_roles("husband") == ["husband", "spouse", "partner"]


class TestMarriageQueries:
    def test_union_is_materialised_once(self):
        ctx = make_marriage_context()
        answers = run_resolution(("union", ("spouse", "ann"), ("spouse", "Who")), ctx, verbose=False)
        assert {a["Who"] for a in answers} == {"ben"}
        assert ctx.kb.writes == 1
        assert Fact("union", ("ann", "ben"), ("spouse", "spouse")) in ctx.kb.derived

    def test_union_symmetric(self):
        ctx = make_marriage_context()
        run_resolution(("union", ("spouse", "ann"), ("spouse", "Who")), ctx, verbose=False)
        answers = run_resolution(("union", ("spouse", "Who"), ("spouse", "ann")), ctx, verbose=False)
        assert {a["Who"] for a in answers} == {"ben"}
        assert ctx.kb.writes == 1

    def test_role_variable_expansion(self):
        ctx = make_marriage_context()
        answers = run_resolution(("union", ("R", "X"), ("spouse", "Y")), ctx, verbose=False)
        triples = {(a["R"], a["X"], a["Y"]) for a in answers}
        pairs = {("ann", "ben"), ("ben", "ann"), ("cleo", "dan"), ("dan", "cleo")}
        assert triples == {(r, x, y) for r in ("spouse", "partner") for x, y in pairs}
        assert ctx.kb.writes == 2

    def test_lookup_with_role_variable(self):
        ctx = make_marriage_context()
        answers = run_resolution(("marriage", ("R", "X"), ("husband", "ben")), ctx, verbose=False)
        assert {a["R"] for a in answers} == {"wife", "spouse", "partner"}
        assert {a["X"] for a in answers} == {"ann"}
        assert ctx.kb.writes == 0

    def test_general_role_does_not_match_marriage(self):
        ctx = make_marriage_context()
        answers = run_resolution(("marriage", ("spouse", "X"), ("spouse", "Y")), ctx, verbose=False)
        assert answers == []
