"""
Tests for the resolution tree driver and the round-based fixpoint.

Core invariants:
    - Answers are complete once a round adds nothing new
    - A derived fact is written exactly once, whatever queries ask for it
    - Recursion over cyclic data terminates
    - No query stays in flight once a tree is exhausted or abandoned
"""

import pytest

from deduce.core.engine import ResolutionTree, resolution_round, resolve, run_resolution
from deduce.core.explanation import RuleExplanation, JoinExplanation, extract_explanation
from deduce.core.query import Atom, AtomicQuery, from_literal
from deduce.core.store import KnowledgeBase
from deduce.inference.rule import InferenceRule
from deduce.state import ResolutionContext


# ── Helpers ──────────────────────────────────────────────────────────────────

GRANDPARENT = InferenceRule(
    "grandparent",
    body=(Atom("parent", ("X", "Y")), Atom("parent", ("Y", "Z"))),
    head=Atom("grandparent", ("X", "Z")),
)

ANCESTOR_BASE = InferenceRule(
    "ancestor-base",
    body=(Atom("parent", ("X", "Y")),),
    head=Atom("ancestor", ("X", "Y")),
    materialise=True,
)

ANCESTOR_STEP = InferenceRule(
    "ancestor-step",
    body=(Atom("parent", ("X", "Y")), Atom("ancestor", ("Y", "Z"))),
    head=Atom("ancestor", ("X", "Z")),
    materialise=True,
)

RULES = (GRANDPARENT, ANCESTOR_BASE, ANCESTOR_STEP)


def make_context(*pairs) -> ResolutionContext:
    kb = KnowledgeBase()
    for parent, child in pairs:
        kb.insert("parent", parent, child)
    return ResolutionContext(kb=kb, rules=RULES)


def family() -> ResolutionContext:
    return make_context(("alice", "bob"), ("alice", "carol"), ("bob", "dave"),
                        ("carol", "erin"), ("dave", "frank"))


def values(answers, var):
    return {a[var] for a in answers}


# ── Unit tests ───────────────────────────────────────────────────────────────

class TestResolutionTree:
    def test_lookup_only(self):
        ctx = family()
        answers = list(ResolutionTree(from_literal(("parent", "alice", "Kid")), ctx))
        assert values(answers, "Kid") == {"bob", "carol"}

    def test_states_live_in_arena(self):
        ctx = family()
        tree = ResolutionTree(from_literal(("grandparent", "alice", "Who")), ctx)
        list(tree)
        assert tree.states[0] is tree.root
        for state in tree.states[1:]:
            if state.parent is None:
                assert state.is_answer_state
                continue
            assert tree.parent_of(state) is tree.state(state.parent)
            assert state.parent < state.index

    def test_exhausted_tree_holds_no_guard(self):
        ctx = family()
        list(ResolutionTree(from_literal(("ancestor", "alice", "Who")), ctx))
        assert ctx.subgoals == set()

    def test_abandoned_tree_releases_guard(self):
        ctx = family()
        answers = iter(ResolutionTree(from_literal(("ancestor", "alice", "Who")), ctx))
        next(answers)
        assert ctx.subgoals
        answers.close()
        assert ctx.subgoals == set()

    def test_next_answer_after_exhaustion(self):
        ctx = family()
        tree = ResolutionTree(from_literal(("parent", "frank", "Kid")), ctx)
        assert tree.next_answer() is None
        assert tree.next_answer() is None


class TestVirtualDerivation:
    def test_grandparents(self):
        ctx = family()
        answers = run_resolution(("grandparent", "alice", "Who"), ctx, verbose=False)
        assert values(answers, "Who") == {"dave", "erin"}

    def test_nothing_written(self):
        ctx = family()
        run_resolution(("grandparent", "X", "Y"), ctx, verbose=False)
        assert ctx.kb.writes == 0
        assert ctx.kb.derived == set()

    def test_answers_cached(self):
        ctx = family()
        run_resolution(("grandparent", "alice", "Who"), ctx, verbose=False)
        cached = ctx.cache.answers(from_literal(("grandparent", "alice", "Who")))
        assert values(cached, "Who") == {"dave", "erin"}

    def test_explanation(self):
        ctx = family()
        answer = run_resolution(("grandparent", "alice", "Who"), ctx, verbose=False)[0]
        assert isinstance(answer.explanation, RuleExplanation)
        assert answer.explanation.rule_id == "grandparent"
        (join,) = answer.explanation.premises
        assert isinstance(join.explanation, JoinExplanation)
        assert len(join.explanation.premises) == 2
        tree = extract_explanation(answer)
        assert tree[-1] == (answer, 0)
        assert len(tree) == 4


class TestMaterialisedDerivation:
    def test_transitive_closure(self):
        ctx = family()
        answers = run_resolution(("ancestor", "alice", "Who"), ctx, verbose=False)
        assert values(answers, "Who") == {"bob", "carol", "dave", "erin", "frank"}

    def test_bound_second_argument(self):
        ctx = family()
        answers = run_resolution(("ancestor", "Someone", "frank"), ctx, verbose=False)
        assert values(answers, "Someone") == {"alice", "bob", "dave"}

    def test_every_fact_written_once(self):
        ctx = family()
        run_resolution(("ancestor", "alice", "Who"), ctx, verbose=False)
        assert ctx.kb.writes == len(ctx.kb.derived) == 9

    def test_rerun_writes_nothing(self):
        ctx = family()
        first = run_resolution(("ancestor", "alice", "Who"), ctx, verbose=False)
        writes = ctx.kb.writes
        second = run_resolution(("ancestor", "alice", "Who"), ctx, verbose=False)
        assert ctx.kb.writes == writes
        assert set(first) == set(second)

    def test_equivalent_query_writes_nothing(self):
        ctx = family()
        run_resolution(("ancestor", "alice", "Who"), ctx, verbose=False)
        writes = ctx.kb.writes
        q = AtomicQuery(Atom("ancestor", ("P", "Q")), {"P": "alice"})
        answers = run_resolution(q, ctx, verbose=False)
        assert values(answers, "Q") == {"bob", "carol", "dave", "erin", "frank"}
        assert ctx.kb.writes == writes

    def test_cyclic_data_terminates(self):
        ctx = make_context(("a", "b"), ("b", "a"))
        answers = run_resolution(("ancestor", "a", "Who"), ctx, verbose=False)
        assert values(answers, "Who") == {"a", "b"}
        assert ctx.subgoals == set()
        assert ctx.kb.writes == len(ctx.kb.derived)


class TestRounds:
    def test_round_reports_only_new(self):
        ctx = family()
        q = from_literal(("parent", "alice", "Kid"))
        seen = set()
        assert len(resolution_round(q, ctx, seen, verbose=False)) == 2
        assert resolution_round(q, ctx, seen, verbose=False) == []

    def test_resolve_yields_answers(self):
        ctx = family()
        answers = resolve(("ancestor", "alice", "Who"), ctx)
        first = next(answers)
        assert first["Who"] in {"bob", "carol", "dave", "erin", "frank"}
        answers.close()
        assert ctx.subgoals == set()

    def test_no_rules_single_round(self):
        kb = KnowledgeBase()
        kb.insert("parent", "alice", "bob")
        ctx = ResolutionContext(kb=kb)
        assert len(run_resolution(("parent", "X", "Y"), ctx, verbose=False)) == 1

    def test_verbose_prints(self, capsys):
        ctx = family()
        run_resolution(("parent", "alice", "Kid"), ctx, verbose=True)
        out = capsys.readouterr().out
        assert "Round 1" in out
        assert "[answer]" in out


class TestRepeatedVariables:
    def test_no_self_ancestors_in_a_tree(self):
        ctx = family()
        answers = run_resolution(AtomicQuery(Atom("ancestor", ("A", "A"))), ctx, verbose=False)
        assert answers == []
        assert ctx.kb.writes == len(ctx.kb.derived)
        assert ctx.subgoals == set()

    def test_self_ancestors_on_cyclic_data(self):
        ctx = make_context(("a", "b"), ("b", "a"))
        answers = run_resolution(AtomicQuery(Atom("ancestor", ("A", "A"))), ctx, verbose=False)
        assert values(answers, "A") == {"a", "b"}
        assert ctx.kb.writes == len(ctx.kb.derived)

    def test_self_ancestors_after_closure(self):
        ctx = make_context(("a", "b"), ("b", "a"))
        run_resolution(("ancestor", "X", "Y"), ctx, verbose=False)
        writes = ctx.kb.writes
        answers = run_resolution(AtomicQuery(Atom("ancestor", ("A", "A"))), ctx, verbose=False)
        assert values(answers, "A") == {"a", "b"}
        assert ctx.kb.writes == writes
