"""
The resolution tree driver.

The tree is an arena of states: a list, where a state's parent is an index
into it. Answers are pulled one at a time with a stack:

    pop a state
      top answer state       -> that is the next answer
      answer state           -> hand it to its parent's propagate_answer
      any other state        -> push it back, push its next child

A single tree cuts recursion at queries already in flight, so answers that
depend on a cut branch show up one round later, once the facts and cached
answers of the earlier round are visible. run_resolution repeats rounds
until one adds nothing new.
"""

from typing import Optional

from .query import AtomicQuery, from_literal
from .substitution import Substitution
from .unifier import Unifier
from ..state.atomic import AtomicState


class ResolutionTree:
    """One pass of resolution of query. Iterate it to pull answers."""

    def __init__(self, query: AtomicQuery, ctx):
        self.ctx = ctx
        self.query = query
        self.states = []
        self.root = self.register(
            AtomicState(query, query.substitution, Unifier.identity(), None, ctx)
        )
        self._stack = [self.root]

    def register(self, state):
        state.index = len(self.states)
        self.states.append(state)
        return state

    def state(self, index: int):
        return self.states[index]

    def parent_of(self, state):
        return None if state.parent is None else self.states[state.parent]

    def next_answer(self) -> Optional[Substitution]:
        """The next answer to the query, or None when the tree is exhausted."""
        while self._stack:
            state = self._stack.pop()
            if state.is_answer_state:
                if state.is_top_state:
                    return state.sub
                new_state = self.parent_of(state).propagate_answer(state)
            else:
                new_state = state.generate_child_state()
                if new_state is not None:
                    self._stack.append(state)
            if new_state is not None:
                self._stack.append(self.register(new_state))
        return None

    def close(self):
        """Abandon the tree: give back every cycle-guard place its states hold."""
        self._stack.clear()
        for state in self.states:
            if getattr(state, "in_flight", None) is not None:
                state.release()

    def __iter__(self):
        try:
            while True:
                answer = self.next_answer()
                if answer is None:
                    return
                yield answer
        finally:
            self.close()


def resolution_round(query: AtomicQuery, ctx, seen: set, verbose: bool = True) -> list:
    """
    Run one tree to exhaustion. Returns the answers not already in seen,
    and adds them to it.
    """
    new_answers = []
    for answer in ResolutionTree(query, ctx):
        if answer in seen:
            continue
        seen.add(answer)
        new_answers.append(answer)
        if verbose:
            print(f"  [answer] {answer}")
    return new_answers


def resolve(query, ctx, max_rounds: int = 10, verbose: bool = False):
    """
    Yield every distinct answer to query, round after round, until a
    round adds nothing new or max_rounds is reached.

    query may be an AtomicQuery or a literal tuple such as ("parent", "X", "bob").
    """
    if not isinstance(query, AtomicQuery):
        query = from_literal(query)
    seen = set()
    for round_no in range(1, max_rounds + 1):
        if verbose:
            print(f"\n--- Round {round_no}: {query.pattern} ---")
        new_answers = resolution_round(query, ctx, seen, verbose=verbose)
        yield from new_answers
        if verbose:
            print(f"  New answers: {len(new_answers)} | Writes: {ctx.kb.writes} | "
                  f"Cached: {ctx.cache.size()}")
        if not new_answers or not ctx.rules:
            break


def run_resolution(query, ctx, max_rounds: int = 10, verbose: bool = True) -> list:
    """Resolve query to a fixpoint and return all of its answers."""
    return list(resolve(query, ctx, max_rounds=max_rounds, verbose=verbose))
