"""
Provenance of answers and its display.

Every answer the reasoner derives through a rule carries a RuleExplanation
naming the rule and the pattern of the query it answered. Body answers are
kept as premises, so walking back through them recovers the derivation
tree the same way a proof is recovered from clause source links.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LookupExplanation:
    """The answer was read directly from the knowledge base."""
    pattern: str

    @property
    def premises(self):
        return ()

    def __str__(self):
        return f"lookup {self.pattern}"


@dataclass(frozen=True)
class JoinExplanation:
    """The answer joins the answers of a conjunction, one per atom."""
    premises: tuple = ()

    def __str__(self):
        return f"join of {len(self.premises)}"


@dataclass(frozen=True)
class RuleExplanation:
    """The answer was derived by applying rule_id to a query with this pattern."""
    rule_id: str
    pattern: str
    premises: tuple = ()

    def __str__(self):
        return f"rule {self.rule_id} for {self.pattern}"


def is_rule_explained(answer) -> bool:
    return isinstance(answer.explanation, RuleExplanation)


def extract_explanation(answer) -> list:
    """
    Walk back from an answer through the premises of its explanations.
    Returns a list of (answer, depth) pairs, ordered from base facts to the answer.
    """
    tree = []

    def walk(node, depth):
        tree.append((node, depth))
        if node.explanation is None:
            return
        for premise in node.explanation.premises:
            walk(premise, depth + 1)

    walk(answer, 0)
    tree.reverse()
    return tree


def print_explanation(answer):
    """Pretty-print the derivation tree of an answer."""
    tree = extract_explanation(answer)
    print(f"\n{'='*60}")
    print(f"EXPLANATION of {answer}")
    print(f"{'='*60}")
    for i, (node, depth) in enumerate(tree):
        indent = "  " * depth
        how = f"  [{node.explanation}]" if node.explanation is not None else ""
        print(f"  {i+1}. {indent}{node}{how}")
    print(f"{'='*60}")
