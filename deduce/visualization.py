"""
Visualization and reporting utilities.
"""

from .core.explanation import extract_explanation
from .core.store import KnowledgeBase


def print_kb(kb: KnowledgeBase):
    """Print a summary of the knowledge base."""
    print(f"\n{'='*60}")
    print(f"Facts ({len(kb.facts)}), derived: {len(kb.derived)}, writes: {kb.writes}")
    for fact in sorted(kb.facts, key=str):
        tag = "  [derived]" if fact in kb.derived else ""
        print(f"  {fact}{tag}")
    if kb.role_parents:
        print("Roles:")
        for role in sorted(kb.role_parents):
            print(f"  {' -> '.join(kb.super_roles(role))}")
    print(f"{'='*60}")


def print_cache(cache):
    """Print every equivalence class the cache holds."""
    print(f"\n{'='*60}")
    print(f"Semantic cache: {len(cache)} classes, {cache.size()} answers")
    print(f"{'='*60}")
    for entry in cache.entries():
        print(f"  {entry.query.pattern}: {len(entry.answers)} answers")


def print_answers(query, answers: list):
    """Print the answers to one query, showing only the variables the user wrote."""
    shown = sorted(v for v in query.var_names if v not in query.substitution)
    print(f"\n{query.pattern}: {len(answers)} answers")
    for answer in answers:
        bindings = ", ".join(f"{v} = {answer[v]}" for v in shown if v in answer)
        print(f"  {bindings or 'yes'}")


def export_dot(answers: list, path="deduce_graph.dot"):
    """Export the derivation trees of answers as a DOT file for Graphviz."""
    with open(path, "w") as f:
        f.write("digraph deduce {\n")
        f.write("  rankdir=BT;\n")
        f.write("  node [shape=box, style=rounded];\n")

        written = set()
        for answer in answers:
            for node, _ in extract_explanation(answer):
                label = f"{node}".replace('"', '\\"')
                if label not in written:
                    written.add(label)
                    color = "lightblue" if node.explanation is not None and node.explanation.premises else "lightgray"
                    f.write(f'  "{label}" [fillcolor={color}, style=filled];\n')
                if node.explanation is None:
                    continue
                for premise in node.explanation.premises:
                    premise_label = f"{premise}".replace('"', '\\"')
                    f.write(f'  "{premise_label}" -> "{label}";\n')
        f.write("}\n")
    print(f"Graph exported to {path}")
