"""
CLI entry point. Run as: python -m deduce --domain <name>
"""

import argparse
import logging

from .core.engine import run_resolution
from .core.errors import ResolutionError
from .core.explanation import print_explanation
from .core.query import from_literal
from .core.store import KnowledgeBase
from .visualization import print_kb, print_cache, print_answers, export_dot
from .domains import DOMAINS


def main():
    parser = argparse.ArgumentParser(description="Deduce: atomic resolution with a semantic cache")
    parser.add_argument(
        "--domain",
        choices=list(DOMAINS.keys()),
        default="family",
        help="Which sample knowledge base to query",
    )
    parser.add_argument("--rounds", type=int, default=10,   help="Max resolution rounds per query")
    parser.add_argument("--save",   type=str, default=None, help="Save knowledge base to file")
    parser.add_argument("--load",   type=str, default=None, help="Load knowledge base from file")
    parser.add_argument("--dot",    type=str, default=None, help="Export DOT derivation graph to file")
    parser.add_argument("--explain", action="store_true",   help="Print the derivation of every answer")
    parser.add_argument("--quiet",  action="store_true",    help="Less output")
    parser.add_argument("--debug",  action="store_true",    help="Log resolution decisions")
    args = parser.parse_args()

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    domain = DOMAINS[args.domain]

    # --- Load or build the knowledge base ---
    if args.load:
        kb = KnowledgeBase.load(args.load)
        print(f"Loaded knowledge base from {args.load} ({len(kb)} facts)")
    else:
        kb = domain["make_kb"]()
    ctx = domain["make_context"](kb)

    print(f"Domain: {args.domain} -- {domain['description']}")
    print_kb(kb)

    # --- Run ---
    all_answers = []
    try:
        for literal in domain["queries"]:
            query = from_literal(literal)
            answers = run_resolution(query, ctx, max_rounds=args.rounds, verbose=not args.quiet)
            print_answers(query, answers)
            if args.explain:
                for answer in answers:
                    print_explanation(answer)
            all_answers.extend(answers)
    except KeyboardInterrupt:
        print("\nInterrupted.")
    except ResolutionError as e:
        print(f"\nResolution failed: {e}")
        raise SystemExit(1)

    print_kb(kb)
    print_cache(ctx.cache)

    if args.dot:
        export_dot(all_answers, args.dot)

    if args.save:
        kb.save(args.save)
        print(f"Knowledge base saved to {args.save}")


if __name__ == "__main__":
    main()
