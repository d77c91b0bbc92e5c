"""
Domain registry.

Each domain is a dict describing a ready-to-query knowledge base:
    make_context:  (kb=None) -> ResolutionContext
    make_kb:       () -> KnowledgeBase
    queries:       list of literal tuples to resolve
    description:   str
"""

from .family import make_family_kb, make_family_context, QUERIES as FAMILY_QUERIES
from .marriage import make_marriage_kb, make_marriage_context, QUERIES as MARRIAGE_QUERIES


DOMAINS = {
    "family": {
        "make_context": make_family_context,
        "make_kb":      make_family_kb,
        "queries":      FAMILY_QUERIES,
        "description":  "Family tree: virtual grandparents, materialised ancestors",
    },
    "marriage": {
        "make_context": make_marriage_context,
        "make_kb":      make_marriage_kb,
        "queries":      MARRIAGE_QUERIES,
        "description":  "Relations with roles: role hierarchy and role expansion",
    },
}
