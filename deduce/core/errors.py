"""
Hard failures of a resolution pass.

An empty answer is never an error: it is the normal "dead branch" signal
and travels up the tree as an empty Substitution. The exceptions here are
reserved for broken invariants -- things that mean the reasoner itself is
wrong, not that the query has no answers.
"""


class ResolutionError(Exception):
    """Base class for every hard failure raised by the reasoner."""


class DuplicateMaterialisationError(ResolutionError):
    """A derived fact was about to be written to the store a second time."""

    def __init__(self, fact):
        self.fact = fact
        super().__init__(f"fact already materialised: {fact}")


class CycleGuardError(ResolutionError):
    """The set of in-flight queries lost track of a query it should hold."""


class UnifierError(ResolutionError):
    """No variable mapping exists between two queries declared equivalent."""


class CacheError(ResolutionError):
    """A cache entry was used with a query outside its equivalence class."""


class RuleError(ResolutionError):
    """An inference rule is malformed (unsafe head, role variable in head)."""
