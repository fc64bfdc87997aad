"""Migration engine — one module in, one module (or UNCHANGED) out.

The engine is pure: it never reads or writes files and holds no state
between calls, so any number of modules can be rewritten concurrently.
"""

from routeshift.engine.classify import RouteKind, classify
from routeshift.engine.rewriter import UNCHANGED, Outcome, SkipReason, Stage, Unchanged, rewrite, transform

__all__ = [
    "UNCHANGED",
    "Outcome",
    "RouteKind",
    "SkipReason",
    "Stage",
    "Unchanged",
    "classify",
    "rewrite",
    "transform",
]
