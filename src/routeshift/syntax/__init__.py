"""Syntax layer: tree model, tree-sitter parser, printer and walkers.

The engine only ever sees :class:`~routeshift.syntax.nodes.Module`
trees; parsing and printing stay at the edges.
"""

from routeshift.syntax.nodes import Module
from routeshift.syntax.parser import parse_module
from routeshift.syntax.printer import print_module, print_node

__all__ = [
    "Module",
    "parse_module",
    "print_module",
    "print_node",
]
