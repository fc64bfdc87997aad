"""Route role classification."""

from enum import Enum

from routeshift.engine.locator import find_default_export
from routeshift.syntax.nodes import Module


class RouteKind(Enum):
    """What a route module does."""

    PAGE = "page"  # Renders UI; may declare a data loader
    RESOURCE = "resource"  # Data and mutation handlers only


def classify(module: Module) -> RouteKind:
    """A module with a default export is a page route; anything else is a resource route."""
    if find_default_export(module) is not None:
        return RouteKind.PAGE
    return RouteKind.RESOURCE
