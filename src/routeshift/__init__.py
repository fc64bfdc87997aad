"""Routeshift — migrate Remix route modules to TanStack route descriptors.

Rewrites ``loader``/``action`` exports into a single route descriptor
built by a factory call, computing the route path from the file name.

Basic usage::

    from routeshift import parse_module, print_module, transform, UNCHANGED

    module = parse_module(source, "app/routes/posts.$postId.tsx")
    if transform(module) is not UNCHANGED:
        print(print_module(module))

Whole directories::

    from routeshift import run_migration

    result = run_migration(["app/routes"], write=False)

Markdown reports (``pip install routeshift[report]``)::

    from routeshift.report import render_report
    print(render_report(result))
"""

__version__ = "0.1.0"
__all__ = [
    "UNCHANGED",
    "BatchResult",
    "ConfigurationError",
    "FileResult",
    "FileStatus",
    "MigrationConfig",
    "Outcome",
    "ParseError",
    "RouteKind",
    "RouteshiftError",
    "compute_route_path",
    "migrate_paths",
    "migrate_source",
    "parse_module",
    "print_module",
    "rewrite",
    "run_migration",
    "transform",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import routeshift`` fast (no grammar loading) while providing
    a clean top-level API.
    """
    if name == "MigrationConfig":
        from routeshift.config import MigrationConfig

        return MigrationConfig

    if name == "compute_route_path":
        from routeshift.paths import compute_route_path

        return compute_route_path

    if name in ("parse_module", "print_module"):
        from routeshift import syntax as _syntax

        return getattr(_syntax, name)

    if name in ("UNCHANGED", "Outcome", "RouteKind", "rewrite", "transform"):
        from routeshift import engine as _engine

        return getattr(_engine, name)

    if name in (
        "BatchResult",
        "FileResult",
        "FileStatus",
        "migrate_paths",
        "migrate_source",
        "run_migration",
    ):
        from routeshift import driver as _driver

        return getattr(_driver, name)

    if name in ("ConfigurationError", "ParseError", "RouteshiftError"):
        from routeshift import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
