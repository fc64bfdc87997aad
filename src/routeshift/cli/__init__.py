"""Routeshift CLI — migrate route modules and inspect route paths.

Entry point registered as ``routeshift`` in ``pyproject.toml``::

    [project.scripts]
    routeshift = "routeshift.cli:main"
"""

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``routeshift`` command."""
    parser = argparse.ArgumentParser(
        prog="routeshift",
        description="Routeshift — migrate Remix route modules to TanStack route descriptors.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log more detail (repeat for debug output)",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- routeshift migrate -----------------------------------------------
    migrate_parser = subparsers.add_parser("migrate", help="Rewrite route modules in place")
    migrate_parser.add_argument("paths", nargs="+", help="Route files or directories to walk")
    migrate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would change without writing files",
    )
    migrate_parser.add_argument(
        "--diff",
        action="store_true",
        help="Print a unified diff for every migrated file",
    )
    migrate_parser.add_argument(
        "--workers",
        type=int,
        default=8,
        help="Number of files processed concurrently",
    )
    migrate_parser.add_argument(
        "--routes-root",
        default=None,
        help="Directory name that roots the route tree (default: routes)",
    )
    migrate_parser.add_argument(
        "--envelope",
        default=None,
        help="Name of the response helper to unwrap (default: json)",
    )
    migrate_parser.add_argument(
        "--report",
        default=None,
        metavar="FILE",
        help="Write a Markdown report (requires routeshift[report])",
    )

    # -- routeshift path --------------------------------------------------
    path_parser = subparsers.add_parser("path", help="Print the route path of route files")
    path_parser.add_argument("files", nargs="+", help="Route file paths (need not exist)")
    path_parser.add_argument(
        "--routes-root",
        default=None,
        help="Directory name that roots the route tree (default: routes)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose > 1 else logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "migrate":
        from routeshift.cli._migrate import run_migrate

        run_migrate(args)
    elif args.command == "path":
        from routeshift.cli._path import run_path

        run_path(args)
