"""``routeshift migrate`` — rewrite route modules.

Walks the given paths, migrates every route module concurrently and
prints one line per file followed by a summary.  Exits with code 1 if
any file failed.
"""

import argparse
import difflib
import sys
from pathlib import Path

from routeshift.cli._config import config_from_args
from routeshift.driver import BatchResult, FileResult, FileStatus, run_migration
from routeshift.errors import ReportNotInstalledError


def _line(result: FileResult) -> str:
    detail = result.route_path or ""
    if result.status is FileStatus.FAILED:
        detail = result.error or ""
    elif result.outcome is not None and result.outcome.reason is not None:
        detail = result.outcome.reason.value
    return f"{result.status.value:<9}  {result.path}  {detail}".rstrip()


def _diff(result: FileResult) -> str:
    name = result.path.as_posix()
    return "".join(
        difflib.unified_diff(
            result.source.splitlines(keepends=True),
            (result.output or "").splitlines(keepends=True),
            fromfile=f"a/{name}",
            tofile=f"b/{name}",
        )
    )


def _summary(batch: BatchResult, *, dry_run: bool) -> str:
    verb = "would migrate" if dry_run else "migrated"
    return (
        f"{len(batch.results)} file(s): {len(batch.migrated)} {verb}, "
        f"{len(batch.unchanged)} unchanged, {len(batch.failed)} failed"
    )


def run_migrate(args: argparse.Namespace) -> None:
    """Migrate ``args.paths`` and print per-file results."""
    config = config_from_args(args)
    batch = run_migration(args.paths, config, write=not args.dry_run, workers=args.workers)

    if not batch.results:
        print("No route files found.", file=sys.stderr)
        raise SystemExit(1)

    for result in batch.results:
        print(_line(result))
        for note in result.advisories:
            print(f"           ! {note}")
        if args.diff and result.output is not None:
            sys.stdout.write(_diff(result))
    print(_summary(batch, dry_run=args.dry_run))

    if args.report:
        from routeshift.report import write_report

        try:
            write_report(batch, Path(args.report), base=Path.cwd())
        except ReportNotInstalledError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            raise SystemExit(1) from exc

    if not batch.ok:
        raise SystemExit(1)
