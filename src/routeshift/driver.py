"""Batch driver — discovery, per-file isolation, concurrent processing.

The engine is synchronous and pure; this module is the only place that
touches the filesystem.  Files are parsed and rewritten in worker
threads (``anyio.to_thread``) bounded by a ``CapacityLimiter``, each
with its own parser and syntax tree.

A file that fails (unreadable, syntax errors, an unexpected engine
error) is recorded as ``FAILED`` and logged; the rest of the batch
keeps going.

Usage::

    result = run_migration(["app/routes"], write=False)
    for item in result.results:
        print(item.path, item.status.value)
"""

import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from functools import partial
from pathlib import Path

import anyio

from routeshift.config import DEFAULT_CONFIG, MigrationConfig
from routeshift.engine import Outcome, rewrite
from routeshift.errors import ParseError
from routeshift.syntax import parse_module, print_module

logger = logging.getLogger("routeshift.driver")

# Directories never worth descending into
_SKIP_DIRS = frozenset({"node_modules", "build", "dist"})


class FileStatus(Enum):
    """What happened to one file."""

    MIGRATED = "migrated"
    UNCHANGED = "unchanged"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class FileResult:
    """Result for one file.

    ``source`` and ``output`` hold the text before and after the rewrite
    (``output`` is None unless the file was migrated).
    """

    path: Path
    status: FileStatus
    outcome: Outcome | None = None
    source: str = ""
    output: str | None = None
    error: str | None = None

    @property
    def route_path(self) -> str | None:
        return self.outcome.route_path if self.outcome is not None else None

    @property
    def advisories(self) -> tuple[str, ...]:
        return self.outcome.advisories if self.outcome is not None else ()


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Results for a whole run, in discovery order."""

    results: tuple[FileResult, ...] = ()

    def _with(self, status: FileStatus) -> list[FileResult]:
        return [r for r in self.results if r.status is status]

    @property
    def migrated(self) -> list[FileResult]:
        return self._with(FileStatus.MIGRATED)

    @property
    def unchanged(self) -> list[FileResult]:
        return self._with(FileStatus.UNCHANGED)

    @property
    def failed(self) -> list[FileResult]:
        return self._with(FileStatus.FAILED)

    @property
    def ok(self) -> bool:
        return not self.failed


def discover(paths: Iterable[str | Path], config: MigrationConfig = DEFAULT_CONFIG) -> list[Path]:
    """Expand *paths* into route source files.

    Files are taken as given; directories are walked for files with one
    of ``config.extensions``, skipping hidden and dependency directories.
    The result is sorted and free of duplicates.
    """
    found: set[Path] = set()
    for entry in paths:
        path = Path(entry)
        if path.is_dir():
            for root, dirs, files in os.walk(path):
                dirs[:] = [d for d in dirs if d not in _SKIP_DIRS and not d.startswith(".")]
                found.update(Path(root) / name for name in files if name.endswith(config.extensions))
        elif path.exists():
            found.add(path)
        else:
            logger.warning("No such file or directory: %s", path)
    return sorted(found)


def migrate_source(
    source: str,
    path: str,
    config: MigrationConfig = DEFAULT_CONFIG,
) -> tuple[Outcome, str | None]:
    """Migrate one module's source text.

    Returns the outcome and the new source text (None when unchanged).

    Raises:
        ParseError: If *source* has syntax errors.
    """
    module = parse_module(source, path)
    outcome = rewrite(module, config)
    if not outcome.changed:
        return outcome, None
    return outcome, print_module(module, config)


def migrate_file(path: Path, config: MigrationConfig = DEFAULT_CONFIG, *, write: bool = True) -> FileResult:
    """Migrate one file, never raising."""
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return FileResult(path, FileStatus.FAILED, error=str(exc))

    try:
        outcome, output = migrate_source(source, path.as_posix(), config)
    except ParseError as exc:
        logger.warning("Skipping %s", exc)
        return FileResult(path, FileStatus.FAILED, source=source, error=str(exc))
    except Exception as exc:
        logger.exception("Unexpected error migrating %s", path)
        return FileResult(path, FileStatus.FAILED, source=source, error=f"{type(exc).__name__}: {exc}")

    if output is None:
        return FileResult(path, FileStatus.UNCHANGED, outcome, source)

    if write:
        try:
            path.write_text(output, encoding="utf-8")
        except OSError as exc:
            logger.warning("Cannot write %s: %s", path, exc)
            return FileResult(path, FileStatus.FAILED, outcome, source, output, error=str(exc))
    logger.info("Migrated %s -> %s", path, outcome.route_path)
    return FileResult(path, FileStatus.MIGRATED, outcome, source, output)


async def migrate_paths(
    paths: Iterable[str | Path],
    config: MigrationConfig = DEFAULT_CONFIG,
    *,
    write: bool = True,
    workers: int = 8,
) -> BatchResult:
    """Migrate every route file under *paths* concurrently.

    At most *workers* files are processed at the same time.
    """
    files = discover(paths, config)
    if not files:
        return BatchResult()

    limiter = anyio.CapacityLimiter(max(1, workers))
    results: dict[int, FileResult] = {}

    async def _migrate(index: int, path: Path) -> None:
        results[index] = await anyio.to_thread.run_sync(
            partial(migrate_file, path, config, write=write),
            limiter=limiter,
        )

    async with anyio.create_task_group() as tg:
        for index, path in enumerate(files):
            tg.start_soon(_migrate, index, path)

    return BatchResult(tuple(results[index] for index in range(len(files))))


def run_migration(
    paths: Iterable[str | Path],
    config: MigrationConfig = DEFAULT_CONFIG,
    *,
    write: bool = True,
    workers: int = 8,
) -> BatchResult:
    """Blocking wrapper around :func:`migrate_paths`."""
    return anyio.run(partial(migrate_paths, list(paths), config, write=write, workers=workers))
