"""Tests for routeshift.driver — discovery, isolation, concurrent batches."""

import logging
from pathlib import Path

import pytest

from routeshift.config import MigrationConfig
from routeshift.driver import (
    BatchResult,
    FileResult,
    FileStatus,
    discover,
    migrate_file,
    migrate_paths,
    migrate_source,
    run_migration,
)
from routeshift.engine import SkipReason
from routeshift.errors import ParseError

PAGE = """\
import { json } from '@remix-run/node';

export const loader = () => json({ ok: true });

export default function Page() {
  return null;
}
"""

PLAIN = "export const answer = 42;\n"

BROKEN = "export const loader = (;\n"


def _routes(tmp_path: Path, files: dict[str, str]) -> Path:
    routes = tmp_path / "app" / "routes"
    routes.mkdir(parents=True)
    for name, text in files.items():
        (routes / name).write_text(text, encoding="utf-8")
    return routes


class TestDiscover:
    def test_walks_directories_sorted(self, tmp_path: Path) -> None:
        routes = _routes(tmp_path, {"b.tsx": PLAIN, "a.ts": PLAIN, "notes.md": "# notes"})
        found = discover([routes])
        assert [path.name for path in found] == ["a.ts", "b.tsx"]

    def test_skips_dependency_and_hidden_dirs(self, tmp_path: Path) -> None:
        routes = _routes(tmp_path, {"index.tsx": PLAIN})
        for name in ("node_modules", ".cache"):
            (routes / name).mkdir()
            (routes / name / "x.tsx").write_text(PLAIN, encoding="utf-8")
        assert [path.name for path in discover([routes])] == ["index.tsx"]

    def test_explicit_file_and_duplicates(self, tmp_path: Path) -> None:
        routes = _routes(tmp_path, {"index.tsx": PLAIN})
        found = discover([routes / "index.tsx", routes])
        assert found == [routes / "index.tsx"]

    def test_missing_path_warns(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="routeshift.driver"):
            assert discover([tmp_path / "nope"]) == []
        assert "No such file or directory" in caplog.text

    def test_custom_extensions(self, tmp_path: Path) -> None:
        routes = _routes(tmp_path, {"a.ts": PLAIN, "b.tsx": PLAIN})
        config = MigrationConfig(extensions=(".tsx",))
        assert [path.name for path in discover([routes], config)] == ["b.tsx"]


class TestMigrateSource:
    def test_changed(self) -> None:
        outcome, output = migrate_source(PAGE, "app/routes/about.tsx")
        assert outcome.changed
        assert output is not None
        assert "createFileRoute('/about')" in output

    def test_unchanged(self) -> None:
        outcome, output = migrate_source(PLAIN, "app/routes/about.tsx")
        assert outcome.reason is SkipReason.NOT_APPLICABLE
        assert output is None

    def test_syntax_error_raises(self) -> None:
        with pytest.raises(ParseError):
            migrate_source(BROKEN, "app/routes/broken.tsx")


class TestMigrateFile:
    def test_writes_by_default(self, tmp_path: Path) -> None:
        routes = _routes(tmp_path, {"about.tsx": PAGE})
        result = migrate_file(routes / "about.tsx")
        assert result.status is FileStatus.MIGRATED
        assert result.route_path == "/about"
        assert (routes / "about.tsx").read_text(encoding="utf-8") == result.output

    def test_dry_run_leaves_file(self, tmp_path: Path) -> None:
        routes = _routes(tmp_path, {"about.tsx": PAGE})
        result = migrate_file(routes / "about.tsx", write=False)
        assert result.status is FileStatus.MIGRATED
        assert (routes / "about.tsx").read_text(encoding="utf-8") == PAGE

    def test_parse_failure_is_recorded(self, tmp_path: Path) -> None:
        routes = _routes(tmp_path, {"broken.tsx": BROKEN})
        result = migrate_file(routes / "broken.tsx")
        assert result.status is FileStatus.FAILED
        assert result.error is not None
        assert "broken.tsx" in result.error
        assert result.advisories == ()

    def test_unreadable_file(self, tmp_path: Path) -> None:
        result = migrate_file(tmp_path / "missing.tsx")
        assert result.status is FileStatus.FAILED
        assert result.source == ""


class TestMigratePaths:
    @pytest.mark.anyio
    async def test_failure_is_isolated(self, tmp_path: Path) -> None:
        routes = _routes(tmp_path, {"a.tsx": PAGE, "b.tsx": BROKEN, "c.tsx": PLAIN})
        batch = await migrate_paths([routes], write=False, workers=2)
        assert [r.path.name for r in batch.results] == ["a.tsx", "b.tsx", "c.tsx"]
        assert [r.status for r in batch.results] == [
            FileStatus.MIGRATED,
            FileStatus.FAILED,
            FileStatus.UNCHANGED,
        ]
        assert not batch.ok

    @pytest.mark.anyio
    async def test_empty(self, tmp_path: Path) -> None:
        batch = await migrate_paths([tmp_path])
        assert batch == BatchResult()
        assert batch.ok

    @pytest.mark.anyio
    async def test_many_files_keep_order(self, tmp_path: Path) -> None:
        files = {f"r{index:02}.tsx": PAGE for index in range(20)}
        routes = _routes(tmp_path, files)
        batch = await migrate_paths([routes], workers=3)
        assert [r.path.name for r in batch.results] == sorted(files)
        assert len(batch.migrated) == 20

    def test_blocking_wrapper(self, tmp_path: Path) -> None:
        routes = _routes(tmp_path, {"about.tsx": PAGE})
        batch = run_migration([routes])
        assert len(batch.migrated) == 1
        assert "createFileRoute" in (routes / "about.tsx").read_text(encoding="utf-8")

    def test_second_run_is_a_no_op(self, tmp_path: Path) -> None:
        routes = _routes(tmp_path, {"about.tsx": PAGE})
        run_migration([routes])
        second = run_migration([routes])
        assert len(second.unchanged) == 1
        assert second.results[0].outcome is not None
        assert second.results[0].outcome.reason is SkipReason.ALREADY_MIGRATED


class TestResults:
    def test_partitions(self) -> None:
        batch = BatchResult(
            (
                FileResult(Path("a.tsx"), FileStatus.MIGRATED),
                FileResult(Path("b.tsx"), FileStatus.UNCHANGED),
                FileResult(Path("c.tsx"), FileStatus.FAILED, error="boom"),
            )
        )
        assert [r.path.name for r in batch.migrated] == ["a.tsx"]
        assert [r.path.name for r in batch.unchanged] == ["b.tsx"]
        assert [r.path.name for r in batch.failed] == ["c.tsx"]
        assert not batch.ok

    def test_result_without_outcome(self) -> None:
        result = FileResult(Path("a.tsx"), FileStatus.FAILED)
        assert result.route_path is None
        assert result.advisories == ()
