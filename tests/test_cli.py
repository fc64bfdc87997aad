"""Tests for routeshift.cli — CLI entrypoint and argument parsing."""

from pathlib import Path

import pytest

from routeshift.cli import main

PAGE = """\
export const loader = () => ({ ok: true });

export default function Page() {
  return null;
}
"""


class TestCLIHelp:
    def test_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])
        assert exc_info.value.code == 0

    def test_migrate_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["migrate", "--help"])
        assert exc_info.value.code == 0

    def test_path_help_exits_zero(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["path", "--help"])
        assert exc_info.value.code == 0


class TestCLIMissingArgs:
    def test_migrate_missing_paths(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["migrate"])
        assert exc_info.value.code == 2

    def test_path_missing_files(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["path"])
        assert exc_info.value.code == 2


class TestCLINoCommand:
    def test_no_command_exits_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "routeshift" in captured.out


class TestPathCommand:
    def test_prints_route_paths(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["path", "app/routes/posts.$postId.tsx", "app/routes/_index.tsx"])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].endswith("  /posts/:postId")
        assert lines[1].endswith("  /")

    def test_routes_root(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["path", "--routes-root", "pages", "src/pages/about.tsx"])
        assert capsys.readouterr().out.strip().endswith("/about")

    def test_invalid_routes_root(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["path", "--routes-root", "a/b", "x.tsx"])
        assert exc_info.value.code == 2
        assert "Error:" in capsys.readouterr().err


class TestMigrateCommand:
    def test_dry_run(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        routes = tmp_path / "app" / "routes"
        routes.mkdir(parents=True)
        (routes / "about.tsx").write_text(PAGE, encoding="utf-8")

        main(["migrate", "--dry-run", "--diff", str(routes)])

        out = capsys.readouterr().out
        assert "migrated" in out
        assert "/about" in out
        assert "+export const Route = createFileRoute('/about')({" in out
        assert "1 file(s): 1 would migrate, 0 unchanged, 0 failed" in out
        assert (routes / "about.tsx").read_text(encoding="utf-8") == PAGE

    def test_failure_exits_one(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        routes = tmp_path / "app" / "routes"
        routes.mkdir(parents=True)
        (routes / "about.tsx").write_text(PAGE, encoding="utf-8")
        (routes / "broken.tsx").write_text("export const = ;\n", encoding="utf-8")

        with pytest.raises(SystemExit) as exc_info:
            main(["migrate", str(routes)])

        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "failed" in out
        assert "createFileRoute" in (routes / "about.tsx").read_text(encoding="utf-8")

    def test_nothing_found(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["migrate", str(tmp_path)])
        assert exc_info.value.code == 1
        assert "No route files found." in capsys.readouterr().err

    def test_prints_advisories(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        routes = tmp_path / "app" / "routes"
        routes.mkdir(parents=True)
        (routes / "search.tsx").write_text(
            "export const loader = ({ request }) => request.url;\n"
            "export default function Search() {\n  return null;\n}\n",
            encoding="utf-8",
        )
        main(["migrate", "--dry-run", str(routes)])
        assert "! loader no longer receives request" in capsys.readouterr().out
