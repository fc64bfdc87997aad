"""Markdown migration report rendered with kida.

Optional: requires the ``report`` extra (``pip install routeshift[report]``).

The report lists every file of a batch with its route path and status,
and collects advisory notes and failures into sections of their own so
a reviewer can work through them.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from routeshift.driver import BatchResult, FileResult
from routeshift.errors import ReportNotInstalledError

if TYPE_CHECKING:
    from kida import Environment

REPORT_TEMPLATE = """\
# Route migration report

{{ summary }}

| File | Route | Status |
| --- | --- | --- |
{% for row in rows %}| `{{ row.path }}` | {{ row.route }} | {{ row.status }} |
{% end %}
{% if advisories %}
## Needs review

{% for row in advisories %}- `{{ row.path }}`: {{ row.text }}
{% end %}
{% end %}
{% if failures %}
## Failed

{% for row in failures %}- `{{ row.path }}`: {{ row.text }}
{% end %}
{% end %}
"""


@dataclass(frozen=True, slots=True)
class ReportRow:
    path: str
    route: str
    status: str


@dataclass(frozen=True, slots=True)
class ReportNote:
    path: str
    text: str


def _environment() -> "Environment":
    try:
        from kida import Environment
    except ImportError:
        msg = (
            "routeshift reports require 'kida' for rendering. "
            "Install it with: pip install routeshift[report]"
        )
        raise ReportNotInstalledError(msg) from None
    # Markdown output: nothing to escape
    return Environment(autoescape=False)


def _display(path: Path, base: Path | None) -> str:
    if base is not None:
        try:
            return path.relative_to(base).as_posix()
        except ValueError:
            pass
    return path.as_posix()


def _row(result: FileResult, base: Path | None) -> ReportRow:
    return ReportRow(
        path=_display(result.path, base),
        route=f"`{result.route_path}`" if result.route_path else "",
        status=result.status.value,
    )


def report_context(batch: BatchResult, *, base: Path | None = None) -> dict[str, Any]:
    """Template context for *batch*; paths are shown relative to *base*."""
    total = len(batch.results)
    summary = (
        f"{total} file(s): {len(batch.migrated)} migrated, "
        f"{len(batch.unchanged)} unchanged, {len(batch.failed)} failed."
    )
    return {
        "summary": summary,
        "rows": [_row(result, base) for result in batch.results],
        "advisories": [
            ReportNote(_display(result.path, base), note)
            for result in batch.results
            for note in result.advisories
        ],
        "failures": [
            ReportNote(_display(result.path, base), result.error or "unknown error")
            for result in batch.failed
        ],
    }


def render_report(batch: BatchResult, *, base: Path | None = None) -> str:
    """Render *batch* as a Markdown document."""
    template = _environment().from_string(REPORT_TEMPLATE)
    return template.render(report_context(batch, base=base))


def write_report(batch: BatchResult, destination: Path, *, base: Path | None = None) -> None:
    destination.write_text(render_report(batch, base=base), encoding="utf-8")
