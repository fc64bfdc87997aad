"""Routeshift exception hierarchy.

Shared across the parser, engine, driver, and CLI so every layer raises
and catches the same types.  Expected outcomes (a module with nothing to
migrate, a declaration that cannot be reshaped) are never exceptions;
they surface as ``Outcome`` values from the rewriter.
"""

from dataclasses import dataclass


class RouteshiftError(Exception):
    """Base for all routeshift-specific errors."""


class ConfigurationError(RouteshiftError):
    """Raised when a ``MigrationConfig`` is invalid.

    Typically caught by the CLI before any file is touched.
    """


@dataclass(frozen=True, slots=True)
class ParseError(RouteshiftError):
    """Source text that the parser could not turn into a syntax tree.

    Raised per file.  The batch driver records it as a failure for that
    file and keeps going.
    """

    path: str
    line: int = 0
    column: int = 0
    detail: str = "syntax error"

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}: {self.detail}"


class ReportNotInstalledError(RouteshiftError):
    """Raised when a report is requested without the ``report`` extra installed."""
