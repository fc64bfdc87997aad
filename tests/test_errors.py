"""Tests for routeshift.errors — exception hierarchy and messages."""

import pytest

from routeshift.errors import ConfigurationError, ParseError, ReportNotInstalledError, RouteshiftError
from routeshift.syntax import parse_module


class TestHierarchy:
    def test_configuration_error_is_routeshift_error(self) -> None:
        assert issubclass(ConfigurationError, RouteshiftError)

    def test_parse_error_is_routeshift_error(self) -> None:
        assert issubclass(ParseError, RouteshiftError)

    def test_report_error_is_routeshift_error(self) -> None:
        assert issubclass(ReportNotInstalledError, RouteshiftError)


class TestParseError:
    def test_str_has_position(self) -> None:
        err = ParseError(path="app/routes/a.tsx", line=3, column=7)
        assert str(err) == "app/routes/a.tsx:3:7: syntax error"

    def test_raised_for_invalid_source(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_module("export const loader = (;\n", "app/routes/a.tsx")
        assert exc_info.value.path == "app/routes/a.tsx"
        assert exc_info.value.line == 1

    def test_frozen(self) -> None:
        err = ParseError(path="x.tsx")
        with pytest.raises(AttributeError):
            err.line = 2  # type: ignore[misc]
