"""Tests for routeshift.config — MigrationConfig frozen dataclass."""

from dataclasses import replace

import pytest

from routeshift.config import DEFAULT_CONFIG, MigrationConfig
from routeshift.errors import ConfigurationError


class TestMigrationConfig:
    def test_defaults(self) -> None:
        cfg = MigrationConfig()

        assert cfg.routes_root == "routes"
        assert cfg.envelope == "json"
        assert cfg.page_factory == "createFileRoute"
        assert cfg.page_factory_source == "@tanstack/react-router"
        assert cfg.resource_factory == "createServerFileRoute"
        assert cfg.loader_params == ("params", "search")
        assert cfg.quote == "'"

    def test_frozen(self) -> None:
        with pytest.raises(AttributeError):
            DEFAULT_CONFIG.envelope = "typedjson"  # type: ignore[misc]

    def test_replace_keeps_other_fields(self) -> None:
        cfg = replace(DEFAULT_CONFIG, envelope="typedjson")
        assert cfg.envelope == "typedjson"
        assert cfg.routes_root == DEFAULT_CONFIG.routes_root

    def test_legacy_pattern(self) -> None:
        pattern = DEFAULT_CONFIG.legacy_pattern
        assert pattern.search("@remix-run/node")
        assert pattern.search("@remix-run/react")
        assert not pattern.search("@remix-run/dev")
        assert not pattern.search("@tanstack/react-router")

    def test_remap_table(self) -> None:
        assert DEFAULT_CONFIG.remap == {"@remix-run/react": "@tanstack/react-router"}

    def test_descriptor_names(self) -> None:
        assert DEFAULT_CONFIG.descriptor_names == frozenset({"Route", "ServerRoute"})


class TestValidation:
    def test_bad_quote(self) -> None:
        with pytest.raises(ConfigurationError, match="quote"):
            MigrationConfig(quote="`")

    @pytest.mark.parametrize("root", ["", "app/routes"])
    def test_bad_routes_root(self, root: str) -> None:
        with pytest.raises(ConfigurationError, match="routes_root"):
            MigrationConfig(routes_root=root)

    def test_envelope_must_be_identifier(self) -> None:
        with pytest.raises(ConfigurationError, match="envelope"):
            MigrationConfig(envelope="json()")

    def test_invalid_regex(self) -> None:
        with pytest.raises(ConfigurationError, match="legacy_sources"):
            MigrationConfig(legacy_sources="(unclosed")
