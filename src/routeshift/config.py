"""Migration configuration.

MigrationConfig is a frozen dataclass — immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

import re
from dataclasses import dataclass

from routeshift.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class MigrationConfig:
    """Migration settings. Immutable after creation.

    All fields have defaults for a Remix → TanStack Router migration.
    Override what you need::

        config = MigrationConfig(routes_root="pages", envelope="typedjson")
    """

    # Route files
    routes_root: str = "routes"
    extensions: tuple[str, ...] = (".tsx", ".ts", ".jsx", ".js")

    # Legacy convention
    envelope: str = "json"  # Return-value wrapper unwrapped to its first argument
    legacy_sources: str = r"^@remix-run/(node|react|server-runtime|cloudflare|deno)$"
    source_remap: tuple[tuple[str, str], ...] = (
        ("@remix-run/react", "@tanstack/react-router"),
    )

    # Page routes
    page_factory: str = "createFileRoute"
    page_factory_source: str = "@tanstack/react-router"
    page_descriptor: str = "Route"
    component_name: str = "RouteComponent"  # Used when the default export is unnamed
    loader_params: tuple[str, ...] = ("params", "search")

    # Resource routes
    resource_factory: str = "createServerFileRoute"
    resource_factory_source: str = "@tanstack/react-start/server"
    resource_descriptor: str = "ServerRoute"
    resource_method: str = "methods"

    # Output
    advisory_prefix: str = "routeshift:"
    quote: str = "'"
    indent: str = "  "

    def __post_init__(self) -> None:
        if self.quote not in ("'", '"'):
            msg = f"quote must be a single or double quote, got {self.quote!r}"
            raise ConfigurationError(msg)
        if not self.routes_root or "/" in self.routes_root:
            msg = f"routes_root must be a single path segment, got {self.routes_root!r}"
            raise ConfigurationError(msg)
        if not self.envelope.isidentifier():
            msg = f"envelope must be an identifier, got {self.envelope!r}"
            raise ConfigurationError(msg)
        try:
            re.compile(self.legacy_sources)
        except re.error as exc:
            msg = f"legacy_sources is not a valid regular expression: {exc}"
            raise ConfigurationError(msg) from None

    @property
    def legacy_pattern(self) -> re.Pattern[str]:
        return re.compile(self.legacy_sources)

    @property
    def remap(self) -> dict[str, str]:
        return dict(self.source_remap)

    @property
    def descriptor_names(self) -> frozenset[str]:
        return frozenset({self.page_descriptor, self.resource_descriptor})


DEFAULT_CONFIG = MigrationConfig()
