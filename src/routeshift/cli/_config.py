"""Build a ``MigrationConfig`` from CLI flags."""

import argparse
import sys
from dataclasses import replace

from routeshift.config import DEFAULT_CONFIG, MigrationConfig
from routeshift.errors import ConfigurationError


def config_from_args(args: argparse.Namespace) -> MigrationConfig:
    """Apply the flags that were given on top of the defaults.

    Exits with status 2 when the resulting configuration is invalid.
    """
    overrides: dict[str, str] = {}
    for name in ("routes_root", "envelope"):
        value = getattr(args, name, None)
        if value is not None:
            overrides[name] = value
    try:
        return replace(DEFAULT_CONFIG, **overrides)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc
