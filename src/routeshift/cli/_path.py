"""``routeshift path`` — print the route path computed for each file."""

import argparse

from routeshift.cli._config import config_from_args
from routeshift.paths import compute_route_path


def run_path(args: argparse.Namespace) -> None:
    config = config_from_args(args)
    width = max(len(name) for name in args.files)
    for name in args.files:
        print(f"{name:<{width}}  {compute_route_path(name, routes_root=config.routes_root)}")
