"""Shared fixtures for routeshift tests."""

from collections.abc import Callable

import pytest

from routeshift.syntax import Module, parse_module


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def parse() -> Callable[..., Module]:
    """Parse source text as if read from a route file."""

    def _parse(source: str, path: str = "app/routes/posts.$postId.tsx") -> Module:
        return parse_module(source, path)

    return _parse
