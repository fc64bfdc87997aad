"""Tests for routeshift.paths — route path calculation."""

import re

import pytest

from routeshift.paths import compute_route_path


class TestDocumentedExamples:
    def test_dynamic_segment(self) -> None:
        assert compute_route_path("app/routes/posts.$postId.tsx") == "/posts/:postId"

    def test_index(self) -> None:
        assert compute_route_path("app/routes/index.tsx") == "/"

    def test_underscore_index(self) -> None:
        assert compute_route_path("app/routes/_index.tsx") == "/"


class TestSegments:
    @pytest.mark.parametrize(
        ("file_path", "expected"),
        [
            ("app/routes/about.tsx", "/about"),
            ("app/routes/blog/index.tsx", "/blog/"),
            ("app/routes/posts._index.tsx", "/posts/"),
            ("app/routes/_auth.login.tsx", "/_auth/login"),
            ("app/routes/users.$userId.posts.$postId.ts", "/users/:userId/posts/:postId"),
            ("app/routes/files.$.jsx", "/files/:*"),
            ("app/routes/api/health.js", "/api/health"),
        ],
    )
    def test_flat_and_nested(self, file_path: str, expected: str) -> None:
        assert compute_route_path(file_path) == expected

    def test_windows_separators(self) -> None:
        assert compute_route_path("app\\routes\\posts.$postId.tsx") == "/posts/:postId"

    def test_absolute_path_uses_last_root(self) -> None:
        path = "/home/dev/routes/site/app/routes/pricing.tsx"
        assert compute_route_path(path) == "/pricing"

    def test_root_must_be_a_whole_segment(self) -> None:
        assert compute_route_path("app/routes.tsx") == "app/routes"

    def test_without_root_path_is_taken_as_relative(self) -> None:
        assert compute_route_path("_layout.tsx") == "/_layout"
        assert compute_route_path("./index.tsx") == "/"

    def test_custom_root(self) -> None:
        assert compute_route_path("src/pages/users.$id.tsx", routes_root="pages") == "/users/:id"


class TestProperties:
    @pytest.mark.parametrize(
        "file_path",
        [
            "app/routes/a.$b.c.$d.tsx",
            "app/routes/$lang.docs.$.tsx",
            "app/routes/$id/edit.tsx",
            "app/routes/_index.tsx",
            "app/routes/shop.$category._index.tsx",
        ],
    )
    def test_leading_slash_and_one_token_per_dollar_segment(self, file_path: str) -> None:
        result = compute_route_path(file_path)
        relative = file_path.split("routes/", 1)[1]
        dollar_segments = [s for s in re.split(r"[./]", relative) if s.startswith("$")]

        assert result.startswith("/")
        tokens = [s for s in result.split("/") if s.startswith(":")]
        assert [t[1:] or "*" for t in tokens] == [s[1:] or "*" for s in dollar_segments]
