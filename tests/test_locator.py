"""Tests for routeshift.engine.locator — declaration lookup."""

from collections.abc import Callable

import pytest

from routeshift.engine.locator import (
    ForwardedDefault,
    FunctionShaped,
    InlineDefault,
    ReferencedDefault,
    VariableShaped,
    callable_init,
    declares_descriptor,
    find_default_export,
    locate,
)
from routeshift.syntax import Module
from routeshift.syntax.nodes import ArrowFunction, ExportNamed, FunctionExpression, Identifier

Parse = Callable[..., Module]


class TestLocateShapes:
    def test_exported_function(self, parse: Parse) -> None:
        module = parse("export async function loader() {\n  return 1;\n}\n")
        found = locate(module, "loader")
        assert isinstance(found, FunctionShaped)
        assert found.function.is_async
        assert found.statement is module.body[0]

    def test_exported_arrow(self, parse: Parse) -> None:
        module = parse("export const loader = () => 1;\n")
        found = locate(module, "loader")
        assert isinstance(found, VariableShaped)
        assert isinstance(found.function, ArrowFunction)

    def test_function_expression(self, parse: Parse) -> None:
        module = parse("export const action = async function () {\n  return 1;\n};\n")
        found = locate(module, "action")
        assert isinstance(found, VariableShaped)
        assert isinstance(found.function, FunctionExpression)

    @pytest.mark.parametrize(
        "init",
        [
            "(async () => 1)",
            "(() => 1) satisfies LoaderFunction",
            "(() => 1) as LoaderFunction",
        ],
    )
    def test_transparent_wrappers(self, parse: Parse, init: str) -> None:
        module = parse(f"export const loader = {init};\n")
        found = locate(module, "loader")
        assert isinstance(found, VariableShaped)

    def test_reexported_local(self, parse: Parse) -> None:
        module = parse("function loader() {\n  return 1;\n}\n\nexport { loader };\n")
        found = locate(module, "loader")
        assert isinstance(found, FunctionShaped)
        assert found.statement is module.body[0]
        assert found.reexports == (module.body[1],)

    def test_reexported_alias(self, parse: Parse) -> None:
        module = parse("const fetchPosts = async () => [];\n\nexport { fetchPosts as loader };\n")
        found = locate(module, "loader")
        assert isinstance(found, VariableShaped)
        assert found.name == "loader"
        assert isinstance(found.declarator.name, Identifier)
        assert found.declarator.name.name == "fetchPosts"

    def test_unexported_declaration_is_still_found(self, parse: Parse) -> None:
        module = parse("const loader = () => 1;\n")
        assert isinstance(locate(module, "loader"), VariableShaped)


class TestLocatePriority:
    def test_variable_beats_function(self, parse: Parse) -> None:
        source = "export const loader = () => 1;\nfunction loader() {\n  return 2;\n}\n"
        module = parse(source, "app/routes/a.js")
        assert isinstance(locate(module, "loader"), VariableShaped)

    def test_last_match_wins(self, parse: Parse) -> None:
        module = parse("var loader = () => 1;\nvar loader = () => 2;\n", "app/routes/a.js")
        found = locate(module, "loader")
        assert isinstance(found, VariableShaped)
        assert found.statement is module.body[1]


class TestLocateMisses:
    def test_missing(self, parse: Parse) -> None:
        assert locate(parse("export const other = () => 1;\n"), "loader") is None

    def test_non_function_initializer(self, parse: Parse) -> None:
        assert locate(parse("export const loader = makeLoader();\n"), "loader") is None

    def test_bodyless_overload(self, parse: Parse) -> None:
        module = parse("export declare function loader(): Promise<void>;\n", "app/routes/a.ts")
        assert locate(module, "loader") is None

    def test_uninitialized(self, parse: Parse) -> None:
        assert locate(parse("export let loader;\n"), "loader") is None


class TestCallableInit:
    def test_none(self) -> None:
        assert callable_init(None) is None


class TestDefaultExport:
    def test_inline_function(self, parse: Parse) -> None:
        module = parse("export default function Page() {\n  return null;\n}\n")
        assert isinstance(find_default_export(module), InlineDefault)

    def test_inline_expression(self, parse: Parse) -> None:
        module = parse("export default () => <div />;\n")
        assert isinstance(find_default_export(module), InlineDefault)

    def test_identifier(self, parse: Parse) -> None:
        module = parse("function Page() {\n  return null;\n}\nexport default Page;\n")
        found = find_default_export(module)
        assert isinstance(found, ReferencedDefault)
        assert found.name == "Page"
        assert found.resolved
        assert found.specifier is None

    def test_specifier(self, parse: Parse) -> None:
        module = parse("const Page = () => null;\nexport { Page as default };\n")
        found = find_default_export(module)
        assert isinstance(found, ReferencedDefault)
        assert found.name == "Page"
        assert found.specifier is not None
        assert isinstance(found.statement, ExportNamed)

    def test_unresolved_identifier(self, parse: Parse) -> None:
        found = find_default_export(parse("export default Missing;\n"))
        assert isinstance(found, ReferencedDefault)
        assert not found.resolved

    def test_forwarded_from_other_module(self, parse: Parse) -> None:
        found = find_default_export(parse("export { default } from './page';\n"))
        assert isinstance(found, ForwardedDefault)
        assert found.imported == "default"
        assert found.source == "./page"

    def test_forwarded_named_binding(self, parse: Parse) -> None:
        found = find_default_export(parse("export { Page as default } from './page';\n"))
        assert isinstance(found, ForwardedDefault)
        assert found.imported == "Page"

    def test_type_only_reexport_is_ignored(self, parse: Parse) -> None:
        module = parse("export type { default } from './types';\n", "app/routes/a.ts")
        assert find_default_export(module) is None

    def test_none(self, parse: Parse) -> None:
        assert find_default_export(parse("export const a = 1;\n")) is None


class TestDeclaresDescriptor:
    def test_route(self, parse: Parse) -> None:
        module = parse("export const Route = createFileRoute('/')({});\n")
        assert declares_descriptor(module, frozenset({"Route", "ServerRoute"}))

    def test_other(self, parse: Parse) -> None:
        module = parse("export const Routes = [];\n")
        assert not declares_descriptor(module, frozenset({"Route", "ServerRoute"}))
