"""Tree-sitter backed parser producing :mod:`routeshift.syntax.nodes` trees.

``.ts`` sources use the TypeScript grammar; everything else (``.tsx``,
``.jsx``, ``.js``) uses TSX, which is a superset of JavaScript with JSX.

Conversion is lossless: any grammar node that is not modeled becomes a
:class:`Verbatim` holding the exact source text around its modeled
children.  Sources with syntax errors are rejected with
:class:`~routeshift.errors.ParseError` instead of being half-converted.
"""

from __future__ import annotations

from functools import cache
from pathlib import PurePath
from typing import TypeVar

import tree_sitter_typescript
from tree_sitter import Language, Node as TSNode, Parser

from routeshift.errors import ParseError
from routeshift.syntax.nodes import (
    ArrowFunction,
    Call,
    ClassDeclaration,
    ExportDefault,
    ExportNamed,
    ExportSpecifier,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    ImportDeclaration,
    ImportSpecifier,
    Module,
    Node,
    Opaque,
    Parameters,
    Statement,
    VariableDeclaration,
    VariableDeclarator,
    Verbatim,
    iter_nodes,
)

N = TypeVar("N", bound=Node)

_IDENTIFIER_TYPES = frozenset({
    "identifier",
    "type_identifier",
    "shorthand_property_identifier",
    "shorthand_property_identifier_pattern",
})
_FUNCTION_DECLARATION_TYPES = frozenset({"function_declaration", "generator_function_declaration"})
_FUNCTION_EXPRESSION_TYPES = frozenset({"function_expression", "function", "generator_function"})
_CLASS_TYPES = frozenset({"class_declaration", "class"})
_VARIABLE_TYPES = frozenset({"lexical_declaration", "variable_declaration"})
# Statements whose source text tells whether the file uses semicolons
_SEMICOLON_PROBES = frozenset({"import_statement", "lexical_declaration", "expression_statement"})


@cache
def _language(name: str) -> Language:
    if name == "typescript":
        return Language(tree_sitter_typescript.language_typescript())
    return Language(tree_sitter_typescript.language_tsx())


def language_for_path(path: str) -> str:
    """Grammar name for a file path: ``typescript`` or ``tsx``."""
    suffix = PurePath(path).suffix.lower()
    if suffix in {".ts", ".mts", ".cts"}:
        return "typescript"
    return "tsx"


def parse_module(source: str, path: str) -> Module:
    """Parse *source* into a :class:`Module` identified by *path*.

    Raises:
        ParseError: If the source contains syntax errors.
    """
    # One parser per call: parsers are not shared between threads
    parser = Parser(_language(language_for_path(path)))
    data = source.encode("utf-8")
    tree = parser.parse(data)
    root = tree.root_node
    if root.has_error:
        line, column = _first_error(root)
        raise ParseError(path=path, line=line + 1, column=column + 1)
    return _Converter(data, path).module(root)


def _first_error(node: TSNode) -> tuple[int, int]:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current.start_point
        stack.extend(reversed([c for c in current.children if c.has_error or c.is_missing]))
    return node.start_point


def _has_token(node: TSNode, token: str) -> bool:
    return any(child.type == token and not child.is_named for child in node.children)


class _Converter:
    """Converts one tree-sitter tree into syntax nodes."""

    def __init__(self, data: bytes, path: str) -> None:
        self._data = data
        self._path = path

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _text(self, start: int, end: int) -> str:
        return self._data[start:end].decode("utf-8")

    def _source(self, node: TSNode) -> str:
        return self._text(node.start_byte, node.end_byte)

    def _indent_at(self, offset: int) -> int:
        line_start = self._data.rfind(b"\n", 0, offset) + 1
        count = 0
        for byte in self._data[line_start:offset]:
            if byte not in (0x20, 0x09):
                break
            count += 1
        return count

    def _finish(self, node: N, ts_node: TSNode) -> N:
        node.raw = self._source(ts_node)
        node.indent = self._indent_at(ts_node.start_byte)
        return node

    # ------------------------------------------------------------------
    # Module
    # ------------------------------------------------------------------

    def module(self, root: TSNode) -> Module:
        module = Module(path=self._path)
        cursor = 0
        probes = terminated = 0
        for child in root.named_children:
            statement = self._statement(child)
            if module.body:
                statement.gap = self._text(cursor, child.start_byte)
            else:
                module.header = self._text(cursor, child.start_byte)
            module.body.append(statement)
            cursor = child.end_byte
            if child.type in _SEMICOLON_PROBES:
                probes += 1
                terminated += self._source(child).rstrip().endswith(";")
        module.trailer = self._text(cursor, len(self._data))
        module.semicolons = terminated * 2 >= probes
        for node in iter_nodes(module):
            node.seal()
        return module

    def _statement(self, node: TSNode) -> Statement:
        converted: Statement | None = None
        if node.type == "import_statement":
            converted = self._import(node)
        elif node.type == "export_statement":
            converted = self._export(node)
        elif node.type in _FUNCTION_DECLARATION_TYPES:
            converted = self._function_declaration(node)
        elif node.type in _VARIABLE_TYPES:
            converted = self._variable_declaration(node)
        elif node.type == "class_declaration":
            converted = self._class(node)
        if converted is None:
            converted = self._finish(Opaque(self._node(node)), node)
        return converted

    # ------------------------------------------------------------------
    # Imports and exports
    # ------------------------------------------------------------------

    def _import(self, node: TSNode) -> ImportDeclaration | None:
        source = node.child_by_field_name("source")
        if source is None or source.type != "string":
            return None
        declaration = ImportDeclaration(
            source=self._source(source)[1:-1],
            type_only=_has_token(node, "type"),
        )
        for child in node.named_children:
            if child.type == "import_require_clause":
                return None
            if child.type != "import_clause":
                continue
            for part in child.named_children:
                if part.type == "identifier":
                    declaration.default = self._source(part)
                elif part.type == "namespace_import":
                    names = [c for c in part.named_children if c.type == "identifier"]
                    if not names:
                        return None
                    declaration.namespace = self._source(names[0])
                elif part.type == "named_imports":
                    for spec in part.named_children:
                        if spec.type != "import_specifier":
                            continue
                        name = spec.child_by_field_name("name")
                        alias = spec.child_by_field_name("alias")
                        if name is None:
                            return None
                        declaration.specifiers.append(
                            self._finish(
                                ImportSpecifier(
                                    imported=self._source(name),
                                    alias=self._source(alias) if alias is not None else None,
                                    type_only=_has_token(spec, "type"),
                                ),
                                spec,
                            )
                        )
        return self._finish(declaration, node)

    def _export(self, node: TSNode) -> Statement | None:
        declaration = node.child_by_field_name("declaration")
        value = node.child_by_field_name("value")
        if _has_token(node, "default"):
            target = declaration or value
            if target is None:
                return None
            inner: Node
            if target.type in _FUNCTION_DECLARATION_TYPES or target.type in _FUNCTION_EXPRESSION_TYPES:
                inner = self._function_declaration(target)
            elif target.type in _CLASS_TYPES:
                cls = self._class(target)
                if cls is None:
                    return None
                inner = cls
            elif declaration is not None:
                # export default interface / enum / namespace
                return None
            else:
                inner = self._node(target)
            return self._finish(ExportDefault(inner), node)

        if declaration is not None:
            return self._finish(ExportNamed(declaration=self._statement(declaration)), node)

        clause = next((c for c in node.named_children if c.type == "export_clause"), None)
        if clause is None:
            # export * from / export = / export as namespace
            return None
        source = node.child_by_field_name("source")
        export = ExportNamed(
            source=self._source(source)[1:-1] if source is not None else None,
            type_only=_has_token(node, "type"),
        )
        for spec in clause.named_children:
            if spec.type != "export_specifier":
                continue
            name = spec.child_by_field_name("name")
            alias = spec.child_by_field_name("alias")
            if name is None:
                return None
            export.specifiers.append(
                self._finish(
                    ExportSpecifier(
                        local=self._source(name),
                        alias=self._source(alias) if alias is not None else None,
                    ),
                    spec,
                )
            )
        return self._finish(export, node)

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _function_declaration(self, node: TSNode) -> FunctionDeclaration:
        name = node.child_by_field_name("name")
        body = node.child_by_field_name("body")
        return self._finish(
            FunctionDeclaration(
                name=self._source(name) if name is not None else None,
                params=self._parameters(node.child_by_field_name("parameters")),
                body=self._node(body) if body is not None else None,
                is_async=_has_token(node, "async"),
                is_generator=_has_token(node, "*"),
                type_parameters=self._optional(node.child_by_field_name("type_parameters")),
                return_type=self._optional(node.child_by_field_name("return_type")),
            ),
            node,
        )

    def _class(self, node: TSNode) -> ClassDeclaration | None:
        name = node.child_by_field_name("name")
        if name is not None:
            tail_start = name.end_byte
        else:
            keyword = next((c for c in node.children if c.type == "class" and not c.is_named), None)
            if keyword is None:
                return None
            tail_start = keyword.end_byte
        return self._finish(
            ClassDeclaration(
                name=self._source(name) if name is not None else None,
                tail=self._verbatim(node, start=tail_start, kind="class_tail"),
            ),
            node,
        )

    def _variable_declaration(self, node: TSNode) -> VariableDeclaration:
        declaration = VariableDeclaration(kind=self._source(node.children[0]), declarators=[])
        for child in node.named_children:
            if child.type != "variable_declarator":
                continue
            declaration.declarators.append(
                self._finish(
                    VariableDeclarator(
                        name=self._node(child.child_by_field_name("name")),
                        init=self._optional(child.child_by_field_name("value")),
                        type_annotation=self._optional(child.child_by_field_name("type")),
                    ),
                    child,
                )
            )
        return self._finish(declaration, node)

    def _parameters(self, node: TSNode | None) -> Parameters:
        if node is None:
            return Parameters()
        items: list[Node | str] = []
        layout: list[str] = []
        cursor = node.start_byte
        for child in node.named_children:
            if child.type == "comment":
                continue
            layout.append(self._text(cursor, child.start_byte))
            items.append(self._expression(child))
            cursor = child.end_byte
        layout.append(self._text(cursor, node.end_byte))
        return self._finish(Parameters(items, layout=layout), node)

    # ------------------------------------------------------------------
    # Expressions
    # ------------------------------------------------------------------

    def _optional(self, node: TSNode | None) -> Node | None:
        return self._node(node) if node is not None else None

    def _node(self, node: TSNode) -> Node:
        """Convert *node*, wrapping plain text so the result is always a node."""
        converted = self._expression(node)
        if isinstance(converted, str):
            return self._finish(Verbatim(node.type, [converted]), node)
        return converted

    def _expression(self, node: TSNode) -> Node | str:
        kind = node.type
        if kind in _IDENTIFIER_TYPES:
            return self._finish(Identifier(self._source(node), is_type=kind == "type_identifier"), node)
        if kind == "arrow_function":
            return self._arrow(node)
        if kind in _FUNCTION_EXPRESSION_TYPES:
            return self._function_expression(node)
        if kind == "call_expression":
            call = self._call(node)
            if call is not None:
                return call
        if kind == "comment":
            return self._source(node)
        if kind == "parenthesized_expression":
            return self._enclosing(node)
        if kind == "template_string":
            # Always a node: its text must never be re-indented
            return self._verbatim(node, kind=kind)
        return self._verbatim(node)

    def _arrow(self, node: TSNode) -> ArrowFunction:
        single = node.child_by_field_name("parameter")
        if single is not None:
            params = self._finish(Parameters([self._node(single)]), single)
        else:
            params = self._parameters(node.child_by_field_name("parameters"))
        return self._finish(
            ArrowFunction(
                params=params,
                body=self._node(node.child_by_field_name("body")),
                is_async=_has_token(node, "async"),
                type_parameters=self._optional(node.child_by_field_name("type_parameters")),
                return_type=self._optional(node.child_by_field_name("return_type")),
            ),
            node,
        )

    def _function_expression(self, node: TSNode) -> FunctionExpression:
        name = node.child_by_field_name("name")
        body = node.child_by_field_name("body")
        return self._finish(
            FunctionExpression(
                name=self._source(name) if name is not None else None,
                params=self._parameters(node.child_by_field_name("parameters")),
                body=self._node(body) if body is not None else None,
                is_async=_has_token(node, "async"),
                is_generator=_has_token(node, "*"),
                type_parameters=self._optional(node.child_by_field_name("type_parameters")),
                return_type=self._optional(node.child_by_field_name("return_type")),
            ),
            node,
        )

    def _call(self, node: TSNode) -> Call | None:
        arguments = node.child_by_field_name("arguments")
        callee = node.child_by_field_name("function")
        if arguments is None or callee is None or arguments.type != "arguments":
            return None
        if _has_token(node, "?."):
            return None
        return self._finish(
            Call(
                callee=self._node(callee),
                arguments=self._enclosing(arguments),
                type_arguments=self._optional(node.child_by_field_name("type_arguments")),
            ),
            node,
        )

    def _enclosing(self, node: TSNode) -> Verbatim:
        """Argument lists and parentheses: every inner expression becomes a node."""
        parts: list[Node | str] = []
        cursor = node.start_byte
        for child in node.named_children:
            if child.type == "comment":
                continue
            parts.append(self._text(cursor, child.start_byte))
            parts.append(self._node(child))
            cursor = child.end_byte
        parts.append(self._text(cursor, node.end_byte))
        return self._finish(Verbatim(node.type, [part for part in parts if part != ""]), node)

    def _verbatim(self, node: TSNode, *, start: int | None = None, kind: str | None = None) -> Verbatim | str:
        """Keep *node*'s text, converting the named children inside it."""
        start = node.start_byte if start is None else start
        end = node.end_byte
        parts: list[Node | str] = []
        cursor = start
        for child in node.named_children:
            if child.start_byte < start:
                continue
            converted = self._expression(child)
            if isinstance(converted, str):
                continue
            parts.append(self._text(cursor, child.start_byte))
            parts.append(converted)
            cursor = child.end_byte
        parts.append(self._text(cursor, end))
        parts = [part for part in parts if part != ""]
        if not any(isinstance(part, Node) for part in parts) and kind is None:
            return self._text(start, end)
        verbatim = Verbatim(kind or node.type, parts, literal=node.type == "template_string")
        verbatim.raw = self._text(start, end)
        verbatim.indent = self._indent_at(start)
        return verbatim
