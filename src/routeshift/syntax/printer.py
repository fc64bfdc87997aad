"""Serialize syntax trees back to source text.

Pristine nodes (unchanged since parsing, at their original indentation)
are emitted from their source text.  Everything else is printed
structurally: verbatim nodes re-emit their text runs shifted to the new
indentation, synthesized nodes use a fixed house style — single-quoted
strings, two-space indentation, one property per line with a trailing
comma in multi-line object literals.
"""

import re

from routeshift.config import DEFAULT_CONFIG, MigrationConfig
from routeshift.syntax.nodes import (
    ArrowFunction,
    Block,
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
    Member,
    Module,
    Node,
    ObjectExpression,
    ObjectPattern,
    Opaque,
    Parameters,
    Property,
    ReturnStatement,
    Statement,
    StringLiteral,
    VariableDeclaration,
    VariableDeclarator,
    Verbatim,
)

_LINE_START = re.compile(r"\n([ \t]*+)(?!\n)")


def print_module(module: Module, config: MigrationConfig = DEFAULT_CONFIG) -> str:
    """Render *module* to source text."""
    return _Printer(config, semicolons=module.semicolons).module(module)


def print_node(node: Node, config: MigrationConfig = DEFAULT_CONFIG) -> str:
    """Render a single node (used by tests and debugging output)."""
    printer = _Printer(config, semicolons=True)
    printer.node(node)
    return printer.result()


def _shift(text: str, shift: int) -> str:
    if not shift:
        return text

    def _reindent(match: re.Match[str]) -> str:
        width = len(match.group(1).expandtabs(4))
        return "\n" + " " * max(0, width + shift)

    return _LINE_START.sub(_reindent, text)


class _Printer:
    def __init__(self, config: MigrationConfig, *, semicolons: bool) -> None:
        self._config = config
        self._semi = ";" if semicolons else ""
        self._out: list[str] = []
        self._line = ""

    # ------------------------------------------------------------------
    # Output buffer
    # ------------------------------------------------------------------

    def result(self) -> str:
        return "".join(self._out)

    def write(self, text: str) -> None:
        if not text:
            return
        self._out.append(text)
        if "\n" in text:
            self._line = text.rsplit("\n", 1)[1]
        else:
            self._line += text

    @property
    def column_indent(self) -> int:
        """Indentation of the line currently being written."""
        return len(self._line) - len(self._line.lstrip(" \t"))

    def newline(self, indent: int) -> None:
        self.write("\n" + " " * indent)

    def string(self, value: str) -> str:
        quote = self._config.quote
        escaped = value.replace("\\", "\\\\").replace(quote, "\\" + quote)
        return f"{quote}{escaped}{quote}"

    # ------------------------------------------------------------------
    # Module
    # ------------------------------------------------------------------

    def module(self, module: Module) -> str:
        self.write(module.header)
        previous: Statement | None = None
        for statement in module.body:
            if previous is not None:
                self.write(self._gap(previous, statement))
            for comment in statement.comments:
                self.write(comment)
                self.newline(0)
            self.statement(statement)
            previous = statement
        self.write(module.trailer)
        return self.result()

    @staticmethod
    def _gap(previous: Statement, statement: Statement) -> str:
        if statement.gap is not None and "\n" in statement.gap:
            return statement.gap
        if isinstance(previous, ImportDeclaration) and isinstance(statement, ImportDeclaration):
            return "\n"
        return "\n\n"

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def node(self, node: Node | str) -> None:
        if isinstance(node, str):
            self.write(node)
            return
        shift = 0 if node.indent is None else self.column_indent - node.indent
        if node.pristine and shift == 0 and node.raw is not None:
            self.write(node.raw)
            return
        if isinstance(node, Statement):
            self.statement(node)
        else:
            self.expression(node, shift)

    def statement(self, node: Statement) -> None:
        if node.pristine and node.raw is not None and node.indent == self.column_indent:
            self.write(node.raw)
            return
        match node:
            case Opaque():
                self.node(node.node)
            case ImportDeclaration():
                self.import_declaration(node)
            case ExportNamed():
                self.export_named(node)
            case ExportDefault():
                self.write("export default ")
                self.node(node.declaration)
                if node.is_expression:
                    self.write(self._semi)
            case FunctionDeclaration():
                self.function(node.name, node, keyword="function")
            case ClassDeclaration():
                self.write("class")
                if node.name:
                    self.write(" " + node.name)
                self.node(node.tail)
            case VariableDeclaration():
                self.write(node.kind + " ")
                for idx, declarator in enumerate(node.declarators):
                    if idx:
                        self.write(", ")
                    self.declarator(declarator)
                self.write(self._semi)
            case ReturnStatement():
                self.write("return")
                if node.argument is not None:
                    self.write(" ")
                    self.node(node.argument)
                self.write(self._semi)
            case _:
                msg = f"Cannot print statement of type {type(node).__name__}"
                raise TypeError(msg)

    def expression(self, node: Node, shift: int) -> None:
        match node:
            case Verbatim():
                for part in node.parts:
                    if isinstance(part, str):
                        self.write(part if node.literal else _shift(part, shift))
                    else:
                        self.node(part)
            case Identifier():
                self.write(node.name)
            case StringLiteral():
                self.write(self.string(node.value))
            case Parameters() if node.layout is not None and node.origin == node.shape():
                for idx, item in enumerate(node.items):
                    self.write(_shift(node.layout[idx], shift))
                    self.node(item)
                self.write(_shift(node.layout[-1], shift))
            case Parameters():
                self.write("(")
                for idx, item in enumerate(node.items):
                    if idx:
                        self.write(", ")
                    self.node(item)
                self.write(")")
            case ObjectPattern():
                self.write("{ " + ", ".join(node.names) + " }" if node.names else "{}")
            case ArrowFunction():
                if node.is_async:
                    self.write("async ")
                if node.type_parameters is not None:
                    self.node(node.type_parameters)
                self.node(node.params)
                if node.return_type is not None:
                    self.node(node.return_type)
                self.write(" => ")
                self.node(node.body)
            case FunctionExpression():
                self.function(node.name, node, keyword="function")
            case Call():
                self.node(node.callee)
                if node.type_arguments is not None:
                    self.node(node.type_arguments)
                self.node(node.arguments)
            case Member():
                self.node(node.object)
                self.write("." + node.attribute)
            case ObjectExpression():
                self.object(node)
            case Block():
                self.block(node)
            case ImportSpecifier() | ExportSpecifier() | VariableDeclarator():
                self.specifier(node)
            case _:
                msg = f"Cannot print node of type {type(node).__name__}"
                raise TypeError(msg)

    # ------------------------------------------------------------------
    # Shapes
    # ------------------------------------------------------------------

    def function(
        self,
        name: str | None,
        node: FunctionDeclaration | FunctionExpression,
        *,
        keyword: str,
    ) -> None:
        if node.is_async:
            self.write("async ")
        self.write(keyword)
        if node.is_generator:
            self.write("*")
        if name:
            self.write(" " + name)
        if node.type_parameters is not None:
            self.node(node.type_parameters)
        self.node(node.params)
        if node.return_type is not None:
            self.node(node.return_type)
        if node.body is not None:
            self.write(" ")
            self.node(node.body)
        else:
            self.write(self._semi)

    def declarator(self, node: VariableDeclarator) -> None:
        self.node(node.name)
        if node.type_annotation is not None:
            self.node(node.type_annotation)
        if node.init is not None:
            self.write(" = ")
            self.node(node.init)

    def specifier(self, node: Node) -> None:
        if isinstance(node, VariableDeclarator):
            self.declarator(node)
        elif isinstance(node, ImportSpecifier | ExportSpecifier):
            self.write(_specifier_text(node))

    def import_declaration(self, node: ImportDeclaration) -> None:
        self.write("import ")
        if node.type_only:
            self.write("type ")
        clause: list[str] = []
        if node.default:
            clause.append(node.default)
        if node.namespace:
            clause.append(f"* as {node.namespace}")
        if node.specifiers:
            names = ", ".join(_specifier_text(spec) for spec in node.specifiers)
            clause.append("{ " + names + " }")
        if clause:
            self.write(", ".join(clause) + " from ")
        self.write(self.string(node.source) + self._semi)

    def export_named(self, node: ExportNamed) -> None:
        self.write("export ")
        if node.declaration is not None:
            self.statement(node.declaration)
            return
        if node.type_only:
            self.write("type ")
        names = ", ".join(_specifier_text(spec) for spec in node.specifiers)
        self.write("{ " + names + " }" if names else "{}")
        if node.source is not None:
            self.write(" from " + self.string(node.source))
        self.write(self._semi)

    def object(self, node: ObjectExpression) -> None:
        if not node.properties:
            self.write("{}")
            return
        base = self.column_indent
        inner = base + len(self._config.indent)
        self.write("{")
        for prop in node.properties:
            for comment in prop.comments:
                self.newline(inner)
                self.write(comment)
            self.newline(inner)
            self.property(prop)
            self.write(",")
        self.newline(base)
        self.write("}")

    def property(self, node: Property) -> None:
        if isinstance(node.value, Identifier) and node.value.name == node.key:
            self.write(node.key)
            return
        self.write(node.key + ": ")
        self.node(node.value)

    def block(self, node: Block) -> None:
        if not node.statements:
            self.write("{}")
            return
        base = self.column_indent
        inner = base + len(self._config.indent)
        self.write("{")
        for statement in node.statements:
            for comment in statement.comments:
                self.newline(inner)
                self.write(comment)
            self.newline(inner)
            self.statement(statement)
        self.newline(base)
        self.write("}")


def _specifier_text(spec: ImportSpecifier | ExportSpecifier) -> str:
    alias = f" as {spec.alias}" if spec.alias else ""
    if isinstance(spec, ImportSpecifier):
        prefix = "type " if spec.type_only else ""
        return f"{prefix}{spec.imported}{alias}"
    return f"{spec.local}{alias}"
