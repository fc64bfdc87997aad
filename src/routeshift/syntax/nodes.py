"""Mutable syntax tree for JavaScript/TypeScript route modules.

The tree is a closed set of dataclass variants.  Only the shapes the
engine has to tell apart are modeled: imports, exports, function and
variable declarations, classes, arrow/function expressions, calls and
identifiers.  Everything else is a :class:`Verbatim` node that keeps
the original text between its modeled children, so code the engine
never touches prints back exactly as it was written.

Nodes created by the parser remember their source text (``raw``), the
indentation of the line they started on (``indent``) and a shallow
snapshot of their fields (``origin``).  The printer reuses ``raw`` as
long as the node and all of its descendants still match their
snapshots; anything else is printed structurally.

Nodes compare by identity (``eq=False``) so that ``list.index`` and
``list.remove`` on statement lists never confuse two equal-looking
statements.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field, fields
from typing import Any

# Bookkeeping fields that are not part of a node's structure
_META_FIELDS = frozenset({"raw", "indent", "origin", "comments", "gap", "layout"})


@dataclass(slots=True, eq=False)
class Node:
    """Base for every syntax node."""

    raw: str | None = field(default=None, kw_only=True, repr=False)
    indent: int | None = field(default=None, kw_only=True, repr=False)
    origin: tuple[Any, ...] | None = field(default=None, kw_only=True, repr=False)

    def child_fields(self) -> Iterator[str]:
        for f in fields(self):
            if f.name not in _META_FIELDS:
                yield f.name

    def children(self) -> Iterator["Node"]:
        """Yield direct child nodes in field order."""
        for name in self.child_fields():
            value = getattr(self, name)
            if isinstance(value, Node):
                yield value
            elif isinstance(value, list):
                for item in value:
                    if isinstance(item, Node):
                        yield item

    def shape(self) -> tuple[Any, ...]:
        """Shallow structural fingerprint: child identities plus scalars."""
        out: list[Any] = []
        for name in self.child_fields():
            value = getattr(self, name)
            if isinstance(value, Node):
                out.append(id(value))
            elif isinstance(value, list):
                out.append(tuple(id(v) if isinstance(v, Node) else v for v in value))
            else:
                out.append(value)
        return tuple(out)

    def seal(self) -> None:
        self.origin = self.shape()

    @property
    def pristine(self) -> bool:
        """True when the node can still be printed from its source text."""
        if self.raw is None or self.origin != self.shape():
            return False
        return all(child.pristine for child in self.children())


@dataclass(slots=True, eq=False)
class Statement(Node):
    """A node that can sit directly in a module or block body."""

    comments: list[str] = field(default_factory=list, kw_only=True)
    gap: str | None = field(default=None, kw_only=True, repr=False)


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------


@dataclass(slots=True, eq=False)
class Verbatim(Node):
    """Unmodeled syntax: original text interleaved with modeled children.

    ``kind`` is the parser's node type (``statement_block``,
    ``object``, ``parenthesized_expression`` ...).  Literal verbatims
    (template strings) are never re-indented.
    """

    kind: str
    parts: list["Node | str"]
    literal: bool = False

    @property
    def nodes(self) -> list[Node]:
        return [part for part in self.parts if isinstance(part, Node)]

    @classmethod
    def join(cls, kind: str, nodes: list[Node], *, opening: str = "(", closing: str = ")") -> "Verbatim":
        parts: list[Node | str] = [opening]
        for idx, node in enumerate(nodes):
            if idx:
                parts.append(", ")
            parts.append(node)
        parts.append(closing)
        return cls(kind, parts)


@dataclass(slots=True, eq=False)
class Identifier(Node):
    name: str
    is_type: bool = False


@dataclass(slots=True, eq=False)
class StringLiteral(Node):
    value: str


@dataclass(slots=True, eq=False)
class Parameters(Node):
    """A parenthesized parameter list.

    ``layout`` holds the source text around the parsed items (the
    parentheses, separators and any comments), one run more than there
    are items.  It is used while the items are unchanged.
    """

    items: list[Node | str] = field(default_factory=list)
    layout: list[str] | None = field(default=None, kw_only=True, repr=False)


@dataclass(slots=True, eq=False)
class ObjectPattern(Node):
    """A destructuring pattern of shorthand names: ``{ params, search }``."""

    names: list[str]


@dataclass(slots=True, eq=False)
class ArrowFunction(Node):
    params: Parameters
    body: Node
    is_async: bool = False
    type_parameters: Node | None = None
    return_type: Node | None = None


@dataclass(slots=True, eq=False)
class FunctionExpression(Node):
    name: str | None
    params: Parameters
    body: Node | None
    is_async: bool = False
    is_generator: bool = False
    type_parameters: Node | None = None
    return_type: Node | None = None


@dataclass(slots=True, eq=False)
class Call(Node):
    """A call expression.  ``arguments`` is a parenthesized verbatim."""

    callee: Node
    arguments: Verbatim
    type_arguments: Node | None = None

    @property
    def args(self) -> list[Node]:
        return self.arguments.nodes


@dataclass(slots=True, eq=False)
class Member(Node):
    object: Node
    attribute: str


@dataclass(slots=True, eq=False)
class Property(Node):
    key: str
    value: Node
    comments: list[str] = field(default_factory=list, kw_only=True)


@dataclass(slots=True, eq=False)
class ObjectExpression(Node):
    properties: list[Property] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


@dataclass(slots=True, eq=False)
class Opaque(Statement):
    """A top-level statement the engine never looks inside of."""

    node: Node


@dataclass(slots=True, eq=False)
class Block(Node):
    statements: list[Statement] = field(default_factory=list)


@dataclass(slots=True, eq=False)
class ReturnStatement(Statement):
    argument: Node | None = None


@dataclass(slots=True, eq=False)
class FunctionDeclaration(Statement):
    name: str | None
    params: Parameters
    body: Node | None
    is_async: bool = False
    is_generator: bool = False
    type_parameters: Node | None = None
    return_type: Node | None = None


@dataclass(slots=True, eq=False)
class ClassDeclaration(Statement):
    """A class; ``tail`` is everything after the name (heritage and body)."""

    name: str | None
    tail: Node


@dataclass(slots=True, eq=False)
class VariableDeclarator(Node):
    name: Node
    init: Node | None = None
    type_annotation: Node | None = None


@dataclass(slots=True, eq=False)
class VariableDeclaration(Statement):
    kind: str
    declarators: list[VariableDeclarator]


@dataclass(slots=True, eq=False)
class ImportSpecifier(Node):
    imported: str
    alias: str | None = None
    type_only: bool = False

    @property
    def local(self) -> str:
        return self.alias or self.imported


@dataclass(slots=True, eq=False)
class ImportDeclaration(Statement):
    source: str
    specifiers: list[ImportSpecifier] = field(default_factory=list)
    default: str | None = None
    namespace: str | None = None
    type_only: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.specifiers and self.default is None and self.namespace is None


@dataclass(slots=True, eq=False)
class ExportSpecifier(Node):
    local: str
    alias: str | None = None

    @property
    def exported(self) -> str:
        return self.alias or self.local


@dataclass(slots=True, eq=False)
class ExportNamed(Statement):
    """``export <declaration>`` or ``export { a, b as c } [from '...']``."""

    declaration: Statement | None = None
    specifiers: list[ExportSpecifier] = field(default_factory=list)
    source: str | None = None
    type_only: bool = False


@dataclass(slots=True, eq=False)
class ExportDefault(Statement):
    """``export default <declaration or expression>``."""

    declaration: Node

    @property
    def is_expression(self) -> bool:
        return not isinstance(self.declaration, (FunctionDeclaration, ClassDeclaration))


# ---------------------------------------------------------------------------
# Module
# ---------------------------------------------------------------------------


@dataclass(slots=True, eq=False)
class Module:
    """An ordered, mutable sequence of top-level statements."""

    path: str
    body: list[Statement] = field(default_factory=list)
    header: str = ""
    trailer: str = "\n"
    semicolons: bool = True


def iter_nodes(root: Node | Module) -> Iterator[Node]:
    """Yield every node under *root* in pre-order (the root included)."""
    stack: list[Node] = list(reversed(root.body)) if isinstance(root, Module) else [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(list(node.children())))
