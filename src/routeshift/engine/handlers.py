"""Handler extraction and normalization.

Turns a located ``loader``/``action`` declaration into an anonymous
callable ready to embed as a property of the route descriptor::

    export async function loader({ params }) {     →   async ({ params, search }) => {
      return json({ post: await get(params.id) })        return { post: await get(params.id) };
    }                                                  }

Envelope calls (``json(data)``) are replaced by their payload wherever
they appear in the body.  Calls with extra arguments (status codes,
headers) are left alone so no information is dropped; they are
reported back for an advisory comment instead.
"""

from dataclasses import dataclass

from routeshift.config import DEFAULT_CONFIG, MigrationConfig
from routeshift.engine.classify import RouteKind
from routeshift.engine.locator import FunctionShaped, Located, VariableShaped
from routeshift.syntax.nodes import (
    ArrowFunction,
    Block,
    Call,
    FunctionExpression,
    Identifier,
    Node,
    ObjectPattern,
    Parameters,
    ReturnStatement,
    Verbatim,
)
from routeshift.syntax.walk import referenced_names, transform


@dataclass(frozen=True, slots=True)
class HandlerValue:
    """A handler reshaped for embedding in a route descriptor.

    Attributes:
        name: The handler's distinguished name (``loader`` or ``action``).
        value: The anonymous function expression.
        dropped_params: Parameter bindings removed by the page-route
            reshape that the body still refers to.
        unwrapped: Number of envelope calls replaced by their payload.
        retained: Number of envelope calls kept because they carry more
            than the payload.
    """

    name: str
    value: ArrowFunction | FunctionExpression
    dropped_params: tuple[str, ...] = ()
    unwrapped: int = 0
    retained: int = 0


@dataclass(slots=True)
class _EnvelopeStats:
    unwrapped: int = 0
    retained: int = 0


def extract_handler(
    located: Located,
    kind: RouteKind,
    config: MigrationConfig = DEFAULT_CONFIG,
) -> HandlerValue:
    """Reshape a located declaration into a :class:`HandlerValue`."""
    match located:
        case FunctionShaped(declaration=source):
            params, body = source.params, source.body
            is_async, is_generator = source.is_async, source.is_generator
        case VariableShaped(function=source):
            params, body = source.params, source.body
            is_async = source.is_async
            is_generator = isinstance(source, FunctionExpression) and source.is_generator

    if body is None:
        msg = f"{located.name} has no body"
        raise ValueError(msg)
    body = _as_block(body)

    dropped: tuple[str, ...] = ()
    if kind is RouteKind.PAGE:
        used = referenced_names(body)
        dropped = tuple(
            name for name in bound_names(params) if name not in config.loader_params and name in used
        )
        params = Parameters([ObjectPattern(list(config.loader_params))])

    value: ArrowFunction | FunctionExpression
    if is_generator:
        value = FunctionExpression(name=None, params=params, body=body, is_async=is_async, is_generator=True)
    else:
        value = ArrowFunction(params=params, body=body, is_async=is_async)

    stats = unwrap_envelopes(value, config.envelope)
    return HandlerValue(
        name=located.name,
        value=value,
        dropped_params=dropped,
        unwrapped=stats.unwrapped,
        retained=stats.retained,
    )


def bound_names(params: Parameters) -> list[str]:
    """Names bound by a parameter list, in order (type names excluded)."""
    names: list[str] = []
    for item in params.items:
        if isinstance(item, ObjectPattern):
            names.extend(item.names)
            continue
        if not isinstance(item, Node):
            continue
        for name in _binding_identifiers(item):
            if name not in names:
                names.append(name)
    return names


_DEFAULTED_KINDS = frozenset({
    "assignment_pattern",
    "object_assignment_pattern",
    "required_parameter",
    "optional_parameter",
})


def _binding_identifiers(node: Node) -> list[str]:
    # Skip type annotations and default values: only the pattern binds
    if isinstance(node, Identifier):
        return [] if node.is_type else [node.name]
    if isinstance(node, Verbatim):
        if node.kind in ("type_annotation", "optional_type"):
            return []
        found: list[str] = []
        for idx, part in enumerate(node.parts):
            if not isinstance(part, Node):
                continue
            if node.kind in _DEFAULTED_KINDS and _after_equals(node.parts, idx):
                break
            found.extend(_binding_identifiers(part))
        return found
    return []


def _after_equals(parts: list[Node | str], idx: int) -> bool:
    return any(isinstance(part, str) and "=" in part for part in parts[:idx])


def _as_block(body: Node) -> Node:
    if isinstance(body, Block) or (isinstance(body, Verbatim) and body.kind == "statement_block"):
        return body
    return Block([ReturnStatement(_strip_parens(body))])


def _strip_parens(node: Node) -> Node:
    while isinstance(node, Verbatim) and node.kind == "parenthesized_expression" and len(node.nodes) == 1:
        node = node.nodes[0]
    return node


def _is_spread(node: Node) -> bool:
    return isinstance(node, Verbatim) and node.kind == "spread_element"


def unwrap_envelopes(root: Node, envelope: str) -> _EnvelopeStats:
    """Replace ``envelope(payload)`` with ``payload`` throughout *root*.

    Works bottom-up, so nested envelopes collapse completely.  The
    root itself is never replaced.
    """
    stats = _EnvelopeStats()

    def _visit(node: Node) -> Node:
        if node is root:
            return node
        if isinstance(node, Call) and isinstance(node.callee, Identifier) and node.callee.name == envelope:
            args = node.args
            if len(args) == 1 and not _is_spread(args[0]):
                stats.unwrapped += 1
                return args[0]
            if len(args) > 1:
                stats.retained += 1
            return node
        if isinstance(node, ArrowFunction) and isinstance(node.body, Verbatim) and node.body.kind == "object":
            # An object literal body must be parenthesized to stay an expression
            node.body = Verbatim("parenthesized_expression", ["(", node.body, ")"])
        return node

    for name in ("params", "body"):
        child = getattr(root, name)
        if isinstance(child, Node):
            setattr(root, name, transform(child, _visit))
    return stats
