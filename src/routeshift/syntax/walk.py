"""Tree walking helpers: post-order rewriting and name collection."""

from collections.abc import Callable

from routeshift.syntax.nodes import (
    ClassDeclaration,
    ExportDefault,
    ExportNamed,
    FunctionDeclaration,
    Identifier,
    ImportDeclaration,
    Module,
    Node,
    VariableDeclaration,
    Verbatim,
    iter_nodes,
)

# Type-only syntax: names inside never need a runtime binding
_TYPE_KINDS = frozenset({
    "type_annotation",
    "type_arguments",
    "type_parameters",
    "type_query",
    "type_alias_declaration",
    "interface_declaration",
})


def transform(node: Node, visit: Callable[[Node], Node]) -> Node:
    """Rewrite *node* bottom-up.

    Children are rewritten first; *visit* then receives the node and
    returns it or a replacement.  Lists are updated in place so list
    identity (and therefore the parent's fingerprint) only changes when
    an element does.
    """
    for name in node.child_fields():
        value = getattr(node, name)
        if isinstance(value, Node):
            replacement = transform(value, visit)
            if replacement is not value:
                setattr(node, name, replacement)
        elif isinstance(value, list):
            for idx, item in enumerate(value):
                if isinstance(item, Node):
                    replacement = transform(item, visit)
                    if replacement is not item:
                        value[idx] = replacement
    return visit(node)


def referenced_names(root: Node | Module) -> set[str]:
    """Every identifier name used under *root*, type positions included.

    Local names re-exported through ``export { name }`` count as used.
    Import specifiers do not: they bind names rather than use them.
    """
    names: set[str] = set()
    for node in iter_nodes(root):
        if isinstance(node, Identifier):
            names.add(node.name)
        elif isinstance(node, ExportNamed) and node.source is None:
            names.update(spec.local for spec in node.specifiers)
    return names


def referenced_values(root: Node | Module) -> set[str]:
    """Like :func:`referenced_names`, but skipping type positions.

    ``useLoaderData<typeof loader>()`` does not need ``loader`` at runtime.
    """
    names: set[str] = set()
    stack: list[Node] = list(root.body) if isinstance(root, Module) else [root]
    while stack:
        node = stack.pop()
        if isinstance(node, Verbatim) and node.kind in _TYPE_KINDS:
            continue
        if isinstance(node, Identifier):
            if not node.is_type:
                names.add(node.name)
        elif isinstance(node, ExportNamed) and node.source is None and not node.type_only:
            names.update(spec.local for spec in node.specifiers)
        stack.extend(node.children())
    return names


def declared_names(module: Module) -> set[str]:
    """Names bound at module top level (imports included)."""
    names: set[str] = set()
    for statement in module.body:
        if isinstance(statement, ExportNamed | ExportDefault):
            target = statement.declaration
        else:
            target = statement
        match target:
            case ImportDeclaration():
                names.update(spec.local for spec in target.specifiers)
                names.update(n for n in (target.default, target.namespace) if n)
            case FunctionDeclaration() | ClassDeclaration() if target.name:
                names.add(target.name)
            case VariableDeclaration():
                for declarator in target.declarators:
                    names.update(
                        n.name for n in iter_nodes(declarator.name) if isinstance(n, Identifier)
                    )
    return names
