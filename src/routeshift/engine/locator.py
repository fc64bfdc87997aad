"""Declaration lookup at module top level.

Handlers can be written in several ways; all of them resolve to one of
two shapes::

    export async function loader() {}        # FunctionShaped
    function loader() {}; export { loader }  # FunctionShaped (re-exported)
    export const loader = async () => {}     # VariableShaped
    const fetchData = () => {}; export { fetchData as loader }

The scan runs forward once with overwrite semantics, so the last match
for a name wins; a variable-shaped match beats a function-shaped one.
Declarations without a body (or initializers that are not functions)
are never matches.

Default exports resolve to :class:`InlineDefault` (``export default
function Page() {}``, ``export default () => ...``),
:class:`ReferencedDefault` (``export default Page``, ``export { Page as
default }``) or :class:`ForwardedDefault` (``export { default } from
'./Page'``).
"""

import logging
from dataclasses import dataclass

from routeshift.syntax.nodes import (
    ArrowFunction,
    ExportDefault,
    ExportNamed,
    ExportSpecifier,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    Module,
    Node,
    Statement,
    VariableDeclaration,
    VariableDeclarator,
    Verbatim,
)
from routeshift.syntax.walk import declared_names

logger = logging.getLogger("routeshift.engine")

# Expression wrappers that do not change what the initializer evaluates to
_TRANSPARENT_KINDS = frozenset({
    "parenthesized_expression",
    "satisfies_expression",
    "as_expression",
})


@dataclass(frozen=True, slots=True)
class FunctionShaped:
    """``function name() {}``, bare or exported."""

    name: str
    declaration: FunctionDeclaration
    statement: Statement
    reexports: tuple[ExportNamed, ...] = ()

    @property
    def function(self) -> FunctionDeclaration:
        return self.declaration


@dataclass(frozen=True, slots=True)
class VariableShaped:
    """``const name = <function>``, bare or exported."""

    name: str
    declarator: VariableDeclarator
    declaration: VariableDeclaration
    function: ArrowFunction | FunctionExpression
    statement: Statement
    reexports: tuple[ExportNamed, ...] = ()


Located = FunctionShaped | VariableShaped


@dataclass(frozen=True, slots=True)
class InlineDefault:
    """``export default <declaration or expression>``."""

    statement: ExportDefault


@dataclass(frozen=True, slots=True)
class ReferencedDefault:
    """A default export that names a binding declared elsewhere.

    ``specifier`` is set for ``export { Page as default }``.
    ``resolved`` is False when no top-level declaration carries the name.
    """

    name: str
    statement: Statement
    specifier: ExportSpecifier | None = None
    resolved: bool = True


@dataclass(frozen=True, slots=True)
class ForwardedDefault:
    """``export { default } from './Page'``: the component lives in another module.

    ``imported`` is the name taken from *source* (``default`` or, for
    ``export { Page as default } from ...``, ``Page``).
    """

    imported: str
    source: str
    statement: ExportNamed
    specifier: ExportSpecifier


DefaultExport = InlineDefault | ReferencedDefault | ForwardedDefault


def callable_init(init: Node | None) -> ArrowFunction | FunctionExpression | None:
    """The function an initializer evaluates to, or None."""
    node = init
    while isinstance(node, Verbatim) and node.kind in _TRANSPARENT_KINDS and node.nodes:
        node = node.nodes[0]
    if isinstance(node, ArrowFunction):
        return node
    if isinstance(node, FunctionExpression) and node.body is not None:
        return node
    return None


def _exported_alias(module: Module, name: str) -> tuple[str, tuple[ExportNamed, ...]]:
    """Resolve ``export { local as name }`` to the local binding name."""
    local = name
    reexports: list[ExportNamed] = []
    for statement in module.body:
        if not isinstance(statement, ExportNamed):
            continue
        if statement.declaration is not None or statement.source is not None:
            continue
        for spec in statement.specifiers:
            if spec.exported == name:
                local = spec.local
                if statement not in reexports:
                    reexports.append(statement)
    return local, tuple(reexports)


def locate(module: Module, name: str) -> Located | None:
    """Find the declaration bound to the exported name *name*.

    Returns None when nothing usable is declared; never raises.
    """
    local, reexports = _exported_alias(module, name)
    function_match: FunctionShaped | None = None
    variable_match: VariableShaped | None = None

    for statement in module.body:
        target = statement.declaration if isinstance(statement, ExportNamed) else statement
        match target:
            case FunctionDeclaration(name=found) if found == local:
                if target.body is None:
                    logger.debug("%s: %s() has no body, ignoring", module.path, local)
                    continue
                function_match = FunctionShaped(
                    name=name,
                    declaration=target,
                    statement=statement,
                    reexports=reexports,
                )
            case VariableDeclaration():
                for declarator in target.declarators:
                    if not (isinstance(declarator.name, Identifier) and declarator.name.name == local):
                        continue
                    function = callable_init(declarator.init)
                    if function is None:
                        logger.debug("%s: %s is not initialized with a function", module.path, local)
                        continue
                    variable_match = VariableShaped(
                        name=name,
                        declarator=declarator,
                        declaration=target,
                        function=function,
                        statement=statement,
                        reexports=reexports,
                    )

    return variable_match or function_match


def find_default_export(module: Module) -> DefaultExport | None:
    """Resolve the module's default export, the last one in source order."""
    found: DefaultExport | None = None
    declared: set[str] | None = None

    for statement in module.body:
        if isinstance(statement, ExportDefault):
            if isinstance(statement.declaration, Identifier):
                declared = declared if declared is not None else declared_names(module)
                name = statement.declaration.name
                found = ReferencedDefault(name=name, statement=statement, resolved=name in declared)
            else:
                found = InlineDefault(statement=statement)
        elif isinstance(statement, ExportNamed) and statement.declaration is None and not statement.type_only:
            for spec in statement.specifiers:
                if spec.exported != "default":
                    continue
                if statement.source is not None:
                    found = ForwardedDefault(
                        imported=spec.local,
                        source=statement.source,
                        statement=statement,
                        specifier=spec,
                    )
                else:
                    declared = declared if declared is not None else declared_names(module)
                    found = ReferencedDefault(
                        name=spec.local,
                        statement=statement,
                        specifier=spec,
                        resolved=spec.local in declared,
                    )

    if isinstance(found, ReferencedDefault) and not found.resolved:
        logger.debug("%s: default export %s does not resolve locally", module.path, found.name)
    return found


def declares_descriptor(module: Module, names: frozenset[str]) -> bool:
    """True when a top-level variable already carries a descriptor name."""
    for statement in module.body:
        target = statement.declaration if isinstance(statement, ExportNamed) else statement
        if not isinstance(target, VariableDeclaration):
            continue
        for declarator in target.declarators:
            if isinstance(declarator.name, Identifier) and declarator.name.name in names:
                return True
    return False


def position(module: Module, located: Located) -> int:
    return module.body.index(located.statement)
