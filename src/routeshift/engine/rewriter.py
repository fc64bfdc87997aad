"""Structural rewrite of one route module.

A module moves through a fixed sequence of stages::

    INSPECTED ──► CLASSIFIED ──► REWRITTEN ──► FINALIZED
        │              │
        └──────────────┴──► SKIPPED

INSPECTED
    ``loader``, ``action`` and the default export are located.  A module
    that already declares a route descriptor is skipped.
CLASSIFIED
    Page route (has a default export) or resource route.  A page route
    without a loader, or a resource route without any handler, is
    skipped.
REWRITTEN
    Page route: the default export becomes a plain declaration, the
    loader moves into an appended ``Route`` descriptor and a resolved
    action gets an advisory comment.  Resource route: the handlers
    move into a ``ServerRoute`` descriptor that takes the place of the
    first of them.
FINALIZED
    Legacy imports that lost their last use are removed, the rest are
    remapped, the factory import is added and emptied exports pruned.

:func:`rewrite` mutates the module and reports what happened;
:func:`transform` returns the module, or :data:`UNCHANGED` when nothing
was rewritten.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from routeshift.config import DEFAULT_CONFIG, MigrationConfig
from routeshift.engine.classify import RouteKind, classify
from routeshift.engine.handlers import extract_handler
from routeshift.engine.locator import (
    DefaultExport,
    ForwardedDefault,
    FunctionShaped,
    InlineDefault,
    Located,
    ReferencedDefault,
    VariableShaped,
    declares_descriptor,
    find_default_export,
    locate,
    position,
)
from routeshift.engine.surface import (
    PendingImports,
    apply_imports,
    prune_empty_exports,
    remap_sources,
    remove_export_specifiers,
    remove_import,
    stale_legacy_imports,
)
from routeshift.paths import compute_route_path
from routeshift.syntax.nodes import (
    Call,
    ClassDeclaration,
    ExportNamed,
    ExportSpecifier,
    FunctionDeclaration,
    Identifier,
    ImportDeclaration,
    ImportSpecifier,
    Member,
    Module,
    Node,
    ObjectExpression,
    Property,
    Statement,
    StringLiteral,
    VariableDeclaration,
    VariableDeclarator,
    Verbatim,
)
from routeshift.syntax.walk import declared_names, referenced_names, referenced_values

logger = logging.getLogger("routeshift.engine")

# Resource route verb for each handler name, in descriptor order
_VERBS = (("loader", "GET"), ("action", "POST"))


class Stage(Enum):
    """Terminal stage a module reached."""

    INSPECTED = "inspected"
    CLASSIFIED = "classified"
    REWRITTEN = "rewritten"
    FINALIZED = "finalized"
    SKIPPED = "skipped"


class SkipReason(Enum):
    """Why a module was left untouched."""

    NOT_APPLICABLE = "not-applicable"
    MISSING_LOADER = "missing-loader"
    ALREADY_MIGRATED = "already-migrated"


@dataclass(frozen=True, slots=True)
class Outcome:
    """What :func:`rewrite` did to a module.

    Attributes:
        stage: ``FINALIZED`` when the module was rewritten, else ``SKIPPED``.
        kind: The module's route role, once classified.
        route_path: The computed route path, for rewritten modules.
        reason: Why the module was skipped.
        advisories: Follow-up notes also written into the module as comments.
    """

    stage: Stage
    kind: RouteKind | None = None
    route_path: str | None = None
    reason: SkipReason | None = None
    advisories: tuple[str, ...] = ()

    @property
    def changed(self) -> bool:
        return self.stage is Stage.FINALIZED


@dataclass(frozen=True, slots=True)
class Unchanged:
    """Sentinel returned by :func:`transform` for modules left as they were.

    Falsy, so ``if transform(module, config):`` reads naturally.
    """

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNCHANGED"


UNCHANGED: Unchanged = Unchanged()


@dataclass(slots=True)
class _Rewrite:
    """Per-invocation working state."""

    module: Module
    config: MigrationConfig
    route_path: str
    used_before: set[str] = field(default_factory=set)
    pending: PendingImports = field(default_factory=PendingImports)
    advisories: list[str] = field(default_factory=list)
    kept: list[Statement] = field(default_factory=list)

    def advise(self, target: Statement | Property, message: str) -> None:
        target.comments.append(f"// {self.config.advisory_prefix} {message}")
        self.advisories.append(message)


def transform(module: Module, config: MigrationConfig = DEFAULT_CONFIG) -> Module | Unchanged:
    """Rewrite *module* in place; returns it, or :data:`UNCHANGED`."""
    outcome = rewrite(module, config)
    return module if outcome.changed else UNCHANGED


def rewrite(module: Module, config: MigrationConfig = DEFAULT_CONFIG) -> Outcome:
    """Run the full stage sequence over *module*.

    Expected situations (nothing to migrate, already migrated) are
    reported in the returned :class:`Outcome`; the module is only
    mutated when the outcome is ``FINALIZED``.
    """
    # INSPECTED
    if declares_descriptor(module, config.descriptor_names):
        logger.debug("%s: already declares a route descriptor", module.path)
        return Outcome(Stage.SKIPPED, reason=SkipReason.ALREADY_MIGRATED)
    loader = locate(module, "loader")
    action = locate(module, "action")

    # CLASSIFIED
    kind = classify(module)
    default = find_default_export(module)
    if kind is RouteKind.PAGE and loader is None:
        logger.debug("%s: page route without a loader", module.path)
        return Outcome(Stage.SKIPPED, kind=kind, reason=SkipReason.MISSING_LOADER)
    if kind is RouteKind.RESOURCE and loader is None and action is None:
        return Outcome(Stage.SKIPPED, kind=kind, reason=SkipReason.NOT_APPLICABLE)

    # REWRITTEN
    state = _Rewrite(
        module,
        config,
        compute_route_path(module.path, routes_root=config.routes_root),
        used_before=referenced_names(module),
    )
    if default is not None and loader is not None:
        _rewrite_page(state, default, loader, action)
    else:
        handlers = [(verb, found) for (_, verb), found in zip(_VERBS, (loader, action)) if found is not None]
        _rewrite_resource(state, handlers)

    # FINALIZED
    _finalize(state)
    logger.debug("%s: rewritten as %s route %s", module.path, kind.value, state.route_path)
    return Outcome(
        Stage.FINALIZED,
        kind=kind,
        route_path=state.route_path,
        advisories=tuple(state.advisories),
    )


# ---------------------------------------------------------------------------
# Page routes
# ---------------------------------------------------------------------------


def _rewrite_page(state: _Rewrite, default: DefaultExport, loader: Located, action: Located | None) -> None:
    config = state.config
    component = _detach_default(state, default)

    loader_prop = _handler_property(state, "loader", loader, RouteKind.PAGE)
    descriptor = _descriptor(
        config.page_descriptor,
        Call(
            callee=_factory_call(config.page_factory, state.route_path),
            arguments=Verbatim.join(
                "arguments",
                [ObjectExpression([loader_prop, Property("component", Identifier(component))])],
            ),
        ),
    )
    state.module.body.append(descriptor)
    state.pending = state.pending.add(config.page_factory, config.page_factory_source)

    if action is not None:
        state.advise(
            action.statement,
            "page routes have no action slot; move this mutation into a server function",
        )


def _detach_default(state: _Rewrite, default: DefaultExport) -> str:
    """Turn the default export into a plain declaration; returns the component name."""
    module = state.module
    match default:
        case ReferencedDefault(name=name, specifier=None):
            module.body.remove(default.statement)
            return name
        case ReferencedDefault(
            name=name, statement=ExportNamed() as statement, specifier=ExportSpecifier() as spec
        ):
            statement.specifiers.remove(spec)
            return name
        case ForwardedDefault(imported=imported, source=source, statement=statement, specifier=spec):
            statement.specifiers.remove(spec)
            if imported == "default":
                name = _fresh_name(module, state.config.component_name)
                importer = ImportDeclaration(source, default=name)
            else:
                name = _fresh_name(module, imported)
                importer = ImportDeclaration(
                    source, [ImportSpecifier(imported, alias=name if name != imported else None)]
                )
            importer.gap = statement.gap
            module.body.insert(module.body.index(statement), importer)
            return name
        case InlineDefault(statement=statement):
            declaration = statement.declaration
            replacement: Statement
            if isinstance(declaration, FunctionDeclaration | ClassDeclaration):
                if declaration.name is None:
                    declaration.name = _fresh_name(module, state.config.component_name)
                name = declaration.name
                replacement = declaration
            else:
                name = _fresh_name(module, state.config.component_name)
                replacement = VariableDeclaration(
                    "const", [VariableDeclarator(Identifier(name), init=declaration)]
                )
            replacement.gap = statement.gap
            replacement.comments = statement.comments
            module.body[module.body.index(statement)] = replacement
            return name
        case _:
            msg = f"Cannot detach default export {default!r}"
            raise TypeError(msg)


def _fresh_name(module: Module, base: str) -> str:
    taken = declared_names(module) | referenced_names(module)
    name, counter = base, 1
    while name in taken:
        counter += 1
        name = f"{base}{counter}"
    return name


# ---------------------------------------------------------------------------
# Resource routes
# ---------------------------------------------------------------------------


def _rewrite_resource(state: _Rewrite, handlers: list[tuple[str, Located]]) -> None:
    config = state.config
    module = state.module
    first = min((found for _, found in handlers), key=lambda found: position(module, found))

    methods = ObjectExpression()
    descriptor = _descriptor(
        config.resource_descriptor,
        Call(
            callee=Member(_factory_call(config.resource_factory, state.route_path), config.resource_method),
            arguments=Verbatim.join("arguments", [methods]),
        ),
    )
    descriptor.gap = first.statement.gap
    module.body.insert(position(module, first), descriptor)
    methods.properties.extend(
        _handler_property(state, verb, found, RouteKind.RESOURCE) for verb, found in handlers
    )

    # The descriptor may only refer to declarations above it
    kept = [module.body.index(statement) for statement in state.kept if statement in module.body]
    if kept and max(kept) > module.body.index(descriptor):
        module.body.remove(descriptor)
        module.body.insert(max(kept), descriptor)
    state.pending = state.pending.add(config.resource_factory, config.resource_factory_source)


# ---------------------------------------------------------------------------
# Shared pieces
# ---------------------------------------------------------------------------


def _handler_property(state: _Rewrite, key: str, located: Located, kind: RouteKind) -> Property:
    """Detach *located* from the module and wrap it as a descriptor property."""
    module = state.module
    local = _local_name(located)
    remove_export_specifiers(module, [located.name])

    if _referenced_elsewhere(module, local, located.statement):
        # Still used by other code: keep the declaration and point at it
        state.kept.append(_unexport(module, located, local))
        prop = Property(key, Identifier(local))
        envelope = state.config.envelope
        if local != located.name:
            state.advise(
                prop, f"{located.name} still refers to {local}; its {envelope}() calls were not unwrapped"
            )
        else:
            state.advise(
                prop,
                f"{local} is still used elsewhere in this module; its {envelope}() calls were not unwrapped",
            )
        return prop

    handler = extract_handler(located, kind, state.config)
    _remove_declaration(module, located)
    prop = Property(key, handler.value)
    if handler.dropped_params:
        names = ", ".join(handler.dropped_params)
        state.advise(prop, f"{located.name} no longer receives {names}; get them from the route context")
    if handler.retained:
        state.advise(
            prop,
            f"{handler.retained} {state.config.envelope}() call(s) with status or headers kept as is",
        )
    return prop


def _local_name(located: Located) -> str:
    match located:
        case FunctionShaped(declaration=FunctionDeclaration(name=str() as name)):
            return name
        case VariableShaped(declarator=VariableDeclarator(name=Identifier(name=name))):
            return name
        case _:
            return located.name


def _unexport(module: Module, located: Located, local: str) -> Statement:
    """Drop the ``export`` from a kept handler declared under its own name."""
    statement = located.statement
    if not isinstance(statement, ExportNamed) or statement.declaration is None or local != located.name:
        return statement
    if isinstance(located, VariableShaped) and len(located.declaration.declarators) > 1:
        return statement
    declaration = statement.declaration
    declaration.gap = statement.gap
    declaration.comments = statement.comments
    module.body[module.body.index(statement)] = declaration
    return declaration


def _referenced_elsewhere(module: Module, name: str, statement: Statement) -> bool:
    return any(name in referenced_values(other) for other in module.body if other is not statement)


def _remove_declaration(module: Module, located: Located) -> None:
    if isinstance(located, VariableShaped) and len(located.declaration.declarators) > 1:
        located.declaration.declarators.remove(located.declarator)
        return
    if located.statement in module.body:
        module.body.remove(located.statement)


def _factory_call(factory: str, route_path: str) -> Call:
    return Call(callee=Identifier(factory), arguments=Verbatim.join("arguments", [StringLiteral(route_path)]))


def _descriptor(name: str, init: Node) -> ExportNamed:
    return ExportNamed(
        declaration=VariableDeclaration("const", [VariableDeclarator(Identifier(name), init=init)])
    )


def _finalize(state: _Rewrite) -> None:
    module, config = state.module, state.config
    legacy = config.legacy_pattern
    # Only imports the rewrite left unused, plus the envelope
    candidates = state.used_before | {config.envelope}
    for name in stale_legacy_imports(module, legacy, candidates):
        remove_import(module, name, legacy, config.remap)
    remap_sources(module, legacy, config.remap)
    apply_imports(module, state.pending)
    prune_empty_exports(module)
