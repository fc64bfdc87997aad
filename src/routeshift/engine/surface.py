"""Import/export surface management.

Every operation here edits top-level import and export statements only,
and every operation is idempotent: applying it twice leaves the module
as applying it once did.

Imports requested while a module is rewritten are collected in a
:class:`PendingImports` value that stages pass along and return; the
module itself is only touched once, by :func:`apply_imports`.
"""

import logging
import re
from collections.abc import Collection, Iterable, Iterator, Mapping
from dataclasses import dataclass

from routeshift.syntax.nodes import (
    ExportNamed,
    ImportDeclaration,
    ImportSpecifier,
    Module,
    Opaque,
    Statement,
    Verbatim,
)
from routeshift.syntax.walk import referenced_names

logger = logging.getLogger("routeshift.engine")


@dataclass(frozen=True, slots=True)
class ImportRecord:
    """One named import: ``import { name } from 'source'``."""

    name: str
    source: str


@dataclass(frozen=True, slots=True)
class PendingImports:
    """Immutable, duplicate-free set of imports to add, in request order."""

    records: tuple[ImportRecord, ...] = ()

    def add(self, name: str, source: str) -> "PendingImports":
        record = ImportRecord(name, source)
        if record in self.records:
            return self
        return PendingImports((*self.records, record))

    def by_source(self) -> dict[str, list[str]]:
        """Names grouped per source; sources in first-requested order."""
        grouped: dict[str, list[str]] = {}
        for record in self.records:
            grouped.setdefault(record.source, []).append(record.name)
        return grouped

    def __iter__(self) -> Iterator[ImportRecord]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)


def _imports(module: Module) -> list[ImportDeclaration]:
    return [s for s in module.body if isinstance(s, ImportDeclaration)]


def _mergeable(statement: ImportDeclaration) -> bool:
    # `import * as ns, { x }` is not valid syntax; type-only imports stay type-only
    return not statement.type_only and statement.namespace is None


def _imports_name(statement: ImportDeclaration, name: str) -> bool:
    return statement.default == name or any(
        spec.imported == name and spec.alias is None and not spec.type_only
        for spec in statement.specifiers
    )


def _prologue_length(module: Module) -> int:
    """Number of leading directive statements (``'use client'``)."""
    count = 0
    for statement in module.body:
        if not isinstance(statement, Opaque):
            break
        node = statement.node
        text = statement.raw or ""
        if not (isinstance(node, Verbatim) and node.kind == "expression_statement" and text[:1] in "'\""):
            break
        count += 1
    return count


def add_import(module: Module, name: str, source: str) -> bool:
    """Import *name* from *source* unless it already is.

    Returns True when the module changed.
    """
    return apply_imports(module, PendingImports().add(name, source)) > 0


def apply_imports(module: Module, pending: PendingImports) -> int:
    """Add every pending import to *module*; returns how many were added.

    A name joins an existing statement for its source when one can take
    it.  Sources without such a statement get a new statement at the top
    of the module (after any directive prologue), in request order.
    """
    added = 0
    fresh: list[ImportDeclaration] = []
    for source, names in pending.by_source().items():
        existing = [s for s in _imports(module) if s.source == source]
        missing = [name for name in names if not any(_imports_name(s, name) for s in existing)]
        if not missing:
            continue
        target = next((s for s in existing if _mergeable(s)), None)
        if target is None:
            target = ImportDeclaration(source=source)
            fresh.append(target)
        for name in missing:
            target.specifiers.append(ImportSpecifier(name))
            added += 1
            logger.debug("%s: importing %s from %s", module.path, name, source)

    at = _prologue_length(module)
    module.body[at:at] = fresh
    return added


def remove_import(
    module: Module,
    name: str,
    pattern: re.Pattern[str],
    remap: Mapping[str, str] | None = None,
) -> bool:
    """Drop the binding *name* from every import whose source matches *pattern*.

    Statements left without bindings are deleted.  Statements that keep
    other bindings are moved to their replacement source, if *remap* has
    one.  Returns True when the module changed.
    """
    changed = False
    for statement in _imports(module):
        if not pattern.search(statement.source):
            continue
        kept = [spec for spec in statement.specifiers if spec.local != name]
        removed = len(kept) != len(statement.specifiers)
        statement.specifiers[:] = kept
        if statement.default == name:
            statement.default = None
            removed = True
        if statement.namespace == name:
            statement.namespace = None
            removed = True
        if not removed:
            continue
        changed = True
        if statement.is_empty:
            module.body.remove(statement)
        elif remap:
            _remap(module, statement, remap)
    return changed


def remap_sources(module: Module, pattern: re.Pattern[str], remap: Mapping[str, str]) -> int:
    """Move every matching import to its replacement source; returns the count moved."""
    moved = 0
    for statement in _imports(module):
        if pattern.search(statement.source) and statement.source in remap:
            _remap(module, statement, remap)
            moved += 1
    return moved


def _remap(module: Module, statement: ImportDeclaration, remap: Mapping[str, str]) -> None:
    target = remap.get(statement.source)
    if target is None:
        return
    if _mergeable(statement) and statement.default is None:
        into = next(
            (s for s in _imports(module) if s is not statement and s.source == target and _mergeable(s)),
            None,
        )
        if into is not None:
            for spec in statement.specifiers:
                if not any(other.local == spec.local for other in into.specifiers):
                    into.specifiers.append(spec)
            module.body.remove(statement)
            return
    statement.source = target


def stale_legacy_imports(
    module: Module,
    pattern: re.Pattern[str],
    candidates: Collection[str] | None = None,
) -> list[str]:
    """Local names imported from matching sources that nothing references anymore.

    With *candidates*, only those names are considered, so imports that
    were already unused stay as they are.
    """
    used = referenced_names(module)
    stale: list[str] = []
    for statement in _imports(module):
        if not pattern.search(statement.source):
            continue
        names = [spec.local for spec in statement.specifiers]
        names.extend(n for n in (statement.default, statement.namespace) if n)
        stale.extend(
            n
            for n in names
            if n not in used and n not in stale and (candidates is None or n in candidates)
        )
    return stale


def remove_export_specifiers(module: Module, exported: Iterable[str]) -> list[ExportNamed]:
    """Remove ``export { ... }`` specifiers exporting any of *exported*.

    Returns the statements that lost a specifier.
    """
    names = set(exported)
    touched: list[ExportNamed] = []
    for statement in module.body:
        if not isinstance(statement, ExportNamed) or statement.declaration is not None:
            continue
        if statement.source is not None:
            continue
        kept = [spec for spec in statement.specifiers if spec.exported not in names]
        if len(kept) != len(statement.specifiers):
            statement.specifiers[:] = kept
            touched.append(statement)
    return touched


def _emptied(statement: Statement) -> bool:
    if not isinstance(statement, ExportNamed):
        return False
    if statement.declaration is not None or statement.specifiers:
        return False
    # Untouched since parsing means it was written as `export {}`
    return statement.raw is None or statement.origin != statement.shape()


def prune_empty_exports(module: Module) -> int:
    """Delete named exports emptied by specifier removal; returns the count deleted."""
    before = len(module.body)
    module.body[:] = [s for s in module.body if not _emptied(s)]
    return before - len(module.body)
