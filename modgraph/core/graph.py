# SPDX-License-Identifier: MIT
"""Module dependency graph.

The DependencyGraph holds one node per module and one edge per public or
private dependency reference (after conditional rules were applied). It
validates references, checks that the graph is acyclic, and answers
visibility questions:

- transitive_closure(): modules reachable through public edges only
- visible_dependencies(): what a module's own compilation can see
- link_closure(): everything reachable, public or private

Visibility is a property of the edge being traversed, not of the
destination node: if A depends privately on B and B publicly on C,
A sees B and C, but neither is re-exported from A.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from modgraph.core.errors import (
    CyclicDependency,
    DuplicateModuleName,
    InvalidTargetReference,
    UnresolvedDependency,
)
from modgraph.core.module import HostModule, ModuleDescriptor

if TYPE_CHECKING:
    from modgraph.core.context import BuildTargetContext

logger = logging.getLogger(__name__)

Module = ModuleDescriptor | HostModule


@dataclass(frozen=True)
class Edge:
    """A dependency reference from one module to another.

    Attributes:
        source: The module holding the reference.
        target: The referenced module.
        public: True if the dependency is re-exported to consumers.
    """

    source: str
    target: str
    public: bool


def check_unique_names(modules: Iterable[Module]) -> None:
    """Raise DuplicateModuleName if two declarations share a name.

    Identical declarations are still duplicates.
    """
    seen: dict[str, Module] = {}
    for module in modules:
        if module.name in seen:
            previous = seen[module.name]
            raise DuplicateModuleName(
                module.name, [previous.defined_at, module.defined_at]
            )
        seen[module.name] = module


class DependencyGraph:
    """Directed graph of modules connected by public/private edges.

    Build it with DependencyGraph.build(); call validate() before asking
    for orders or closures. The graph is never modified after build().

    Example:
        graph = DependencyGraph.build(descriptors, hosts=UNREAL_HOST_MODULES)
        graph.validate()
        for layer in graph.layers():
            ...

    Attributes:
        context: The context the graph was built for, if any.
    """

    __slots__ = (
        "context",
        "_modules",
        "_excluded",
        "_edges",
        "_validated",
        "_layers",
        "_position",
    )

    def __init__(self, context: BuildTargetContext | None = None) -> None:
        self.context = context
        self._modules: dict[str, Module] = {}
        self._excluded: dict[str, Module] = {}
        self._edges: dict[str, list[Edge]] = {}
        self._validated = False
        self._layers: list[list[str]] | None = None
        self._position: dict[str, int] = {}

    @classmethod
    def build(
        cls,
        descriptors: Iterable[ModuleDescriptor],
        hosts: Iterable[HostModule] = (),
        *,
        context: BuildTargetContext | None = None,
    ) -> DependencyGraph:
        """Construct the graph from post-conditional descriptors.

        Under a context without editor tooling, Editor-typed modules are
        kept aside and get no node. References to an excluded host module
        are dropped from the edges. References to an
        excluded declared module stay and fail validation with
        InvalidTargetReference.

        Args:
            descriptors: Module descriptors with conditional rules applied.
            hosts: Host-provided leaf modules.
            context: Build context; None means editor tooling is present.

        Returns:
            The graph.

        Raises:
            DuplicateModuleName: If two modules share a name.
        """
        descriptors = list(descriptors)
        hosts = list(hosts)
        check_unique_names([*hosts, *descriptors])

        graph = cls(context)
        editor = context is None or context.editor
        for module in [*hosts, *descriptors]:
            if module.is_editor and not editor:
                graph._excluded[module.name] = module
            else:
                graph._modules[module.name] = module

        for descriptor in descriptors:
            if descriptor.name not in graph._modules:
                continue
            edges = [
                Edge(descriptor.name, d, True) for d in descriptor.public_dependencies
            ]
            edges.extend(
                Edge(descriptor.name, d, False)
                for d in descriptor.private_dependencies
                if d not in descriptor.public_dependencies
            )
            pruned = [e.target for e in edges if graph._is_excluded_host(e.target)]
            if pruned:
                logger.debug(
                    "%s: dropped editor host reference(s) %s",
                    descriptor.name,
                    ", ".join(pruned),
                )
            graph._edges[descriptor.name] = [
                e for e in edges if not graph._is_excluded_host(e.target)
            ]

        logger.debug(
            "Built dependency graph: %d module(s), %d excluded",
            len(graph._modules),
            len(graph._excluded),
        )
        return graph

    # Access

    def __contains__(self, name: object) -> bool:
        return name in self._modules

    def __getitem__(self, name: str) -> Module:
        return self._modules[name]

    def __len__(self) -> int:
        return len(self._modules)

    @property
    def modules(self) -> list[Module]:
        """Included modules, hosts first, in declaration order."""
        return list(self._modules.values())

    @property
    def descriptors(self) -> list[ModuleDescriptor]:
        """Included declared (non-host) modules in declaration order."""
        return [m for m in self._modules.values() if isinstance(m, ModuleDescriptor)]

    @property
    def excluded(self) -> list[str]:
        """Names of Editor modules left out of a non-editor build."""
        return list(self._excluded)

    def is_host(self, name: str) -> bool:
        return isinstance(self._modules.get(name), HostModule)

    def _is_excluded_host(self, name: str) -> bool:
        return isinstance(self._excluded.get(name), HostModule)

    def edges(self, name: str | None = None) -> Iterator[Edge]:
        """Iterate over outgoing edges of one module, or of all modules."""
        if name is not None:
            yield from self._edges.get(name, [])
            return
        for edges in self._edges.values():
            yield from edges

    # Validation

    def validate(self) -> None:
        """Check references and acyclicity.

        Runs once; later calls return immediately.

        Raises:
            InvalidTargetReference: A module references an excluded
                Editor-typed declared module.
            UnresolvedDependency: A module references an unknown name.
            CyclicDependency: The edges form a cycle.
        """
        if self._validated:
            return

        for edge in self.edges():
            if edge.target in self._excluded:
                raise InvalidTargetReference(
                    edge.target, edge.source, self._location(edge.source)
                )
            if edge.target not in self._modules:
                raise UnresolvedDependency(
                    edge.target, edge.source, self._location(edge.source)
                )

        cycle = self._find_cycle()
        if cycle:
            raise CyclicDependency(cycle, self._location(cycle[0]))

        self._validated = True

    def _location(self, name: str) -> object:
        module = self._modules.get(name)
        return module.defined_at if module is not None else None

    def _find_cycle(self) -> list[str] | None:
        """Depth-first search with a recursion stack.

        Returns:
            The first cycle found as ["A", "B", ..., "A"], or None.
        """
        done: set[str] = set()
        stack: list[str] = []
        on_stack: set[str] = set()

        def _visit(name: str) -> list[str] | None:
            stack.append(name)
            on_stack.add(name)
            for edge in self._edges.get(name, []):
                if edge.target in on_stack:
                    start = stack.index(edge.target)
                    return stack[start:] + [edge.target]
                if edge.target not in done:
                    cycle = _visit(edge.target)
                    if cycle:
                        return cycle
            stack.pop()
            on_stack.discard(name)
            done.add(name)
            return None

        for name in self._modules:
            if name not in done:
                cycle = _visit(name)
                if cycle:
                    return cycle
        return None

    # Ordering

    def layers(self) -> list[list[str]]:
        """Group modules into dependency layers (Kahn's algorithm).

        Every module's dependencies live in strictly earlier layers, so
        all modules of one layer can be processed independently once the
        previous layers are done. Each layer is sorted by name.

        Raises:
            CyclicDependency etc.: If validation fails.
        """
        if self._layers is not None:
            return [list(layer) for layer in self._layers]

        self.validate()
        pending = {
            name: {e.target for e in self._edges.get(name, [])}
            for name in self._modules
        }
        layers: list[list[str]] = []
        while pending:
            ready = sorted(name for name, deps in pending.items() if not deps)
            layers.append(ready)
            for name in ready:
                del pending[name]
            for deps in pending.values():
                deps.difference_update(ready)

        self._layers = layers
        self._position = {
            name: index
            for index, name in enumerate(n for layer in layers for n in layer)
        }
        return [list(layer) for layer in layers]

    def topological_order(self) -> list[str]:
        """All modules, dependencies before dependents, deterministically."""
        return [name for layer in self.layers() for name in layer]

    def ordered(self, names: Iterable[str]) -> list[str]:
        """Sort module names by their topological position."""
        if self._layers is None:
            self.layers()
        return sorted(names, key=self._position.__getitem__)

    # Closures

    def _reach(self, start: Iterable[str], *, public_only: bool) -> set[str]:
        result: set[str] = set()
        todo = list(start)
        while todo:
            name = todo.pop()
            if name in result:
                continue
            result.add(name)
            todo.extend(
                e.target
                for e in self._edges.get(name, [])
                if e.public or not public_only
            )
        return result

    def transitive_closure(self, name: str) -> frozenset[str]:
        """Modules reachable from ``name`` through public edges only.

        This is what ``name`` re-exports to its consumers.
        """
        starts = [e.target for e in self._edges.get(name, []) if e.public]
        return frozenset(self._reach(starts, public_only=True))

    def visible_dependencies(self, name: str) -> frozenset[str]:
        """Modules visible to the compilation of ``name``.

        Every direct dependency (public or private) plus everything those
        dependencies export publicly.
        """
        direct = [e.target for e in self._edges.get(name, [])]
        return frozenset(self._reach(direct, public_only=True))

    def link_closure(self, name: str) -> frozenset[str]:
        """Every module reachable from ``name`` through any edge."""
        direct = [e.target for e in self._edges.get(name, [])]
        return frozenset(self._reach(direct, public_only=False))

    def __repr__(self) -> str:
        return f"DependencyGraph({len(self._modules)} modules)"
