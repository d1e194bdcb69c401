# SPDX-License-Identifier: MIT
"""Effective include paths and definitions.

A module compiles with:
1. its own public and private include paths (and definitions)
2. the public include paths (and definitions) of every module visible
   to it, in the graph's topological order

Duplicates are removed keeping the first occurrence, so repeated
resolutions of unchanged input produce identical results.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from modgraph.core.errors import ConflictingDefinition
from modgraph.core.module import Definition, ModuleDescriptor

if TYPE_CHECKING:
    from modgraph.core.graph import DependencyGraph


class IncludePathResolver:
    """Computes the compile-visible include paths and definitions.

    Attributes:
        graph: A validated dependency graph.
    """

    def __init__(self, graph: DependencyGraph) -> None:
        self.graph = graph

    def _visible_descriptors(self, name: str) -> list[ModuleDescriptor]:
        visible = self.graph.ordered(self.graph.visible_dependencies(name))
        return [
            module
            for module in (self.graph[n] for n in visible)
            if isinstance(module, ModuleDescriptor)
        ]

    def include_paths(self, name: str) -> tuple[str, ...]:
        """Effective include paths of a module.

        Args:
            name: Module name.

        Returns:
            Ordered, de-duplicated include paths. Host modules have none.
        """
        module = self.graph[name]
        if not isinstance(module, ModuleDescriptor):
            return ()

        paths: dict[str, None] = dict.fromkeys(module.public_include_paths)
        paths.update(dict.fromkeys(module.private_include_paths))
        for dep in self._visible_descriptors(name):
            paths.update(dict.fromkeys(dep.public_include_paths))
        return tuple(paths)

    def definitions(self, name: str) -> tuple[Definition, ...]:
        """Effective definitions of a module.

        Raises:
            ConflictingDefinition: If two sources define the same symbol
                with different values.
        """
        module = self.graph[name]
        if not isinstance(module, ModuleDescriptor):
            return ()

        sources: list[tuple[str, Definition]] = [
            (name, d) for d in module.public_definitions + module.private_definitions
        ]
        for dep in self._visible_descriptors(name):
            sources.extend((dep.name, d) for d in dep.public_definitions)

        result: dict[str, tuple[str, Definition]] = {}
        for origin, definition in sources:
            previous = result.setdefault(definition.name, (origin, definition))
            if previous[1] != definition:
                raise ConflictingDefinition(
                    name,
                    definition.name,
                    [
                        f"{previous[1]} (from {previous[0]})",
                        f"{definition} (from {origin})",
                    ],
                    module.defined_at,
                )
        return tuple(d for _, d in result.values())
