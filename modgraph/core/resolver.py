# SPDX-License-Identifier: MIT
"""Module resolution into a build plan.

The Resolver is the single entry point of modgraph. Given the full set of
module descriptors and one BuildTargetContext, it:

1. Rejects duplicate module names
2. Applies conditional rules to every module (ConditionalRuleEngine)
3. Expands $(Variable) references in paths
4. Builds and validates the DependencyGraph (references, editor
   constraints, cycles); nothing else happens until this succeeds
5. Computes each module's plan (IncludePathResolver, LibraryLinkSet)
   layer by layer in dependency order

The result is either a complete BuildPlan or a ConfigurationError; there
is no partial plan. Output is a pure function of the input.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterable, Iterator, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from modgraph.core.context import BuildTargetContext
from modgraph.core.graph import DependencyGraph, Edge, check_unique_names
from modgraph.core.includes import IncludePathResolver
from modgraph.core.libraries import LibraryLinkSet, RuntimeArtifact
from modgraph.core.module import Definition, HostModule, ModuleDescriptor
from modgraph.core.paths import expand_descriptor
from modgraph.core.rules import ConditionalRuleEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModulePlan:
    """The resolved build plan of one module.

    Attributes:
        name: Module name.
        module_type: "Runtime" or "Editor".
        pch: Precompiled header strategy, as declared.
        flags: Capability flags, sorted.
        dependencies: Modules visible to this module's compilation
            (its effective dependency closure), in topological order.
        exported: Modules re-exported to consumers (public closure).
        link_dependencies: Every module whose artifacts are linked in.
        include_paths: Effective include paths.
        definitions: Effective definitions.
        link_set: Aggregated link and runtime artifacts.
    """

    name: str
    module_type: str
    pch: str
    flags: tuple[str, ...]
    dependencies: tuple[str, ...]
    exported: tuple[str, ...]
    link_dependencies: tuple[str, ...]
    include_paths: tuple[str, ...]
    definitions: tuple[Definition, ...]
    link_set: LibraryLinkSet

    @property
    def libraries(self) -> tuple[str, ...]:
        return self.link_set.libraries

    @property
    def runtime_dependencies(self) -> tuple[RuntimeArtifact, ...]:
        return self.link_set.runtime_dependencies

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "type": self.module_type,
            "pch": self.pch,
            "flags": list(self.flags),
            "dependencies": list(self.dependencies),
            "exported": list(self.exported),
            "link_dependencies": list(self.link_dependencies),
            "include_paths": list(self.include_paths),
            "definitions": [str(d) for d in self.definitions],
            "libraries": list(self.libraries),
            "runtime_dependencies": [
                {"path": a.path, "declared_by": a.declared_by}
                for a in self.runtime_dependencies
            ],
        }


@dataclass(frozen=True)
class BuildPlan:
    """Resolved plans for every built module.

    Attributes:
        context: The context the plan was resolved for.
        modules: Module plans in topological order.
        excluded: Editor modules left out of a non-editor build.
        edges: Post-conditional dependency edges of the planned modules.
    """

    context: BuildTargetContext
    modules: Mapping[str, ModulePlan] = field(default_factory=dict)
    excluded: tuple[str, ...] = ()
    edges: tuple[Edge, ...] = ()

    def __getitem__(self, name: str) -> ModulePlan:
        return self.modules[name]

    def __contains__(self, name: object) -> bool:
        return name in self.modules

    def __iter__(self) -> Iterator[ModulePlan]:
        return iter(self.modules.values())

    def __len__(self) -> int:
        return len(self.modules)

    @property
    def build_order(self) -> list[str]:
        return list(self.modules)

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation with stable ordering."""
        return {
            "context": self.context.as_dict(),
            "modules": {name: plan.as_dict() for name, plan in self.modules.items()},
            "excluded": list(self.excluded),
        }


class Resolver:
    """Resolves module descriptors into a BuildPlan.

    Example:
        resolver = Resolver(BuildTargetContext(editor=False),
                            hosts=UNREAL_HOST_MODULES)
        plan = resolver.resolve(descriptors)
        print(plan["NiflibPlugin"].include_paths)

    Attributes:
        context: The build target context.
        hosts: Host-provided leaf modules.
        variables: Extra $(Variable) values for path expansion.
        jobs: Worker threads for per-module computation (1 = serial).
        check_artifacts: Validate that declared artifacts exist on disk.
    """

    def __init__(
        self,
        context: BuildTargetContext | None = None,
        *,
        hosts: Iterable[HostModule] = (),
        variables: Mapping[str, str] | None = None,
        jobs: int = 1,
        check_artifacts: bool = False,
    ) -> None:
        self.context = context or BuildTargetContext()
        self.hosts = tuple(hosts)
        self.variables = dict(variables or {})
        self.jobs = max(1, jobs)
        self.check_artifacts = check_artifacts

    def prepare(self, descriptors: Iterable[ModuleDescriptor]) -> DependencyGraph:
        """Run every validation step and return the validated graph.

        Conditional rules and path expansion are applied to all modules
        before the graph is built. Editor modules of a non-editor build
        are passed through untouched; they get no node.

        Raises:
            ConfigurationError: On any invalid input.
        """
        descriptors = list(descriptors)
        check_unique_names([*self.hosts, *descriptors])

        engine = ConditionalRuleEngine(self.context)
        variables = {**self.context.path_variables(), **self.variables}
        effective: list[ModuleDescriptor] = []
        for descriptor in descriptors:
            if descriptor.is_editor and not self.context.editor:
                logger.debug("%s: editor module skipped", descriptor.name)
                effective.append(descriptor)
                continue
            effective.append(expand_descriptor(engine.apply(descriptor), variables))

        graph = DependencyGraph.build(effective, self.hosts, context=self.context)
        graph.validate()
        return graph

    def resolve(self, descriptors: Iterable[ModuleDescriptor]) -> BuildPlan:
        """Resolve descriptors into a BuildPlan.

        Args:
            descriptors: Every module of the build.

        Returns:
            The complete plan.

        Raises:
            ConfigurationError: On any invalid input; no plan is produced.
        """
        descriptors = list(descriptors)
        logger.info(
            "Resolving %d module(s) for %r", len(descriptors), self.context
        )
        graph = self.prepare(descriptors)
        includes = IncludePathResolver(graph)

        plans: dict[str, ModulePlan] = {}
        with contextlib.ExitStack() as stack:
            pool = None
            if self.jobs > 1:
                pool = stack.enter_context(ThreadPoolExecutor(max_workers=self.jobs))
            for layer in graph.layers():
                names = [n for n in layer if not graph.is_host(n)]
                if pool is not None and len(names) > 1:
                    results = list(
                        pool.map(lambda n: self._plan(graph, includes, n), names)
                    )
                else:
                    results = [self._plan(graph, includes, n) for n in names]
                for plan in results:
                    plans[plan.name] = plan

        logger.info(
            "Resolved %d module(s), %d editor module(s) excluded",
            len(plans),
            len(graph.excluded),
        )
        return BuildPlan(
            self.context, plans, tuple(graph.excluded), tuple(graph.edges())
        )

    def _plan(
        self, graph: DependencyGraph, includes: IncludePathResolver, name: str
    ) -> ModulePlan:
        module = graph[name]
        assert isinstance(module, ModuleDescriptor)
        logger.debug("Planning %s", name)
        return ModulePlan(
            name=name,
            module_type=module.module_type,
            pch=module.pch,
            flags=tuple(sorted(module.flags)),
            dependencies=tuple(graph.ordered(graph.visible_dependencies(name))),
            exported=tuple(graph.ordered(graph.transitive_closure(name))),
            link_dependencies=tuple(graph.ordered(graph.link_closure(name))),
            include_paths=includes.include_paths(name),
            definitions=includes.definitions(name),
            link_set=LibraryLinkSet.collect(
                graph, name, check_artifacts=self.check_artifacts
            ),
        )


def resolve(
    descriptors: Iterable[ModuleDescriptor],
    context: BuildTargetContext | None = None,
    **kwargs: Any,
) -> BuildPlan:
    """Resolve descriptors into a BuildPlan.

    Convenience wrapper around Resolver; keyword arguments are passed to
    the Resolver constructor.
    """
    return Resolver(context, **kwargs).resolve(descriptors)
