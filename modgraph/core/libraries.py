# SPDX-License-Identifier: MIT
"""Link libraries and runtime-deployed files.

Unlike include paths, link artifacts are collected from a module's whole
dependency closure, public and private: the final binary must satisfy
every compiled dependency. Each runtime dependency remembers the module
that declared it for later diagnostics.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from modgraph.core.errors import MissingArtifact
from modgraph.core.module import ModuleDescriptor

if TYPE_CHECKING:
    from modgraph.core.graph import DependencyGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeArtifact:
    """A file shipped alongside the build.

    Attributes:
        path: Expanded path of the file.
        declared_by: Name of the module that declared it.
    """

    path: str
    declared_by: str


@dataclass(frozen=True)
class LibraryLinkSet:
    """Aggregated link and runtime artifacts of one module.

    Attributes:
        module: The module the set was computed for.
        libraries: Link artifacts, de-duplicated, self first.
        runtime_dependencies: Deployable files, de-duplicated, self first.
    """

    module: str
    libraries: tuple[str, ...] = ()
    runtime_dependencies: tuple[RuntimeArtifact, ...] = field(default=())

    @classmethod
    def collect(
        cls,
        graph: DependencyGraph,
        name: str,
        *,
        check_artifacts: bool = False,
    ) -> LibraryLinkSet:
        """Aggregate artifacts for a module and its link closure.

        Args:
            graph: A validated dependency graph.
            name: Module to collect for.
            check_artifacts: If True, every path must exist on disk.

        Returns:
            The module's LibraryLinkSet.

        Raises:
            MissingArtifact: If check_artifacts is set and a path is missing.
        """
        order = [name, *graph.ordered(graph.link_closure(name))]
        libraries: dict[str, None] = {}
        runtime: dict[str, RuntimeArtifact] = {}

        for module_name in order:
            module = graph[module_name]
            if not isinstance(module, ModuleDescriptor):
                continue
            for lib in module.additional_libraries:
                if lib not in libraries:
                    if check_artifacts:
                        _check_exists(lib, module)
                    libraries[lib] = None
            for path in module.runtime_dependencies:
                if path not in runtime:
                    if check_artifacts:
                        _check_exists(path, module)
                    runtime[path] = RuntimeArtifact(path, module.name)

        return cls(name, tuple(libraries), tuple(runtime.values()))

    @property
    def runtime_paths(self) -> tuple[str, ...]:
        return tuple(artifact.path for artifact in self.runtime_dependencies)

    def __len__(self) -> int:
        return len(self.libraries) + len(self.runtime_dependencies)


def _check_exists(path: str, module: ModuleDescriptor) -> None:
    if not Path(path).exists():
        raise MissingArtifact(path, module.name, module.defined_at)
    logger.debug("%s: found artifact %s", module.name, path)
