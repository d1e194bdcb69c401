# SPDX-License-Identifier: MIT
"""$(Variable) expansion for module paths.

Manifest paths may reference variables in the form ``$(Name)``:

- ``$(ModuleDir)``: directory of the module (its manifest location)
- ``$(Platform)``, ``$(Configuration)``: from the build target context
- any extra variable handed to the resolver (the project loader adds
  ``$(ProjectDir)``)

After expansion, relative paths are anchored at the module directory
when the descriptor has one. Paths are normalized and emitted in POSIX
form so build plans are identical across hosts.
"""

from __future__ import annotations

import dataclasses
import posixpath
import re
from collections.abc import Mapping
from pathlib import Path, PurePath

from modgraph.core.errors import UndefinedVariable
from modgraph.core.module import ModuleDescriptor

_VARIABLE_RE = re.compile(r"\$\((\w+)\)")


def expand_path(
    path: str,
    variables: Mapping[str, str],
    *,
    module: str,
    module_dir: Path | None = None,
) -> str:
    """Expand variables in a single path.

    Args:
        path: Path text, possibly containing $(Name) references.
        variables: Variable values.
        module: Module name used in error messages.
        module_dir: Anchor for relative results, if any.

    Returns:
        The expanded path in POSIX form.

    Raises:
        UndefinedVariable: If a referenced variable has no value.
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in variables:
            raise UndefinedVariable(name, module)
        return variables[name]

    expanded = _VARIABLE_RE.sub(_replace, path)
    result = PurePath(expanded)
    if module_dir is not None and not result.is_absolute():
        result = module_dir / result
    return posixpath.normpath(result.as_posix())


def expand_descriptor(
    descriptor: ModuleDescriptor, variables: Mapping[str, str]
) -> ModuleDescriptor:
    """Return a copy of a descriptor with every path expanded.

    Include paths, additional libraries and runtime dependencies are
    expanded; ``$(ModuleDir)`` is added automatically when the descriptor
    has a module directory.
    """
    scope = dict(variables)
    if descriptor.module_dir is not None:
        scope["ModuleDir"] = descriptor.module_dir.as_posix()

    def _expand(paths: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(
            expand_path(
                p,
                scope,
                module=descriptor.name,
                module_dir=descriptor.module_dir,
            )
            for p in paths
        )

    return dataclasses.replace(
        descriptor,
        public_include_paths=_expand(descriptor.public_include_paths),
        private_include_paths=_expand(descriptor.private_include_paths),
        additional_libraries=_expand(descriptor.additional_libraries),
        runtime_dependencies=_expand(descriptor.runtime_dependencies),
    )
