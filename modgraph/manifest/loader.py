# SPDX-License-Identifier: MIT
"""TOML manifest loading.

A project is described by a project file (``modgraph.toml``) and one
manifest per module (``<Name>.module.toml``) found under the project's
manifest directories. Relative paths inside a module manifest are
anchored at the manifest's directory.

Example module manifest:

    [module]
    name = "Nifly"
    type = "Runtime"
    pch = "UseExplicitOrSharedPCHs"
    flags = ["enableExceptions", "enableRTTI"]
    public_include_paths = ["Public"]
    private_include_paths = ["Private"]
    public_dependencies = ["Core", "CoreUObject", "Engine", "RenderCore"]

    [[module.rules]]
    when = "editor"
    private_dependencies = ["UnrealEd"]
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from modgraph.core.context import BuildTargetContext
from modgraph.core.errors import ManifestError
from modgraph.core.graph import check_unique_names
from modgraph.core.module import (
    UNREAL_HOST_MODULES,
    ConditionalRule,
    HostModule,
    ModuleDescriptor,
    host_modules,
)
from modgraph.core.resolver import BuildPlan, Resolver
from modgraph.core.rules import compile_predicate
from modgraph.util.source_location import SourceLocation

logger = logging.getLogger(__name__)

MANIFEST_SUFFIX = ".module.toml"
PROJECT_FILE = "modgraph.toml"

# Keys shared by module tables and rule tables
_DELTA_KEYS = (
    "public_dependencies",
    "private_dependencies",
    "public_include_paths",
    "private_include_paths",
    "public_definitions",
    "private_definitions",
)
_MODULE_LIST_KEYS = (*_DELTA_KEYS, "additional_libraries", "runtime_dependencies")
_MODULE_KEYS = frozenset({"name", "type", "pch", "flags", "rules", *_MODULE_LIST_KEYS})
_RULE_KEYS = frozenset({"when", *_DELTA_KEYS})


def read_toml(path: Path) -> dict[str, Any]:
    """Read a TOML file, converting failures into ManifestError."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except OSError as e:
        raise ManifestError(f"cannot read manifest: {e.strerror}", str(path)) from e
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"invalid TOML: {e}", str(path)) from e


def _string_list(table: dict[str, Any], key: str, where: str) -> list[str]:
    value = table.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ManifestError(f"'{key}' must be a list of strings", where)
    return value


def _check_keys(
    table: dict[str, Any], allowed: frozenset[str], what: str, where: str
) -> None:
    unknown = sorted(set(table) - allowed)
    if unknown:
        raise ManifestError(f"unknown {what} key(s): {', '.join(unknown)}", where)


def _parse_rule(table: Any, where: str) -> ConditionalRule:
    if not isinstance(table, dict):
        raise ManifestError("each entry of 'rules' must be a table", where)
    _check_keys(table, _RULE_KEYS, "rule", where)
    when = table.get("when")
    if not isinstance(when, str):
        raise ManifestError("rule needs a 'when' expression string", where)
    try:
        predicate = compile_predicate(when)
        return ConditionalRule(
            predicate,
            expression=when,
            **{key: _string_list(table, key, where) for key in _DELTA_KEYS},
        )
    except ManifestError as e:
        raise ManifestError(e.message, where) from e
    except ValueError as e:
        raise ManifestError(str(e), where) from e


def parse_module(data: dict[str, Any], path: Path) -> ModuleDescriptor:
    """Build a ModuleDescriptor from a parsed manifest.

    Args:
        data: Parsed TOML document.
        path: Manifest path (for module_dir and error messages).

    Returns:
        The descriptor.

    Raises:
        ManifestError: If the manifest is malformed.
    """
    where = str(path)
    table = data.get("module")
    if not isinstance(table, dict):
        raise ManifestError("missing [module] table", where)
    _check_keys(table, _MODULE_KEYS, "module", where)

    name = table.get("name")
    if not isinstance(name, str) or not name:
        raise ManifestError("module needs a non-empty 'name'", where)

    rules = table.get("rules", [])
    if not isinstance(rules, list):
        raise ManifestError("'rules' must be an array of tables", where)

    try:
        return ModuleDescriptor(
            name,
            module_type=table.get("type", "Runtime"),
            pch=table.get("pch", "Default"),
            flags=frozenset(_string_list(table, "flags", where)),
            conditional_rules=tuple(_parse_rule(rule, where) for rule in rules),
            module_dir=path.parent,
            defined_at=SourceLocation(where),
            **{key: _string_list(table, key, where) for key in _MODULE_LIST_KEYS},
        )
    except ValueError as e:
        raise ManifestError(str(e), where) from e


def load_module_manifest(path: Path | str) -> ModuleDescriptor:
    """Load one ``*.module.toml`` file."""
    path = Path(path)
    descriptor = parse_module(read_toml(path), path)
    logger.debug("Loaded module %s from %s", descriptor.name, path)
    return descriptor


def find_manifests(directories: list[Path]) -> list[Path]:
    """Find module manifests under the given directories, sorted by path."""
    found: list[Path] = []
    for directory in directories:
        if not directory.is_dir():
            raise ManifestError("manifest directory not found", str(directory))
        found.extend(directory.rglob(f"*{MANIFEST_SUFFIX}"))
    return sorted(set(found))


def load_manifests(paths: list[Path]) -> list[ModuleDescriptor]:
    """Load several manifests, rejecting duplicate module names.

    Raises:
        DuplicateModuleName: If two manifests declare the same name.
        ManifestError: If a manifest is malformed.
    """
    descriptors = [load_module_manifest(p) for p in paths]
    check_unique_names(descriptors)
    return descriptors


@dataclass
class ProjectConfig:
    """A project file and everything it points to.

    Attributes:
        name: Project name.
        root_dir: Directory containing the project file.
        manifest_dirs: Directories scanned for module manifests.
        hosts: Host-provided leaf modules.
        context: Default build target context.
    """

    name: str
    root_dir: Path
    manifest_dirs: list[Path] = field(default_factory=list)
    hosts: tuple[HostModule, ...] = ()
    context: BuildTargetContext = field(default_factory=BuildTargetContext)

    def manifest_paths(self) -> list[Path]:
        return find_manifests(self.manifest_dirs)

    def descriptors(self) -> list[ModuleDescriptor]:
        """Load every module manifest of the project."""
        return load_manifests(self.manifest_paths())

    def variables(self) -> dict[str, str]:
        """Project-wide $(Variable) values."""
        return {"ProjectDir": self.root_dir.as_posix()}

    def resolver(
        self,
        context: BuildTargetContext | None = None,
        **kwargs: Any,
    ) -> Resolver:
        """Create a Resolver for this project.

        Args:
            context: Overrides the project's default context.
            **kwargs: Passed to Resolver (jobs, check_artifacts).
        """
        return Resolver(
            context or self.context,
            hosts=self.hosts,
            variables=self.variables(),
            **kwargs,
        )

    def resolve(
        self, context: BuildTargetContext | None = None, **kwargs: Any
    ) -> BuildPlan:
        """Load all manifests and resolve them."""
        return self.resolver(context, **kwargs).resolve(self.descriptors())


def _parse_hosts(table: Any, where: str) -> tuple[HostModule, ...]:
    if not isinstance(table, dict):
        raise ManifestError("[host] must be a table", where)
    _check_keys(table, frozenset({"runtime", "editor", "use_defaults"}), "host", where)
    use_defaults = table.get("use_defaults", True)
    if not isinstance(use_defaults, bool):
        raise ManifestError("'use_defaults' must be a boolean", where)
    declared = host_modules(
        _string_list(table, "runtime", where), _string_list(table, "editor", where)
    )
    declared = tuple(
        HostModule(h.name, h.module_type, defined_at=where) for h in declared
    )
    if not use_defaults:
        return declared
    names = {h.name for h in declared}
    return tuple(h for h in UNREAL_HOST_MODULES if h.name not in names) + declared


def _parse_context(table: Any, where: str) -> BuildTargetContext:
    if not isinstance(table, dict):
        raise ManifestError("[context] must be a table", where)
    _check_keys(
        table,
        frozenset({"platform", "editor", "configuration", "toggles"}),
        "context",
        where,
    )
    defaults = BuildTargetContext()
    platform = table.get("platform", defaults.platform)
    editor = table.get("editor", defaults.editor)
    configuration = table.get("configuration", defaults.configuration)
    toggles = table.get("toggles", {})
    if not isinstance(platform, str) or not isinstance(configuration, str):
        raise ManifestError("'platform' and 'configuration' must be strings", where)
    if not isinstance(editor, bool):
        raise ManifestError("'editor' must be a boolean", where)
    if not isinstance(toggles, dict):
        raise ManifestError("[context.toggles] must be a table", where)
    return BuildTargetContext(platform, editor, configuration, toggles)


def load_project(path: Path | str) -> ProjectConfig:
    """Load a project file.

    Args:
        path: Path to ``modgraph.toml`` or to the directory containing it.

    Returns:
        The project configuration.

    Raises:
        ManifestError: If the file is missing or malformed.
    """
    path = Path(path)
    if path.is_dir():
        path = path / PROJECT_FILE
    where = str(path)
    data = read_toml(path)
    _check_keys(data, frozenset({"project", "host", "context"}), "top-level", where)

    project = data.get("project", {})
    if not isinstance(project, dict):
        raise ManifestError("[project] must be a table", where)
    _check_keys(project, frozenset({"name", "manifests"}), "project", where)
    root_dir = path.parent
    name = project.get("name", root_dir.name)
    if not isinstance(name, str):
        raise ManifestError("project 'name' must be a string", where)
    manifest_dirs = [
        root_dir / d for d in _string_list(project, "manifests", where) or ["."]
    ]

    config = ProjectConfig(
        name=name,
        root_dir=root_dir,
        manifest_dirs=manifest_dirs,
        hosts=_parse_hosts(data.get("host", {}), where),
        context=_parse_context(data.get("context", {}), where),
    )
    logger.info(
        "Loaded project %s (%d host module(s))", config.name, len(config.hosts)
    )
    return config
