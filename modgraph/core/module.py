# SPDX-License-Identifier: MIT
"""Module descriptors with public/private usage requirements.

A ModuleDescriptor is the immutable record of one module's declared
build configuration. Like CMake usage requirements, every dependency,
include path and definition is either:

- PUBLIC: used by this module AND propagated to every consumer
- PRIVATE: used only when compiling this module

Host modules (engine subsystems such as Core or UnrealEd) are modeled as
HostModule: opaque leaves supplied by the host runtime.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Literal, get_args

from modgraph.util.source_location import SourceLocation, get_caller_location

if TYPE_CHECKING:
    from modgraph.core.context import BuildTargetContext

# Valid module types
ModuleType = Literal[
    "Runtime",
    "Editor",  # Only built when the target includes editor tooling
]

# Precompiled header strategies; opaque to resolution
PCHMode = Literal[
    "Default",
    "None",
    "Shared",
    "Explicit",
    "UseExplicitOrSharedPCHs",
]

# Compiler capability flags
ModuleFlag = Literal["enableExceptions", "enableRTTI"]

MODULE_TYPES: tuple[str, ...] = get_args(ModuleType)
PCH_MODES: tuple[str, ...] = get_args(PCHMode)
MODULE_FLAGS: tuple[str, ...] = get_args(ModuleFlag)

Predicate = Callable[["BuildTargetContext"], bool]


@dataclass(frozen=True)
class Definition:
    """A compile-time symbol definition.

    Attributes:
        name: Symbol name.
        value: Optional value; None means a bare define.
    """

    name: str
    value: str | None = None

    @classmethod
    def parse(cls, text: str | Definition) -> Definition:
        """Parse "NAME" or "NAME=VALUE".

        Examples:
            >>> Definition.parse("NIFLIB_STATIC_LINK=1")
            Definition(name='NIFLIB_STATIC_LINK', value='1')
            >>> Definition.parse("WITH_EDITOR")
            Definition(name='WITH_EDITOR', value=None)
        """
        if isinstance(text, Definition):
            return text
        name, sep, value = text.partition("=")
        name = name.strip()
        if not name:
            raise ValueError(f"invalid definition: {text!r}")
        return cls(name, value if sep else None)

    def __str__(self) -> str:
        if self.value is None:
            return self.name
        return f"{self.name}={self.value}"


def _unique(items: Iterable[str]) -> tuple[str, ...]:
    """De-duplicate while preserving first occurrence."""
    return tuple(dict.fromkeys(items))


def _definitions(items: Iterable[str | Definition]) -> tuple[Definition, ...]:
    return tuple(dict.fromkeys(Definition.parse(d) for d in items))


@dataclass(frozen=True)
class ConditionalRule:
    """A predicate over the build context and the additions it enables.

    When ``when(context)`` is true, the rule's dependencies, include paths
    and definitions are unioned into the module's effective form.

    Attributes:
        when: Pure function of the BuildTargetContext.
        expression: Source text of the predicate, if it came from a manifest.
    """

    when: Predicate
    public_dependencies: tuple[str, ...] = ()
    private_dependencies: tuple[str, ...] = ()
    public_include_paths: tuple[str, ...] = ()
    private_include_paths: tuple[str, ...] = ()
    public_definitions: tuple[Definition, ...] = ()
    private_definitions: tuple[Definition, ...] = ()
    expression: str | None = None

    def __post_init__(self) -> None:
        set_ = object.__setattr__
        set_(self, "public_dependencies", _unique(self.public_dependencies))
        set_(self, "private_dependencies", _unique(self.private_dependencies))
        set_(self, "public_include_paths", _unique(self.public_include_paths))
        set_(self, "private_include_paths", _unique(self.private_include_paths))
        set_(self, "public_definitions", _definitions(self.public_definitions))
        set_(self, "private_definitions", _definitions(self.private_definitions))

    def __repr__(self) -> str:
        label = self.expression or getattr(self.when, "__name__", "<predicate>")
        return f"ConditionalRule({label!r})"


@dataclass(frozen=True)
class ModuleDescriptor:
    """Declared configuration of one module.

    Sequences may be passed as lists; they are normalized to tuples,
    dependency names and paths are de-duplicated keeping first
    occurrence, and definitions given as "NAME=VALUE" strings are parsed.

    Example:
        nifly = ModuleDescriptor(
            "Nifly",
            flags={"enableRTTI", "enableExceptions"},
            public_include_paths=["Public"],
            private_include_paths=["Private"],
            public_dependencies=["Core", "CoreUObject", "Engine"],
        )

    Attributes:
        name: Unique module name; key of the dependency graph.
        module_type: "Runtime" or "Editor".
        pch: Precompiled header strategy, copied verbatim into the plan.
        flags: Compiler capability flags.
        public_include_paths: Include paths propagated to consumers.
        private_include_paths: Include paths for this module only.
        public_dependencies: Module names re-exported to consumers.
        private_dependencies: Module names used by this module only.
        public_definitions: Definitions propagated to consumers.
        private_definitions: Definitions for this module only.
        additional_libraries: Link artifacts.
        runtime_dependencies: Files deployed alongside the build, not linked.
        conditional_rules: Context-dependent additions.
        module_dir: Directory relative paths are anchored to.
        defined_at: Where this descriptor was declared.
    """

    name: str
    module_type: ModuleType = "Runtime"
    pch: PCHMode = "Default"
    flags: frozenset[str] = frozenset()
    public_include_paths: tuple[str, ...] = ()
    private_include_paths: tuple[str, ...] = ()
    public_dependencies: tuple[str, ...] = ()
    private_dependencies: tuple[str, ...] = ()
    public_definitions: tuple[Definition, ...] = ()
    private_definitions: tuple[Definition, ...] = ()
    additional_libraries: tuple[str, ...] = ()
    runtime_dependencies: tuple[str, ...] = ()
    conditional_rules: tuple[ConditionalRule, ...] = ()
    module_dir: Path | None = None
    defined_at: SourceLocation | str | None = field(
        default_factory=get_caller_location, compare=False
    )

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("module name must not be empty")
        if self.module_type not in MODULE_TYPES:
            raise ValueError(
                f"module '{self.name}': invalid type {self.module_type!r} "
                f"(expected one of {', '.join(MODULE_TYPES)})"
            )
        if self.pch not in PCH_MODES:
            raise ValueError(
                f"module '{self.name}': invalid pch mode {self.pch!r} "
                f"(expected one of {', '.join(PCH_MODES)})"
            )
        flags = frozenset(self.flags)
        unknown = sorted(flags.difference(MODULE_FLAGS))
        if unknown:
            raise ValueError(
                f"module '{self.name}': unknown flags {', '.join(unknown)}"
            )

        set_ = object.__setattr__
        set_(self, "flags", flags)
        set_(self, "public_include_paths", _unique(self.public_include_paths))
        set_(self, "private_include_paths", _unique(self.private_include_paths))
        set_(self, "public_dependencies", _unique(self.public_dependencies))
        set_(self, "private_dependencies", _unique(self.private_dependencies))
        set_(self, "public_definitions", _definitions(self.public_definitions))
        set_(self, "private_definitions", _definitions(self.private_definitions))
        set_(self, "additional_libraries", _unique(self.additional_libraries))
        set_(self, "runtime_dependencies", _unique(self.runtime_dependencies))
        set_(self, "conditional_rules", tuple(self.conditional_rules))
        if self.module_dir is not None:
            set_(self, "module_dir", Path(self.module_dir))

    @property
    def is_editor(self) -> bool:
        return self.module_type == "Editor"

    @property
    def dependencies(self) -> tuple[str, ...]:
        """All direct dependencies, public first."""
        return _unique(self.public_dependencies + self.private_dependencies)

    def __repr__(self) -> str:
        deps = ", ".join(self.dependencies)
        return f"ModuleDescriptor({self.name!r}, deps=[{deps}])"


@dataclass(frozen=True)
class HostModule:
    """A module supplied by the host runtime.

    Host modules are opaque, always-resolvable leaves: the resolver does
    not know their paths, dependencies or artifacts. Only their name and
    type matter.

    Attributes:
        name: Module name (e.g. "Core", "UnrealEd").
        module_type: "Runtime" or "Editor".
    """

    name: str
    module_type: ModuleType = "Runtime"
    defined_at: SourceLocation | str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.module_type not in MODULE_TYPES:
            raise ValueError(
                f"host module '{self.name}': invalid type {self.module_type!r}"
            )

    @property
    def is_editor(self) -> bool:
        return self.module_type == "Editor"

    def __repr__(self) -> str:
        return f"HostModule({self.name!r}, {self.module_type})"


def host_modules(
    runtime: Iterable[str] = (), editor: Iterable[str] = ()
) -> tuple[HostModule, ...]:
    """Build HostModule records from two lists of names."""
    return tuple(HostModule(name) for name in runtime) + tuple(
        HostModule(name, "Editor") for name in editor
    )


# Engine modules the plugins in this repository build against.
UNREAL_HOST_MODULES: tuple[HostModule, ...] = host_modules(
    runtime=[
        "Core",
        "CoreUObject",
        "Engine",
        "RenderCore",
        "RHI",
        "Projects",
        "Slate",
        "SlateCore",
        "InputCore",
        "AssetRegistry",
    ],
    editor=[
        "UnrealEd",
        "AssetTools",
        "ContentBrowser",
        "EditorFramework",
        "MeshUtilities",
        "SkeletalMeshUtilitiesCommon",
        "Persona",
    ],
)
