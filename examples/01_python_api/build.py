#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""Example declaring modules in Python instead of TOML manifests.

This example shows:
- Declaring ModuleDescriptors with public and private dependencies
- An editor-only conditional rule
- Resolving the same modules for an editor and a runtime build

Variables:
    BUILD_DIR   - Output directory (default: build)
    WITH_EDITOR - Include editor tooling: 0, 1 (default: 1)
"""

from pathlib import Path

from modgraph import (
    UNREAL_HOST_MODULES,
    BuildTargetContext,
    ConditionalRule,
    ModuleDescriptor,
    get_var,
    resolve,
)
from modgraph.generators import BuildPlanGenerator

# =============================================================================
# Modules
# =============================================================================

build_dir = Path(get_var("BUILD_DIR", "build"))
editor = get_var("WITH_EDITOR", "1") == "1"

nifly = ModuleDescriptor(
    "Nifly",
    pch="UseExplicitOrSharedPCHs",
    flags={"enableExceptions", "enableRTTI"},
    public_include_paths=["Plugins/Nifly/Source/Nifly/Public"],
    private_include_paths=["Plugins/Nifly/Source/Nifly/Private"],
    public_dependencies=["Core"],
)

niflib = ModuleDescriptor(
    "Niflib",
    flags={"enableExceptions", "enableRTTI"},
    public_include_paths=["Plugins/Niflib/ThirdParty/niflib/include"],
    public_dependencies=["Core"],
    additional_libraries=["Plugins/Niflib/ThirdParty/niflib/lib/niflib.lib"],
    runtime_dependencies=["Plugins/Niflib/Binaries/$(Platform)/niflib.dll"],
)

plugin = ModuleDescriptor(
    "NiflibPlugin",
    public_dependencies=["Nifly"],
    private_dependencies=["Niflib"],
    public_definitions=["NIFLIB_STATIC_LINK=1"],
    conditional_rules=[
        ConditionalRule(
            lambda ctx: ctx.editor,
            private_dependencies=["UnrealEd", "Persona"],
        ),
    ],
)

# =============================================================================
# Resolve
# =============================================================================

context = BuildTargetContext(editor=editor)
plan = resolve([nifly, niflib, plugin], context, hosts=UNREAL_HOST_MODULES)

for module in plan:
    print(f"{module.name}: sees {', '.join(module.dependencies) or '-'}")
    for artifact in module.runtime_dependencies:
        print(f"  deploys {artifact.path} (from {artifact.declared_by})")

output = BuildPlanGenerator().generate(plan, build_dir)
print(f"Generated {output}")
