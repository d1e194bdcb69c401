# SPDX-License-Identifier: MIT
"""
modgraph: module manifest resolution for native-library plugins.

modgraph reads module build manifests (include paths, definitions,
libraries, runtime files and public/private dependencies), evaluates
editor/runtime conditional rules against a build target context, and
produces a validated, deterministic build plan for every module.
"""

from __future__ import annotations

import json
import os

from modgraph.core.context import BuildTargetContext
from modgraph.core.errors import ConfigurationError, ModgraphError
from modgraph.core.module import (
    UNREAL_HOST_MODULES,
    ConditionalRule,
    Definition,
    HostModule,
    ModuleDescriptor,
)
from modgraph.core.resolver import BuildPlan, ModulePlan, Resolver, resolve
from modgraph.core.rules import compile_predicate
from modgraph.manifest.loader import load_project

__version__ = "0.1.0"


def get_vars() -> dict[str, str]:
    """Get build variables passed through the MODGRAPH_VARS environment variable.

    MODGRAPH_VARS holds a JSON object, e.g. ``{"PLATFORM": "Linux"}``.
    Invalid JSON is treated as no variables.

    Returns:
        The variables (empty if unset).
    """
    raw = os.environ.get("MODGRAPH_VARS")
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    if not isinstance(data, dict):
        return {}
    return {str(k): str(v) for k, v in data.items()}


def get_var(name: str, default: str | None = None) -> str | None:
    """Get a build variable from MODGRAPH_VARS or the environment.

    Precedence (highest to lowest):
        1. MODGRAPH_VARS (set by the modgraph CLI or by the caller)
        2. Environment variable of the same name

    Args:
        name: Variable name.
        default: Default value if not set.

    Returns:
        The variable value, or default if not set.
    """
    variables = get_vars()
    if name in variables:
        return variables[name]
    return os.environ.get(name, default)


# Public API exports
__all__ = [
    "__version__",
    "get_var",
    "get_vars",
    # Data model
    "BuildTargetContext",
    "ConditionalRule",
    "Definition",
    "HostModule",
    "ModuleDescriptor",
    "UNREAL_HOST_MODULES",
    "compile_predicate",
    # Resolution
    "BuildPlan",
    "ModulePlan",
    "Resolver",
    "resolve",
    "load_project",
    # Errors
    "ConfigurationError",
    "ModgraphError",
]
