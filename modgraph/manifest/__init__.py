# SPDX-License-Identifier: MIT
"""Project and module manifest loading."""

from modgraph.manifest.loader import (
    MANIFEST_SUFFIX,
    PROJECT_FILE,
    ProjectConfig,
    find_manifests,
    load_manifests,
    load_module_manifest,
    load_project,
)

__all__ = [
    "MANIFEST_SUFFIX",
    "PROJECT_FILE",
    "ProjectConfig",
    "find_manifests",
    "load_manifests",
    "load_module_manifest",
    "load_project",
]
