# SPDX-License-Identifier: MIT
"""Test runner for example projects.

Each example under examples/ is a self-contained project that serves as
both a test and documentation for users:

- 01_python_api: modules declared from a Python script
- 02_niftools: a manifest project, resolved through load_project()
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from modgraph import BuildTargetContext, Definition, load_project
from modgraph.core.errors import DuplicateModuleName, MissingArtifact
from modgraph.core.libraries import RuntimeArtifact
from modgraph.manifest.loader import find_manifests, load_manifests

EXAMPLES_DIR = Path(__file__).resolve().parent.parent / "examples"
NIFTOOLS_DIR = EXAMPLES_DIR / "02_niftools"


@pytest.fixture
def niftools():
    return load_project(NIFTOOLS_DIR)


class TestNiftoolsProject:
    """Tests for the 02_niftools example project."""

    def test_project(self, niftools):
        """Test the project file and manifests load."""
        assert niftools.name == "NifTest"
        assert niftools.context == BuildTargetContext()
        assert "GameplayTags" in {h.name for h in niftools.hosts}
        names = {d.name for d in niftools.descriptors()}
        assert names == {"ExamplePlugin", "Niflib", "NiflibPlugin", "Nifly", "NifTest"}

    def test_editor_build(self, niftools):
        """Test the editor build plan."""
        plan = niftools.resolve()
        root = NIFTOOLS_DIR.as_posix()

        assert plan.build_order == [
            "ExamplePlugin",
            "Niflib",
            "Nifly",
            "NiflibPlugin",
            "NifTest",
        ]
        assert plan.excluded == ()

        game = plan["NifTest"]
        linked = set(game.link_dependencies)
        assert {"Niflib", "Nifly", "NiflibPlugin", "Persona"} <= linked
        assert "Nifly" in game.dependencies
        assert "UnrealEd" not in game.dependencies
        assert game.definitions == (
            Definition("NIFTEST_DEBUG_DRAW", "1"),
            Definition("NIFLIB_STATIC_LINK", "1"),
        )
        assert game.include_paths == (
            f"{root}/Plugins/Niflib/ThirdParty/niflib/include",
            f"{root}/Plugins/Nifly/Source/Nifly/Public",
            f"{root}/Plugins/NiflibPlugin/Source/NiflibPlugin/inc",
        )
        assert game.libraries == (
            f"{root}/Plugins/Niflib/ThirdParty/niflib/lib/niflib.lib",
            f"{root}/Plugins/NiflibPlugin/Source/NiflibPlugin/lib/niflib_static.lib",
        )
        assert game.runtime_dependencies == (
            RuntimeArtifact(
                f"{root}/Plugins/Niflib/Binaries/Win64/niflib.dll", "Niflib"
            ),
        )

    def test_plugin_sees_editor_modules(self, niftools):
        """Test NiflibPlugin sees its editor dependencies."""
        plugin = niftools.resolve()["NiflibPlugin"]
        assert plugin.module_type == "Editor"
        assert {"UnrealEd", "Persona", "Niflib", "Nifly"} <= set(plugin.dependencies)
        assert plugin.exported == (
            "Core",
            "CoreUObject",
            "Engine",
            "Projects",
            "RenderCore",
            "Nifly",
        )

    def test_runtime_build(self, niftools):
        """Test the Linux runtime build plan."""
        plan = niftools.resolve(BuildTargetContext("Linux", editor=False))
        root = NIFTOOLS_DIR.as_posix()

        assert "NiflibPlugin" not in plan
        assert "NiflibPlugin" in plan.excluded
        assert plan.build_order == ["ExamplePlugin", "Niflib", "Nifly", "NifTest"]

        game = plan["NifTest"]
        assert "Nifly" not in game.dependencies
        assert game.definitions == (Definition("NIFTEST_DEBUG_DRAW", "1"),)
        assert game.link_set.runtime_paths == (
            f"{root}/Plugins/Niflib/Binaries/Linux/niflib.dll",
        )

    def test_shipping_build(self, niftools):
        """Test Shipping drops the debug definitions."""
        context = BuildTargetContext(editor=False, configuration="Shipping")
        assert niftools.resolve(context)["NifTest"].definitions == ()

    def test_parallel_matches_serial(self, niftools):
        """Test parallel resolution matches serial."""
        serial = niftools.resolve()
        parallel = niftools.resolve(jobs=4)
        assert json.dumps(serial.as_dict()) == json.dumps(parallel.as_dict())

    def test_missing_artifacts(self, niftools):
        """Test artifact checks fail for the unbuilt example."""
        with pytest.raises(MissingArtifact):
            niftools.resolve(check_artifacts=True)

    def test_second_niflib_plugin_manifest(self, tmp_path):
        """Test a revised NiflibPlugin manifest next to the original is rejected."""
        revised = tmp_path / "NiflibPlugin.module.toml"
        revised.write_text(
            '[module]\nname = "NiflibPlugin"\ntype = "Editor"\n'
            'public_dependencies = ["Core", "Engine"]\n'
            'private_dependencies = ["UnrealEd", "Niflib"]\n'
        )
        paths = find_manifests([NIFTOOLS_DIR / "Plugins"]) + [revised]
        with pytest.raises(DuplicateModuleName):
            load_manifests(paths)


class TestPythonApiExample:
    """Tests for the 01_python_api example script."""

    def _run(self, tmp_path: Path, **variables: str) -> subprocess.CompletedProcess:
        env = os.environ.copy()
        env.pop("MODGRAPH_VARS", None)
        env.update(BUILD_DIR=str(tmp_path / "build"), **variables)
        return subprocess.run(
            [sys.executable, str(EXAMPLES_DIR / "01_python_api" / "build.py")],
            cwd=tmp_path,
            env=env,
            capture_output=True,
            text=True,
        )

    def test_editor(self, tmp_path):
        """Test the editor run."""
        result = self._run(tmp_path, WITH_EDITOR="1")
        assert result.returncode == 0, result.stderr
        assert "NiflibPlugin: sees" in result.stdout
        assert "deploys Plugins/Niflib/Binaries/Win64/niflib.dll" in result.stdout

        plan = json.loads((tmp_path / "build" / "build_plan.json").read_text())
        assert "UnrealEd" in plan["modules"]["NiflibPlugin"]["dependencies"]
        assert plan["modules"]["NiflibPlugin"]["definitions"] == [
            "NIFLIB_STATIC_LINK=1"
        ]

    def test_runtime(self, tmp_path):
        """Test the runtime run."""
        result = self._run(tmp_path, WITH_EDITOR="0")
        assert result.returncode == 0, result.stderr

        plan = json.loads((tmp_path / "build" / "build_plan.json").read_text())
        assert plan["context"]["editor"] is False
        assert "UnrealEd" not in plan["modules"]["NiflibPlugin"]["dependencies"]
