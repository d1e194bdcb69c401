# SPDX-License-Identifier: MIT
"""Tests for BuildPlanGenerator."""

import json

from modgraph.core.context import BuildTargetContext
from modgraph.core.module import ModuleDescriptor, host_modules
from modgraph.core.resolver import resolve
from modgraph.generators.build_plan import BuildPlanGenerator
from modgraph.generators.generator import BaseGenerator


def _modules():
    return [
        ModuleDescriptor(
            "Niflib",
            public_include_paths=["include"],
            public_dependencies=["Core"],
            additional_libraries=["niflib.lib"],
            runtime_dependencies=["Binaries/$(Platform)/niflib.dll"],
        ),
        ModuleDescriptor(
            "NiflibPlugin",
            public_definitions=["NIFLIB_STATIC_LINK=1"],
            private_dependencies=["Niflib"],
        ),
    ]


def _plan(context=None):
    return resolve(_modules(), context, hosts=host_modules(["Core"]))


class TestBuildPlanGenerator:
    """Tests for BuildPlanGenerator."""

    def test_creation(self):
        """Test generator can be created."""
        gen = BuildPlanGenerator()
        assert gen.name == "build_plan"
        assert gen.output_filename == "build_plan.json"
        assert isinstance(gen, BaseGenerator)
        assert repr(gen) == "BuildPlanGenerator('build_plan')"

    def test_render_is_json(self):
        """Test rendered output is JSON with the expected keys."""
        data = json.loads(BuildPlanGenerator().render(_plan()))
        assert list(data) == ["context", "modules", "excluded"]
        assert list(data["modules"]) == ["Niflib", "NiflibPlugin"]

        plugin = data["modules"]["NiflibPlugin"]
        assert plugin["dependencies"] == ["Core", "Niflib"]
        assert plugin["include_paths"] == ["include"]
        assert plugin["definitions"] == ["NIFLIB_STATIC_LINK=1"]
        assert plugin["libraries"] == ["niflib.lib"]
        assert plugin["runtime_dependencies"] == [
            {"path": "Binaries/Win64/niflib.dll", "declared_by": "Niflib"}
        ]

    def test_render_is_byte_identical(self):
        """Test rendering twice gives identical text."""
        gen = BuildPlanGenerator()
        assert gen.render(_plan()) == gen.render(_plan())

    def test_context_recorded(self):
        """Test the context is written out."""
        context = BuildTargetContext("Linux", False, toggles={"WITH_NIFLY": True})
        data = json.loads(BuildPlanGenerator().render(_plan(context)))
        assert data["context"] == {
            "platform": "Linux",
            "editor": False,
            "configuration": "Development",
            "toggles": {"WITH_NIFLY": True},
        }

    def test_generate(self, tmp_path):
        """Test generate() writes the file."""
        gen = BuildPlanGenerator(output_filename="plan.json")
        output = gen.generate(_plan(), tmp_path / "out")

        assert output == tmp_path / "out" / "plan.json"
        text = output.read_text()
        assert text.endswith("\n")
        assert json.loads(text)["modules"]["Niflib"]["type"] == "Runtime"
