# SPDX-License-Identifier: MIT
"""Tests for MermaidGenerator."""

from modgraph.core.context import BuildTargetContext
from modgraph.core.module import ConditionalRule, ModuleDescriptor, host_modules
from modgraph.core.resolver import resolve
from modgraph.generators.generator import Generator
from modgraph.generators.mermaid import MermaidGenerator


def _plan(context=None):
    return resolve(
        [
            ModuleDescriptor("Nifly", public_dependencies=["Core"]),
            ModuleDescriptor(
                "NiflibPlugin",
                module_type="Editor",
                public_dependencies=["Nifly"],
                conditional_rules=[
                    ConditionalRule(
                        lambda ctx: ctx.editor, private_dependencies=["UnrealEd"]
                    )
                ],
            ),
        ],
        context,
        hosts=host_modules(["Core"], ["UnrealEd"]),
    )


class TestMermaidGeneratorBasic:
    """Basic tests for MermaidGenerator."""

    def test_generator_creation(self):
        """Test generator can be created."""
        gen = MermaidGenerator()
        assert gen.name == "mermaid"
        assert gen.output_filename == "modules.mmd"
        assert isinstance(gen, Generator)

    def test_generator_with_options(self):
        """Test generator accepts options."""
        gen = MermaidGenerator(
            show_hosts=False,
            direction="TB",
            output_filename="graph.mmd",
        )
        assert gen._show_hosts is False
        assert gen._direction == "TB"
        assert gen._output_filename == "graph.mmd"


class TestMermaidGeneratorRender:
    """Tests for module graph rendering."""

    def test_single_module(self):
        """Test a single module and its host."""
        plan = resolve(
            [ModuleDescriptor("Nifly", public_dependencies=["Core"])],
            hosts=host_modules(["Core"]),
        )
        assert MermaidGenerator().render(plan) == (
            "---\n"
            "title: Win64 editor modules\n"
            "---\n"
            "flowchart LR\n"
            "  Nifly[Nifly]\n"
            "  Core(Core)\n"
            "\n"
            "  Core --> Nifly\n"
        )

    def test_empty_plan(self):
        """Test an empty plan still renders."""
        output = MermaidGenerator().render(resolve([]))
        assert "flowchart LR" in output
        assert "empty[No modules]" in output

    def test_editor_module_shape(self):
        """Test Editor modules use the hexagon shape."""
        output = MermaidGenerator().render(_plan())
        assert "NiflibPlugin{{NiflibPlugin}}" in output
        assert "Nifly[Nifly]" in output

    def test_public_and_private_edges(self):
        """Test public and private edge styles."""
        output = MermaidGenerator().render(_plan())
        assert "Nifly --> NiflibPlugin" in output
        assert "UnrealEd -.-> NiflibPlugin" in output

    def test_runtime_title_and_exclusion(self):
        """Test runtime title and excluded modules."""
        output = MermaidGenerator().render(_plan(BuildTargetContext("Linux", False)))
        assert "title: Linux runtime modules" in output
        assert "NiflibPlugin" not in output
        assert "UnrealEd" not in output

    def test_hide_hosts(self):
        """Test host modules can be hidden."""
        output = MermaidGenerator(show_hosts=False).render(_plan())
        assert "Core(Core)" not in output
        assert "Core --> Nifly" not in output
        assert "Nifly --> NiflibPlugin" in output

    def test_direction(self):
        """Test the flowchart direction option."""
        output = MermaidGenerator(direction="TB").render(_plan())
        assert "flowchart TB" in output

    def test_sanitize_id(self):
        """Test node IDs are sanitized."""
        gen = MermaidGenerator()
        assert gen._sanitize_id("My.Module-2") == "My_Module_2"
        assert gen._sanitize_id("3D") == "n3D"


class TestMermaidGeneratorOutput:
    """Tests for writing Mermaid files."""

    def test_generate_writes_file(self, tmp_path):
        """Test generate() writes modules.mmd."""
        gen = MermaidGenerator()
        output = gen.generate(_plan(), tmp_path / "build")

        assert output == tmp_path / "build" / "modules.mmd"
        assert output.read_text().startswith("---\ntitle: Win64 editor modules")
