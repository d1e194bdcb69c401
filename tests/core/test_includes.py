# SPDX-License-Identifier: MIT
"""Tests for modgraph.core.includes."""

import pytest

from modgraph.core.errors import ConflictingDefinition
from modgraph.core.graph import DependencyGraph
from modgraph.core.includes import IncludePathResolver
from modgraph.core.module import Definition, ModuleDescriptor, host_modules


def _resolver(*descriptors, hosts=()):
    graph = DependencyGraph.build(descriptors, host_modules(hosts))
    graph.validate()
    return IncludePathResolver(graph)


class TestIncludePaths:
    """Tests for IncludePathResolver.include_paths."""

    def test_own_paths_public_then_private(self):
        """Test own public paths come before private ones."""
        resolver = _resolver(
            ModuleDescriptor(
                "Nifly",
                public_include_paths=["Public"],
                private_include_paths=["Private"],
            )
        )
        assert resolver.include_paths("Nifly") == ("Public", "Private")

    def test_public_paths_of_dependencies(self):
        """Test dependencies contribute their public paths."""
        resolver = _resolver(
            ModuleDescriptor(
                "Nifly",
                public_include_paths=["nifly/Public"],
                private_include_paths=["nifly/Private"],
            ),
            ModuleDescriptor(
                "Plugin",
                public_include_paths=["plugin/inc"],
                public_dependencies=["Nifly"],
            ),
        )
        assert resolver.include_paths("Plugin") == ("plugin/inc", "nifly/Public")

    def test_private_edge_paths_visible_but_not_reexported(self):
        """Test a private edge's paths stay with the module."""
        resolver = _resolver(
            ModuleDescriptor("C", public_include_paths=["c"]),
            ModuleDescriptor(
                "B", public_include_paths=["b"], private_dependencies=["C"]
            ),
            ModuleDescriptor("A", public_dependencies=["B"]),
        )
        assert resolver.include_paths("B") == ("b", "c")
        assert resolver.include_paths("A") == ("b",)

    def test_public_chain_propagates(self):
        """Test paths propagate along public edges."""
        resolver = _resolver(
            ModuleDescriptor("C", public_include_paths=["c"]),
            ModuleDescriptor(
                "B", public_include_paths=["b"], public_dependencies=["C"]
            ),
            ModuleDescriptor("A", private_dependencies=["B"]),
        )
        assert resolver.include_paths("A") == ("c", "b")

    def test_duplicates_removed(self):
        """Test repeated paths are listed once."""
        resolver = _resolver(
            ModuleDescriptor("C", public_include_paths=["shared"]),
            ModuleDescriptor(
                "A", public_include_paths=["shared"], private_dependencies=["C"]
            ),
        )
        assert resolver.include_paths("A") == ("shared",)

    def test_host_module_has_no_paths(self):
        """Test host modules have no include paths."""
        resolver = _resolver(
            ModuleDescriptor("A", public_dependencies=["Core"]), hosts=["Core"]
        )
        assert resolver.include_paths("Core") == ()
        assert resolver.include_paths("A") == ()


class TestDefinitions:
    """Tests for IncludePathResolver.definitions."""

    def test_own_and_visible(self):
        """Test own and visible public definitions."""
        resolver = _resolver(
            ModuleDescriptor(
                "Plugin",
                public_definitions=["NIFLIB_STATIC_LINK=1"],
                private_definitions=["PLUGIN_INTERNAL"],
            ),
            ModuleDescriptor("Game", private_dependencies=["Plugin"]),
        )
        assert resolver.definitions("Plugin") == (
            Definition("NIFLIB_STATIC_LINK", "1"),
            Definition("PLUGIN_INTERNAL"),
        )
        assert resolver.definitions("Game") == (Definition("NIFLIB_STATIC_LINK", "1"),)

    def test_same_definition_from_two_modules(self):
        """Test an identical definition from two modules is kept once."""
        resolver = _resolver(
            ModuleDescriptor("B", public_definitions=["X=1"]),
            ModuleDescriptor("C", public_definitions=["X=1"]),
            ModuleDescriptor("A", private_dependencies=["B", "C"]),
        )
        assert resolver.definitions("A") == (Definition("X", "1"),)

    def test_conflict_names_sources(self):
        """Test a conflict names the contributing modules."""
        resolver = _resolver(
            ModuleDescriptor("B", public_definitions=["MODE=1"]),
            ModuleDescriptor("C", public_definitions=["MODE=2"]),
            ModuleDescriptor("A", private_dependencies=["B", "C"]),
        )
        with pytest.raises(ConflictingDefinition) as exc_info:
            resolver.definitions("A")
        err = exc_info.value
        assert err.module == "A"
        assert err.symbol == "MODE"
        assert err.values == ["MODE=1 (from B)", "MODE=2 (from C)"]

    def test_conflict_with_own_definition(self):
        """Test a dependency conflicting with the module itself."""
        resolver = _resolver(
            ModuleDescriptor("B", public_definitions=["MODE=1"]),
            ModuleDescriptor(
                "A", private_definitions=["MODE=2"], private_dependencies=["B"]
            ),
        )
        with pytest.raises(ConflictingDefinition):
            resolver.definitions("A")

    def test_private_definitions_do_not_leak(self):
        """Test private definitions stay with their module."""
        resolver = _resolver(
            ModuleDescriptor("B", private_definitions=["MODE=1"]),
            ModuleDescriptor(
                "A", private_definitions=["MODE=2"], private_dependencies=["B"]
            ),
        )
        assert resolver.definitions("A") == (Definition("MODE", "2"),)
