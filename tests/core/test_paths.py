# SPDX-License-Identifier: MIT
"""Tests for modgraph.core.paths."""

from pathlib import Path

import pytest

from modgraph.core.errors import UndefinedVariable
from modgraph.core.module import ModuleDescriptor
from modgraph.core.paths import expand_descriptor, expand_path


class TestExpandPath:
    """Tests for expand_path."""

    def test_no_variables(self):
        """Test a plain path is unchanged."""
        assert expand_path("Public", {}, module="M") == "Public"

    def test_variables(self):
        """Test $(Name) references are substituted."""
        result = expand_path(
            "Binaries/$(Platform)/$(Configuration)/niflib.dll",
            {"Platform": "Win64", "Configuration": "Shipping"},
            module="Niflib",
        )
        assert result == "Binaries/Win64/Shipping/niflib.dll"

    def test_relative_anchored_at_module_dir(self):
        """Test relative paths resolve against the module directory."""
        result = expand_path(
            "../../ThirdParty/niflib/include",
            {},
            module="Niflib",
            module_dir=Path("/proj/Plugins/Niflib/Source/Niflib"),
        )
        assert result == "/proj/Plugins/Niflib/ThirdParty/niflib/include"

    def test_absolute_not_anchored(self):
        """Test absolute paths are not anchored."""
        result = expand_path(
            "$(ProjectDir)/Binaries/niflib.dll",
            {"ProjectDir": "/proj"},
            module="Niflib",
            module_dir=Path("/elsewhere"),
        )
        assert result == "/proj/Binaries/niflib.dll"

    def test_normalized(self):
        """Test dot segments are collapsed."""
        assert expand_path("a/./b/../c", {}, module="M") == "a/c"

    def test_undefined_variable(self):
        """Test an unknown variable raises UndefinedVariable."""
        with pytest.raises(UndefinedVariable) as exc_info:
            expand_path("$(PluginDir)/lib", {}, module="Niflib")
        assert exc_info.value.variable == "PluginDir"
        assert exc_info.value.module == "Niflib"

    def test_unterminated_reference_left_alone(self):
        """Test an unclosed reference is kept as text."""
        assert expand_path("$(Platform", {}, module="M") == "$(Platform"


class TestExpandDescriptor:
    """Tests for expand_descriptor."""

    def test_expands_all_path_fields(self):
        """Test every path field is expanded."""
        m = ModuleDescriptor(
            "Niflib",
            public_include_paths=["$(ModuleDir)/Public"],
            private_include_paths=["Private"],
            additional_libraries=["lib/$(Platform)/niflib.lib"],
            runtime_dependencies=["$(ProjectDir)/Binaries/niflib.dll"],
            module_dir=Path("/proj/Niflib"),
        )
        result = expand_descriptor(m, {"Platform": "Linux", "ProjectDir": "/proj"})

        assert result.public_include_paths == ("/proj/Niflib/Public",)
        assert result.private_include_paths == ("/proj/Niflib/Private",)
        assert result.additional_libraries == ("/proj/Niflib/lib/Linux/niflib.lib",)
        assert result.runtime_dependencies == ("/proj/Binaries/niflib.dll",)
        assert result.name == "Niflib"

    def test_without_module_dir(self):
        """Test relative paths stay relative without module_dir."""
        m = ModuleDescriptor("M", public_include_paths=["inc"])
        assert expand_descriptor(m, {}).public_include_paths == ("inc",)

    def test_module_dir_unavailable_without_module_dir(self):
        """Test $(ModuleDir) needs a module directory."""
        m = ModuleDescriptor("M", public_include_paths=["$(ModuleDir)/inc"])
        with pytest.raises(UndefinedVariable):
            expand_descriptor(m, {})

    def test_expanded_duplicates_collapse(self):
        """Test paths equal after expansion are kept once."""
        m = ModuleDescriptor(
            "M",
            public_include_paths=["inc", "./inc"],
            module_dir=Path("/proj/M"),
        )
        assert expand_descriptor(m, {}).public_include_paths == ("/proj/M/inc",)
