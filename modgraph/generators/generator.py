# SPDX-License-Identifier: MIT
"""Generator protocol for build plan output.

Generators take a resolved BuildPlan and write it in some format
(JSON for downstream build drivers, Mermaid for documentation).
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from modgraph.core.resolver import BuildPlan


@runtime_checkable
class Generator(Protocol):
    """Protocol for plan generators.

    A Generator takes a resolved BuildPlan and writes files to the
    output directory.
    """

    @property
    def name(self) -> str:
        """Generator name (e.g., 'build_plan', 'mermaid')."""
        ...

    def generate(self, plan: BuildPlan, output_dir: Path) -> Path:
        """Write output for a plan.

        Args:
            plan: The resolved build plan.
            output_dir: Directory to write output files to.

        Returns:
            Path of the written file.
        """
        ...


class BaseGenerator:
    """Base class for generators with common functionality."""

    def __init__(self, name: str, output_filename: str) -> None:
        """Initialize a generator.

        Args:
            name: Generator name.
            output_filename: Name of the file written into output_dir.
        """
        self._name = name
        self._output_filename = output_filename

    @property
    def name(self) -> str:
        return self._name

    @property
    def output_filename(self) -> str:
        return self._output_filename

    def render(self, plan: BuildPlan) -> str:
        """Return the generated text. Subclasses must implement."""
        raise NotImplementedError

    def generate(self, plan: BuildPlan, output_dir: Path) -> Path:
        """Render the plan and write it to output_dir."""
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / self._output_filename
        output_file.write_text(self.render(plan), encoding="utf-8")
        return output_file

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"
