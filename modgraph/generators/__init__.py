# SPDX-License-Identifier: MIT
"""Output generators for modgraph."""

from modgraph.generators.build_plan import BuildPlanGenerator
from modgraph.generators.generator import BaseGenerator, Generator
from modgraph.generators.mermaid import MermaidGenerator

__all__ = [
    "BaseGenerator",
    "BuildPlanGenerator",
    "Generator",
    "MermaidGenerator",
]
