# SPDX-License-Identifier: MIT
"""build_plan.json generator.

Writes the resolved plan as JSON for whatever drives the compiler and
linker. Module order is topological and every list keeps the resolver's
order, so unchanged input always produces byte-identical output.

Format:
    {
      "context": {"platform": "Win64", "editor": true, ...},
      "modules": {
        "Niflib": {
          "type": "Runtime",
          "include_paths": ["..."],
          "libraries": ["..."],
          "runtime_dependencies": [{"path": "...", "declared_by": "Niflib"}],
          ...
        }
      },
      "excluded": []
    }
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from modgraph.generators.generator import BaseGenerator

if TYPE_CHECKING:
    from modgraph.core.resolver import BuildPlan


class BuildPlanGenerator(BaseGenerator):
    """Generator for build_plan.json.

    Example:
        generator = BuildPlanGenerator()
        generator.generate(plan, Path("build"))
        # Creates build/build_plan.json
    """

    def __init__(self, *, output_filename: str = "build_plan.json") -> None:
        super().__init__("build_plan", output_filename)

    def render(self, plan: BuildPlan) -> str:
        return json.dumps(plan.as_dict(), indent=2) + "\n"
