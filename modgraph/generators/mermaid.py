# SPDX-License-Identifier: MIT
"""Mermaid diagram generator for module dependency visualization.

Generates Mermaid flowchart syntax showing the resolved module graph.
Output can be rendered in GitHub markdown, documentation tools,
or the Mermaid live editor (https://mermaid.live).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from modgraph.generators.generator import BaseGenerator

if TYPE_CHECKING:
    from modgraph.core.resolver import BuildPlan, ModulePlan


class MermaidGenerator(BaseGenerator):
    """Generator that produces Mermaid flowchart diagrams.

    Public dependencies are drawn as solid arrows, private ones as dotted
    arrows. Host modules are drawn with rounded corners.

    Example output:
        ---
        title: Win64 editor modules
        ---
        flowchart LR
          Nifly[Nifly]
          NiflibPlugin{{NiflibPlugin}}
          Core(Core)
          Nifly --> NiflibPlugin
          Core --> Nifly

    Usage:
        generator = MermaidGenerator()
        generator.generate(plan, Path("build"))
        # Creates build/modules.mmd
    """

    def __init__(
        self,
        *,
        show_hosts: bool = True,
        direction: str = "LR",
        output_filename: str = "modules.mmd",
    ) -> None:
        """Initialize the Mermaid generator.

        Args:
            show_hosts: If False, host modules and their edges are omitted.
            direction: Graph direction - "LR" (left-right), "TB" (top-bottom),
                      "RL" (right-left), or "BT" (bottom-top).
            output_filename: Name of the output file.
        """
        super().__init__("mermaid", output_filename)
        self._show_hosts = show_hosts
        self._direction = direction

    def render(self, plan: BuildPlan) -> str:
        kind = "editor" if plan.context.editor else "runtime"
        lines = [
            "---",
            f"title: {plan.context.platform} {kind} modules",
            "---",
            f"flowchart {self._direction}",
        ]

        if not plan.modules:
            lines.append("  empty[No modules]")
            return "\n".join(lines) + "\n"

        for module in plan:
            node_id = self._sanitize_id(module.name)
            opening, closing = self._get_module_shape(module)
            lines.append(f"  {node_id}{opening}{module.name}{closing}")

        if self._show_hosts:
            hosts = sorted(
                {e.target for e in plan.edges if e.target not in plan.modules}
            )
            for host in hosts:
                lines.append(f"  {self._sanitize_id(host)}({host})")

        lines.append("")

        # Dependencies point toward their consumers
        for edge in plan.edges:
            if edge.target not in plan.modules and not self._show_hosts:
                continue
            arrow = "-->" if edge.public else "-.->"
            lines.append(
                f"  {self._sanitize_id(edge.target)} {arrow} "
                f"{self._sanitize_id(edge.source)}"
            )

        return "\n".join(lines) + "\n"

    def _get_module_shape(self, module: ModulePlan) -> tuple[str, str]:
        """Get Mermaid shape brackets for a module type.

        Returns:
            Tuple of (opening, closing) brackets.
        """
        if module.module_type == "Editor":
            return ("{{", "}}")  # Hexagon for editor-only modules
        return ("[", "]")

    def _sanitize_id(self, name: str) -> str:
        """Sanitize a name for use as a Mermaid node ID."""
        result = name.replace("/", "_").replace("\\", "_")
        result = result.replace(".", "_").replace("-", "_")
        result = result.replace(" ", "_").replace(":", "_")
        # Ensure it starts with a letter
        if result and result[0].isdigit():
            result = "n" + result
        return result
