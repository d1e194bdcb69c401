# SPDX-License-Identifier: MIT
"""Command-line interface for modgraph."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from modgraph.core.context import BuildTargetContext
from modgraph.core.errors import ModgraphError
from modgraph.core.resolver import BuildPlan
from modgraph.manifest.loader import PROJECT_FILE, ProjectConfig, load_project

# Set up logging
logger = logging.getLogger("modgraph")


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s: %(name)s: %(message)s"
    elif verbose:
        level = logging.INFO
        fmt = "%(levelname)s: %(message)s"
    else:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=fmt)


def parse_variables(args: list[str]) -> tuple[dict[str, str], list[str]]:
    """Parse KEY=value arguments from a list.

    Args:
        args: List of arguments.

    Returns:
        Tuple of (variables dict, remaining args).
    """
    variables: dict[str, str] = {}
    remaining: list[str] = []

    for arg in args:
        if "=" in arg and not arg.startswith("-"):
            key, _, value = arg.partition("=")
            if key:  # Valid KEY=value
                variables[key] = value
            else:
                remaining.append(arg)
        else:
            remaining.append(arg)

    return variables, remaining


def build_context(
    args: argparse.Namespace, base: BuildTargetContext
) -> BuildTargetContext:
    """Apply command-line options and variables to a project's context.

    Precedence (highest to lowest):
        1. --platform, --editor/--no-editor, --configuration
        2. KEY=value arguments
        3. MODGRAPH_VARS environment variable
        4. The [context] table of the project file
    """
    from modgraph import get_vars

    variables, _ = parse_variables(getattr(args, "extra", []))
    context = base.with_variables({**get_vars(), **variables})

    overrides: dict[str, str] = {}
    if args.platform:
        overrides["PLATFORM"] = args.platform
    if args.configuration:
        overrides["CONFIGURATION"] = args.configuration
    if args.editor is not None:
        overrides["EDITOR"] = "1" if args.editor else "0"
    return context.with_variables(overrides)


def load_and_resolve(args: argparse.Namespace) -> tuple[ProjectConfig, BuildPlan]:
    """Load the project named on the command line and resolve it.

    Raises:
        ModgraphError: If loading or resolution fails.
    """
    project = load_project(Path(args.project))
    context = build_context(args, project.context)
    plan = project.resolve(
        context,
        jobs=args.jobs or 1,
        check_artifacts=args.check_artifacts,
    )
    return project, plan


def cmd_resolve(args: argparse.Namespace) -> int:
    """Resolve the project and write build_plan.json."""
    from modgraph.generators.build_plan import BuildPlanGenerator

    setup_logging(args.verbose, args.debug)
    try:
        _, plan = load_and_resolve(args)
    except ModgraphError as e:
        logger.error("%s", e)
        return 1

    output = BuildPlanGenerator().generate(plan, Path(args.output_dir))
    logger.info("Wrote build plan to %s", output)
    print(f"Resolved {len(plan)} module(s) into {output}")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Resolve the project without writing anything."""
    setup_logging(args.verbose, args.debug)
    try:
        project, plan = load_and_resolve(args)
    except ModgraphError as e:
        logger.error("%s", e)
        return 1

    print(f"{project.name}: {len(plan)} module(s) OK for {plan.context!r}")
    return 0


def cmd_graph(args: argparse.Namespace) -> int:
    """Write the resolved module graph as a Mermaid diagram."""
    from modgraph.generators.mermaid import MermaidGenerator

    setup_logging(args.verbose, args.debug)
    try:
        _, plan = load_and_resolve(args)
    except ModgraphError as e:
        logger.error("%s", e)
        return 1

    generator = MermaidGenerator(
        show_hosts=not args.no_hosts, direction=args.direction
    )
    output = generator.generate(plan, Path(args.output_dir))
    logger.info("Wrote Mermaid graph to %s", output)
    print(f"Generated {output}")
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    """Print modules in build order."""
    setup_logging(args.verbose, args.debug)
    try:
        project, plan = load_and_resolve(args)
    except ModgraphError as e:
        logger.error("%s", e)
        return 1

    print(f"Project: {project.name}")
    print(f"Context: {plan.context!r}")
    print()
    for module in plan:
        print(f"  {module.name} ({module.module_type})")
        if module.dependencies:
            print(f"    sees: {', '.join(module.dependencies)}")
    if plan.excluded:
        print()
        print(f"Excluded editor modules: {', '.join(plan.excluded)}")
    return 0


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add common arguments to a parser."""
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--debug", action="store_true", help="Debug output")
    parser.add_argument(
        "-p",
        "--project",
        default=PROJECT_FILE,
        help=f"Project file or directory (default: {PROJECT_FILE})",
    )
    parser.add_argument("--platform", metavar="NAME", help="Target platform")
    parser.add_argument(
        "--editor",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include editor tooling in the build",
    )
    parser.add_argument(
        "--configuration", metavar="NAME", help="Build configuration (e.g. Shipping)"
    )
    parser.add_argument(
        "-j", "--jobs", type=int, help="Number of worker threads for resolution"
    )
    parser.add_argument(
        "--check-artifacts",
        action="store_true",
        help="Fail if a declared library or runtime file does not exist",
    )
    parser.add_argument(
        "extra",
        nargs="*",
        help="Context variables (KEY=value)",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the modgraph CLI."""
    parser = argparse.ArgumentParser(
        prog="modgraph",
        description="Resolve module build manifests into a build plan.",
        epilog="Run 'modgraph <command> --help' for command-specific help.",
    )
    from modgraph import __version__

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # modgraph resolve
    resolve_parser = subparsers.add_parser(
        "resolve", help="Resolve manifests and write build_plan.json"
    )
    add_common_args(resolve_parser)
    resolve_parser.add_argument(
        "-o", "--output-dir", default="build", help="Output directory (default: build)"
    )
    resolve_parser.set_defaults(func=cmd_resolve)

    # modgraph check
    check_parser = subparsers.add_parser(
        "check", help="Validate manifests without writing output"
    )
    add_common_args(check_parser)
    check_parser.set_defaults(func=cmd_check)

    # modgraph graph
    graph_parser = subparsers.add_parser(
        "graph", help="Write the module graph as a Mermaid diagram"
    )
    add_common_args(graph_parser)
    graph_parser.add_argument(
        "-o", "--output-dir", default="build", help="Output directory (default: build)"
    )
    graph_parser.add_argument(
        "--no-hosts", action="store_true", help="Leave host modules out of the graph"
    )
    graph_parser.add_argument(
        "--direction",
        default="LR",
        choices=["LR", "TB", "RL", "BT"],
        help="Graph direction (default: LR)",
    )
    graph_parser.set_defaults(func=cmd_graph)

    # modgraph info
    info_parser = subparsers.add_parser("info", help="Show modules in build order")
    add_common_args(info_parser)
    info_parser.set_defaults(func=cmd_info)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    # Run the specified command
    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
