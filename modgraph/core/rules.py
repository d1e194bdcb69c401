# SPDX-License-Identifier: MIT
"""Conditional rule evaluation.

Conditional rules add dependencies, include paths or definitions to a
module depending on the build target context (for example editor-only
helpers). Each rule is a pure predicate-to-delta function; the engine
evaluates every rule once per context and unions the contributions of
the rules that fire. Because contributions are set-unioned, the order in
which independent rules are evaluated does not change the result.

Manifest predicates are small Python expressions compiled with the ast
module into a restricted evaluator:

    editor
    not editor and platform == "Win64"
    configuration in ("Debug", "Development")
    WITH_NIFLY or platform != "Linux"
"""

from __future__ import annotations

import ast
import dataclasses
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from modgraph.core.errors import ConflictingDefinition, ManifestError
from modgraph.core.module import Definition, ModuleDescriptor

if TYPE_CHECKING:
    from modgraph.core.context import BuildTargetContext
    from modgraph.core.module import ConditionalRule, Predicate

logger = logging.getLogger(__name__)

_COMPARATORS: dict[type[ast.cmpop], Callable[[Any, Any], bool]] = {
    ast.Eq: lambda a, b: a == b,
    ast.NotEq: lambda a, b: a != b,
    ast.In: lambda a, b: a in b,
    ast.NotIn: lambda a, b: a not in b,
}


def _check_node(node: ast.AST, expression: str) -> None:
    """Reject any syntax outside the predicate subset."""
    if isinstance(node, ast.Expression):
        _check_node(node.body, expression)
    elif isinstance(node, ast.BoolOp):
        for value in node.values:
            _check_node(value, expression)
    elif isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.Not):
        _check_node(node.operand, expression)
    elif isinstance(node, ast.Compare):
        for op in node.ops:
            if type(op) not in _COMPARATORS:
                raise ManifestError(
                    f"unsupported comparison in rule predicate {expression!r}"
                )
        _check_node(node.left, expression)
        for comparator in node.comparators:
            _check_node(comparator, expression)
    elif isinstance(node, (ast.Tuple, ast.List)):
        for elt in node.elts:
            _check_node(elt, expression)
    elif isinstance(node, ast.Name):
        pass
    elif isinstance(node, ast.Constant) and isinstance(
        node.value, (str, int, float, bool)
    ):
        pass
    else:
        raise ManifestError(
            f"unsupported syntax '{type(node).__name__}' "
            f"in rule predicate {expression!r}"
        )


def _evaluate(node: ast.AST, context: BuildTargetContext, expression: str) -> Any:
    if isinstance(node, ast.BoolOp):
        if isinstance(node.op, ast.And):
            return all(_evaluate(v, context, expression) for v in node.values)
        return any(_evaluate(v, context, expression) for v in node.values)
    if isinstance(node, ast.UnaryOp):
        return not _evaluate(node.operand, context, expression)
    if isinstance(node, ast.Compare):
        left = _evaluate(node.left, context, expression)
        for op, comparator in zip(node.ops, node.comparators, strict=True):
            right = _evaluate(comparator, context, expression)
            try:
                holds = _COMPARATORS[type(op)](left, right)
            except TypeError as e:
                raise ManifestError(
                    f"invalid rule predicate {expression!r}: {e}"
                ) from e
            if not holds:
                return False
            left = right
        return True
    if isinstance(node, (ast.Tuple, ast.List)):
        return tuple(_evaluate(elt, context, expression) for elt in node.elts)
    if isinstance(node, ast.Name):
        return context.lookup(node.id)
    if isinstance(node, ast.Constant):
        return node.value
    raise AssertionError(f"unchecked node {type(node).__name__}")


def compile_predicate(expression: str) -> Predicate:
    """Compile a manifest predicate expression.

    Args:
        expression: Expression text, e.g. ``"editor and platform == 'Win64'"``.

    Returns:
        A pure function of the BuildTargetContext.

    Raises:
        ManifestError: If the expression is not valid predicate syntax.
            The returned predicate raises it too when a comparison is
            invalid for the values it sees, e.g. ``platform in 5``.
    """
    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError as e:
        raise ManifestError(f"invalid rule predicate {expression!r}: {e.msg}") from e
    _check_node(tree, expression)
    body = tree.body

    def predicate(context: BuildTargetContext) -> bool:
        return bool(_evaluate(body, context, expression))

    predicate.__name__ = f"when({expression})"
    return predicate


@dataclass(frozen=True)
class RuleDelta:
    """The union of contributions of every rule that fired."""

    public_dependencies: tuple[str, ...] = ()
    private_dependencies: tuple[str, ...] = ()
    public_include_paths: tuple[str, ...] = ()
    private_include_paths: tuple[str, ...] = ()
    public_definitions: tuple[Definition, ...] = ()
    private_definitions: tuple[Definition, ...] = ()

    def __bool__(self) -> bool:
        return any(getattr(self, f.name) for f in dataclasses.fields(self))


def _union(*groups: Iterable[Any]) -> tuple[Any, ...]:
    merged: dict[Any, None] = {}
    for group in groups:
        merged.update(dict.fromkeys(group))
    return tuple(merged)


def check_definitions(module: str, definitions: Iterable[Definition]) -> None:
    """Raise ConflictingDefinition if a symbol appears with two values.

    Args:
        module: Module the definitions apply to (for the error message).
        definitions: Definitions in discovery order.
    """
    seen: dict[str, Definition] = {}
    for definition in definitions:
        previous = seen.setdefault(definition.name, definition)
        if previous != definition:
            raise ConflictingDefinition(
                module, definition.name, [str(previous), str(definition)]
            )


class ConditionalRuleEngine:
    """Evaluates conditional rules against one BuildTargetContext.

    Example:
        engine = ConditionalRuleEngine(BuildTargetContext(editor=False))
        effective = engine.apply(descriptor)

    Attributes:
        context: The context every predicate is evaluated against.
    """

    def __init__(self, context: BuildTargetContext) -> None:
        self.context = context

    def fired_rules(self, descriptor: ModuleDescriptor) -> list[ConditionalRule]:
        """Return the rules of a descriptor whose predicate holds."""
        return [
            rule for rule in descriptor.conditional_rules if rule.when(self.context)
        ]

    def evaluate(self, descriptor: ModuleDescriptor) -> RuleDelta:
        """Compute the additions a descriptor gains under this context.

        Args:
            descriptor: Module whose rules should be evaluated.

        Returns:
            The merged delta (empty if no rule fired).

        Raises:
            ConflictingDefinition: If rules (or a rule and the descriptor
                itself) define one symbol with different values.
        """
        rules = self.fired_rules(descriptor)
        delta = RuleDelta(
            public_dependencies=_union(*(r.public_dependencies for r in rules)),
            private_dependencies=_union(*(r.private_dependencies for r in rules)),
            public_include_paths=_union(*(r.public_include_paths for r in rules)),
            private_include_paths=_union(*(r.private_include_paths for r in rules)),
            public_definitions=_union(*(r.public_definitions for r in rules)),
            private_definitions=_union(*(r.private_definitions for r in rules)),
        )
        check_definitions(
            descriptor.name,
            [
                *descriptor.public_definitions,
                *descriptor.private_definitions,
                *delta.public_definitions,
                *delta.private_definitions,
            ],
        )
        if rules:
            logger.debug(
                "%s: %d of %d conditional rule(s) fired",
                descriptor.name,
                len(rules),
                len(descriptor.conditional_rules),
            )
        return delta

    def apply(self, descriptor: ModuleDescriptor) -> ModuleDescriptor:
        """Return the post-conditional form of a descriptor.

        The result carries the rule additions merged into its own fields
        and no conditional rules. The input descriptor is not modified.
        """
        delta = self.evaluate(descriptor)
        return dataclasses.replace(
            descriptor,
            public_dependencies=descriptor.public_dependencies
            + delta.public_dependencies,
            private_dependencies=descriptor.private_dependencies
            + delta.private_dependencies,
            public_include_paths=descriptor.public_include_paths
            + delta.public_include_paths,
            private_include_paths=descriptor.private_include_paths
            + delta.private_include_paths,
            public_definitions=descriptor.public_definitions
            + delta.public_definitions,
            private_definitions=descriptor.private_definitions
            + delta.private_definitions,
            conditional_rules=(),
        )
