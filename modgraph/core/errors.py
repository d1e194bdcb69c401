# SPDX-License-Identifier: MIT
"""Custom exceptions for modgraph.

All modgraph exceptions inherit from ModgraphError, which includes
optional source location information for better error messages.
Resolution never recovers from a ConfigurationError: a descriptor set
that fails validation produces no build plan at all.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from modgraph.util.source_location import SourceLocation


class ModgraphError(Exception):
    """Base class for all modgraph exceptions.

    Attributes:
        message: The error message.
        location: Optional source location where the error occurred.
    """

    def __init__(
        self,
        message: str,
        location: SourceLocation | str | None = None,
    ) -> None:
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class ManifestError(ModgraphError):
    """A manifest or project file could not be read or is malformed."""


class ConfigurationError(ModgraphError):
    """The module set cannot be resolved into a valid build plan."""


class DuplicateModuleName(ConfigurationError):
    """Two declarations share a module name.

    Raised even when both declarations are identical; there is no
    precedence between manifests.

    Attributes:
        name: The duplicated module name.
        locations: Where each declaration came from (may contain None).
    """

    def __init__(
        self,
        name: str,
        locations: Sequence[SourceLocation | str | None] = (),
    ) -> None:
        self.name = name
        self.locations = list(locations)
        where = ", ".join(str(loc) for loc in self.locations if loc)
        message = f"duplicate module name: {name}"
        if where:
            message += f" (declared at {where})"
        super().__init__(message)


class UnresolvedDependency(ConfigurationError):
    """A module references a module name that does not exist.

    Attributes:
        module: The missing module name.
        referrer: The module holding the reference.
    """

    def __init__(
        self,
        module: str,
        referrer: str,
        location: SourceLocation | str | None = None,
    ) -> None:
        self.module = module
        self.referrer = referrer
        super().__init__(
            f"module '{referrer}' depends on unknown module '{module}'", location
        )


class CyclicDependency(ConfigurationError):
    """Dependency edges form a cycle.

    Attributes:
        cycle: Module names forming the cycle; the first name is repeated
            at the end (e.g. ["A", "B", "A"]).
    """

    def __init__(
        self,
        cycle: list[str],
        location: SourceLocation | str | None = None,
    ) -> None:
        self.cycle = cycle
        cycle_str = " -> ".join(cycle)
        super().__init__(f"dependency cycle: {cycle_str}", location)


class ConflictingDefinition(ConfigurationError):
    """One module sees the same symbol defined with different values.

    Attributes:
        module: The module whose compilation sees the conflict.
        symbol: The definition name.
        values: The conflicting rendered definitions, in discovery order.
    """

    def __init__(
        self,
        module: str,
        symbol: str,
        values: Sequence[str],
        location: SourceLocation | str | None = None,
    ) -> None:
        self.module = module
        self.symbol = symbol
        self.values = list(values)
        rendered = " vs ".join(self.values)
        super().__init__(
            f"conflicting definitions of '{symbol}' for module '{module}': {rendered}",
            location,
        )


class InvalidTargetReference(ConfigurationError):
    """An Editor module is referenced from a build without editor tooling.

    Attributes:
        module: The Editor module being referenced.
        referrer: The module holding the reference.
    """

    def __init__(
        self,
        module: str,
        referrer: str,
        location: SourceLocation | str | None = None,
    ) -> None:
        self.module = module
        self.referrer = referrer
        super().__init__(
            f"module '{referrer}' references editor module '{module}' "
            "in a build without editor tooling",
            location,
        )


class MissingArtifact(ConfigurationError):
    """A declared library or runtime file does not exist.

    Attributes:
        path: The missing artifact path.
        module: The module that declared it.
    """

    def __init__(
        self,
        path: str,
        module: str,
        location: SourceLocation | str | None = None,
    ) -> None:
        self.path = path
        self.module = module
        super().__init__(
            f"artifact not found: {path} (declared by '{module}')", location
        )


class UndefinedVariable(ConfigurationError):
    """A path references a $(Variable) that is not defined.

    Attributes:
        variable: The name of the missing variable.
        module: The module whose path used it.
    """

    def __init__(
        self,
        variable: str,
        module: str,
        location: SourceLocation | str | None = None,
    ) -> None:
        self.variable = variable
        self.module = module
        super().__init__(
            f"undefined variable $({variable}) in module '{module}'", location
        )
