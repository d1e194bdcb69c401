# SPDX-License-Identifier: MIT
"""Build target context.

A BuildTargetContext is the fixed configuration that conditional rules
are evaluated against: the target platform, whether editor tooling is
part of the build, the build configuration, and any named toggles.
One context is supplied per resolution run and is never mutated.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

# Values accepted as booleans when toggles come from the command line
_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off", ""})

# Variable names that map onto context fields instead of toggles
_FIELD_VARIABLES = {
    "PLATFORM": "platform",
    "EDITOR": "editor",
    "CONFIGURATION": "configuration",
}

ToggleValue = bool | str


def coerce_toggle(value: Any) -> ToggleValue:
    """Convert a raw toggle value into a bool or string.

    Strings such as "1", "true", "off" become booleans; anything else
    is kept as a string.

    Examples:
        >>> coerce_toggle("1")
        True
        >>> coerce_toggle("Off")
        False
        >>> coerce_toggle("Win64")
        'Win64'
    """
    if isinstance(value, bool):
        return value
    text = str(value)
    lowered = text.strip().lower()
    if lowered in _TRUE_STRINGS:
        return True
    if lowered in _FALSE_STRINGS:
        return False
    return text


@dataclass(frozen=True)
class BuildTargetContext:
    """The build configuration conditional rules evaluate against.

    Attributes:
        platform: Target platform identifier (e.g. "Win64", "Linux").
        editor: True when the build includes editor tooling.
        configuration: Build configuration (e.g. "Development", "Shipping").
        toggles: Additional named switches, read-only.
    """

    platform: str = "Win64"
    editor: bool = True
    configuration: str = "Development"
    toggles: Mapping[str, ToggleValue] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        frozen = MappingProxyType(
            {str(k): coerce_toggle(v) for k, v in dict(self.toggles).items()}
        )
        object.__setattr__(self, "toggles", frozen)

    def lookup(self, name: str) -> ToggleValue:
        """Look up a name used in a rule predicate.

        The built-in names ``platform``, ``editor`` and ``configuration``
        refer to the context fields; every other name is a toggle. A toggle
        that was never set evaluates to False.

        Args:
            name: Name to look up.

        Returns:
            The field or toggle value.
        """
        if name == "platform":
            return self.platform
        if name == "editor":
            return self.editor
        if name == "configuration":
            return self.configuration
        return self.toggles.get(name, False)

    def path_variables(self) -> dict[str, str]:
        """Return the $(Variable) values this context contributes to paths."""
        return {"Platform": self.platform, "Configuration": self.configuration}

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation with sorted toggles."""
        return {
            "platform": self.platform,
            "editor": self.editor,
            "configuration": self.configuration,
            "toggles": {k: self.toggles[k] for k in sorted(self.toggles)},
        }

    def with_variables(self, variables: Mapping[str, str]) -> BuildTargetContext:
        """Return a new context with command-line variables applied.

        ``PLATFORM``, ``EDITOR`` and ``CONFIGURATION`` override the matching
        fields; every other variable becomes (or replaces) a toggle.

        Args:
            variables: KEY=value pairs, typically from the command line.

        Returns:
            A new BuildTargetContext; self is unchanged.
        """
        fields: dict[str, Any] = {
            "platform": self.platform,
            "editor": self.editor,
            "configuration": self.configuration,
        }
        toggles = dict(self.toggles)
        for key, value in variables.items():
            attr = _FIELD_VARIABLES.get(key.upper())
            if attr == "editor":
                fields["editor"] = coerce_toggle(value) is True
            elif attr is not None:
                fields[attr] = value
            else:
                toggles[key] = coerce_toggle(value)
        return BuildTargetContext(toggles=toggles, **fields)

    def __repr__(self) -> str:
        kind = "editor" if self.editor else "runtime"
        return f"BuildTargetContext({self.platform}, {kind}, {self.configuration})"
