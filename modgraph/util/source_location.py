# SPDX-License-Identifier: MIT
"""Source location tracking for error messages.

Descriptors remember where they were declared (a manifest file or a line
of a Python build script) so configuration errors can point at the
offending declaration.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from pathlib import Path

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class SourceLocation:
    """A file and optional line number.

    Attributes:
        filename: Path of the file (manifest or script).
        lineno: 1-based line number, or 0 when unknown.
    """

    filename: str
    lineno: int = 0

    def __str__(self) -> str:
        if self.lineno:
            return f"{self.filename}:{self.lineno}"
        return self.filename


def get_caller_location() -> SourceLocation | None:
    """Return the first stack frame outside of modgraph itself.

    Frames from generated code (dataclass ``__init__`` etc.) are skipped
    as well.

    Returns:
        Location of the user code that called into modgraph, or None
        if no such frame exists.
    """
    frame = inspect.currentframe()
    try:
        while frame is not None:
            filename = frame.f_code.co_filename
            if not filename.startswith("<"):
                path = Path(filename).resolve()
                if _PACKAGE_DIR not in path.parents:
                    return SourceLocation(str(path), frame.f_lineno)
            frame = frame.f_back
        return None
    finally:
        del frame
