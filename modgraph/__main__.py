# SPDX-License-Identifier: MIT
"""Allow running modgraph as ``python -m modgraph``."""

import sys

from modgraph.cli import main

sys.exit(main())
