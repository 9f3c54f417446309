"""
Executable module for jamkit.

Running:
    python -m jamkit

is equivalent to:
    jam
"""

from __future__ import annotations

import sys

from jamkit.cli import main

if __name__ == "__main__":
    sys.exit(main())
