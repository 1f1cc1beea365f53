# SPDX-License-Identifier: MIT
"""Package entry point — run apilint via `python -m apilint`."""

import sys

from apilint.cli import main

if __name__ == "__main__":
    sys.exit(main())
