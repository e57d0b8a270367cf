"""
Entry point for running soldocgen as a module.

Usage:
    python -m soldocgen docgen [root] [options]
"""

import sys

from soldocgen.cli import main

if __name__ == "__main__":
    sys.exit(main())
