"""
Entry point for running ads_connect as a module.

This allows the package to be executed with: python -m ads_connect
"""

import sys

from .main import main

if __name__ == "__main__":
    sys.exit(main())
