"""
Entry point for running caddy_monitor as a module: python -m caddy_monitor
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
