"""
Main entry point for running the package as a module.

Usage:
    python -m album serve --port 3000
    python -m album warm --size 400
    python -m album sweep --dry-run
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
