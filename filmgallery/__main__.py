"""
Main entry point for running the package as a module.

Usage:
    python -m filmgallery upload ./photos --name "Roll 12"
    python -m filmgallery show <album-id>
    python -m filmgallery delete <album-id>
    python -m filmgallery serve --port 3000
"""

import sys
from .cli import main

if __name__ == '__main__':
    sys.exit(main())
