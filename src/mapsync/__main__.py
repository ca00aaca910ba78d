"""Module entry point for ``python -m mapsync``."""

import sys

from mapsync.cli import main

if __name__ == "__main__":
    sys.exit(main())
