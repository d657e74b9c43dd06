"""Entry point for python -m tag2dir."""

import sys

from tag2dir.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
