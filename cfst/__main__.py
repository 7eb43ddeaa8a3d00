"""Entry point for cfst."""

import sys

from cfst.cli import main

if __name__ == "__main__":
    sys.exit(main())
