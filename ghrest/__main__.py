"""Entry point for running as a module: python -m ghrest."""

import sys

from ghrest.cli import main

if __name__ == "__main__":
    sys.exit(main())
