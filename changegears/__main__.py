"""
Entry point for running changegears as a module.

Usage:
    python -m changegears calculate --input example.json
    python -m changegears make-example
    python -m changegears serve --port 8000
"""

import sys

from changegears.cli.main import cli

if __name__ == "__main__":
    sys.exit(cli())
