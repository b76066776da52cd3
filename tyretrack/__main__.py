"""
Entry point for running tyretrack as a module.

Usage:
    python -m tyretrack layout --input example_vehicle.json
    python -m tyretrack make-example
    python -m tyretrack serve --port 8000
"""

import sys

from tyretrack.cli.main import cli

if __name__ == "__main__":
    sys.exit(cli())
