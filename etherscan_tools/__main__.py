"""
Entry point for running the package as a module.

Usage:
    python -m etherscan_tools verify ...
    python -m etherscan_tools import ...
"""
import sys

from etherscan_tools.cli import main


if __name__ == "__main__":
    sys.exit(main())
