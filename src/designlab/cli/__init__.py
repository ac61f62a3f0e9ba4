"""
Command line interface for Design Lab.
"""

from designlab.cli.main import main

__all__ = ["main"]
