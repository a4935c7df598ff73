"""CLI package for GraphFind.

Splits the click interface, the command runner and the command
implementations into separate modules.
"""

from __future__ import annotations

__all__ = ["CommandRunner", "main"]

from GraphFind.cli.runner import CommandRunner
from GraphFind.cli.ui import cli


def main() -> None:
    """Run GraphFind CLI.

    Entry point referenced by console script in pyproject.toml.
    """
    cli()
