"""Command runner for coordinating CLI execution.

Manages logging configuration and error handling for command execution.
"""

from __future__ import annotations

from typing import Protocol

import click

from GraphFind.config import AppConfig
from GraphFind.utils.log import configure_logging, log


class Command(Protocol):
    def execute(self) -> list[str]:
        raise NotImplementedError


class CommandRunner:
    """Runs one command with logging set up and failures turned into aborts."""

    def __init__(self, config: AppConfig) -> None:
        """Initialize command runner.

        Args:
            config: Application configuration.
        """
        self.config = config

    def run(self, command: Command, action: str) -> None:
        """Execute ``command`` and print its output lines.

        Args:
            command: Command to execute.
            action: The CLI command name (e.g., 'find').

        Raises:
            click.Abort: When the command fails.
        """
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )
        try:
            lines = command.execute()
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed: %s", action.capitalize(), e)
            raise click.Abort from e

        for line in lines:
            click.echo(line)
