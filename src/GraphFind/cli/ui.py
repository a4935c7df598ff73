"""Click CLI interface definitions.

Defines the command-line interface structure and routes commands
to the runner.
"""

from __future__ import annotations

from pathlib import Path

import click
from dotenv import load_dotenv

from GraphFind.cli.commands import (
    CompileCommand,
    CompleteCommand,
    FindCommand,
    HideCommand,
    OptionsCommand,
)
from GraphFind.cli.runner import CommandRunner
from GraphFind.config import DEFAULT_CONFIG_PATH, load_config_with_defaults

_GRAPH_OPTION = click.option(
    "--graph",
    "graph_path",
    type=click.Path(path_type=Path, dir_okay=False, exists=True),
    default=None,
    help="Cytoscape JSON graph snapshot [default: graph.path from config].",
)
_URL_OPTION = click.option(
    "--url",
    default=None,
    help="Page URL whose graphFind/graphHide parameters are read and updated.",
)


def _graph_path(ctx: click.Context, graph_path: Path | None) -> Path:
    """Return the --graph value, falling back to the configured snapshot."""
    if graph_path is not None:
        return graph_path
    configured = ctx.obj.runtime.graph_path
    if not configured:
        raise click.UsageError("Missing option '--graph' and no graph.path configured.")
    return Path(configured)


@click.group(help="GraphFind: find and hide elements of a service graph.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to YAML config file (merged over the defaults).",
)
@click.option(
    "--defaults",
    "default_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=DEFAULT_CONFIG_PATH,
    show_default=True,
    help="Path to the default YAML config.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path, default_path: Path) -> None:
    """CLI entry group.

    Loads environment variables from .env file before processing config.
    """
    load_dotenv()

    ctx.obj = load_config_with_defaults(config_path, default_path=default_path)


@cli.command("compile")
@click.argument("expression")
@click.option("--hide", "is_hide", is_flag=True, help="Compile as a hide expression.")
@click.pass_context
def compile_cmd(ctx: click.Context, expression: str, is_hide: bool) -> None:
    """Compile EXPRESSION and print the selector of each clause."""
    command = CompileCommand(ctx.obj, expression, "hide" if is_hide else "find")
    CommandRunner(ctx.obj).run(command, action=ctx.command.name)


@cli.command("find")
@click.argument("expression")
@_GRAPH_OPTION
@_URL_OPTION
@click.pass_context
def find_cmd(ctx: click.Context, expression: str, graph_path: Path | None, url: str | None) -> None:
    """Mark elements of a graph snapshot matching EXPRESSION."""
    command = FindCommand(ctx.obj, expression, _graph_path(ctx, graph_path), url)
    CommandRunner(ctx.obj).run(command, action=ctx.command.name)


@cli.command("hide")
@click.argument("expression")
@_GRAPH_OPTION
@_URL_OPTION
@click.option("--compress/--no-compress", default=None, help="Remove hidden elements instead of hiding them.")
@click.pass_context
def hide_cmd(ctx: click.Context, expression: str, graph_path: Path | None, url: str | None, compress: bool | None) -> None:
    """Hide elements of a graph snapshot matching EXPRESSION."""
    command = HideCommand(ctx.obj, expression, _graph_path(ctx, graph_path), url, compress)
    CommandRunner(ctx.obj).run(command, action=ctx.command.name)


@cli.command("complete")
@click.argument("partial")
@click.option("--count", type=click.IntRange(min=1), default=1, show_default=True, help="Completions to cycle.")
@click.pass_context
def complete_cmd(ctx: click.Context, partial: str, count: int) -> None:
    """Complete the last operand of PARTIAL."""
    CommandRunner(ctx.obj).run(CompleteCommand(partial, count), action=ctx.command.name)


@cli.command("options")
@click.option("--hide", "is_hide", is_flag=True, help="List hide presets.")
@click.pass_context
def options_cmd(ctx: click.Context, is_hide: bool) -> None:
    """List preset find (or hide) expressions."""
    command = OptionsCommand(ctx.obj, "hide" if is_hide else "find")
    CommandRunner(ctx.obj).run(command, action=ctx.command.name)
