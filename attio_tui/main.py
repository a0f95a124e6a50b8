#!/usr/bin/env python3
"""
Main CLI entry point for attio-tui
"""

import typer
from rich.console import Console

from attio_tui import __version__
from attio_tui.config.constants import get_config_dir
from attio_tui.config.settings import load_config, save_config, validate_api_key
from attio_tui.exceptions import ValidationError
from attio_tui.models.navigation import AppState
from attio_tui.state.describe import describe_ui_state
from attio_tui.utils.logging_utils import get_log_path, setup_tui_logging

console = Console()

app = typer.Typer(
    name="attio-tui",
    help="Keyboard-driven terminal browser for an Attio workspace.",
    no_args_is_help=False,
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", "-d", help="Start with the debug panel and verbose logging"),
):
    """
    attio-tui - browse objects, lists, notes, tasks, meetings and webhooks.

    [bold]Examples:[/bold]

    Launch the browser:
        [cyan]attio-tui[/cyan]

    Store an API key without starting the UI:
        [cyan]attio-tui set-key YOUR_KEY[/cyan]
    """
    if ctx.invoked_subcommand is not None:
        return

    logger = setup_tui_logging(debug=debug)
    logger.info("Starting attio-tui %s", __version__)

    from attio_tui.ui.app import AttioApp

    try:
        AttioApp(load_config(), debug=debug).run()
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.exception("attio-tui crashed")
        console.print(f"❌ Error: {e}", style="red")
        console.print(f"[dim]See {get_log_path()} for details[/dim]")
        raise typer.Exit(1) from e


@app.command()
def version():
    """Show attio-tui version"""
    typer.echo(f"attio-tui version {__version__}")


@app.command("set-key")
def set_key(api_key: str = typer.Argument(..., help="Attio API key")):
    """Validate and save an API key to the config file."""
    try:
        key = validate_api_key(api_key)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e
    path = save_config(load_config().with_api_key(key))
    console.print(f"[green]✓[/green] Saved API key to {path}")


@app.command()
def describe(
    paths: bool = typer.Option(False, "--paths", help="Also print config and log locations"),
):
    """Print the start-up UI state as plain text."""
    state = AppState(debug_enabled=load_config().debug_enabled)
    typer.echo(describe_ui_state(state))
    if paths:
        typer.echo(f"Config dir: {get_config_dir()}")
        typer.echo(f"Log file: {get_log_path()}")


def run():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    run()
