"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from pathlib import Path
from typing import Annotated

import typer

from craftbrew import __version__
from craftbrew.cli.commands import (
    backup,
    cleanup,
    diff,
    init,
    install,
    log,
    rollback,
    snapshots,
    sync,
    validate,
)
from craftbrew.core.paths import get_log_file_path
from craftbrew.utils.formatting import set_quiet
from craftbrew.utils.log import configure_logging

# Create main Typer app
app = typer.Typer(
    name="craftbrew",
    help="Declarative Homebrew package management.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"craftbrew version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config.toml (default: ~/.config/craftbrew/config.toml).",
        ),
    ] = None,
) -> None:
    """craftbrew - Declarative Homebrew package management.

    Declare formulae, casks, taps and App Store apps in Brewfile-style
    manifests and keep this machine in sync with them.
    """
    configure_logging(verbose=verbose, quiet=quiet, log_file=get_log_file_path())
    set_quiet(quiet)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = config_path


# Register commands
app.add_typer(init.app, name="init")
app.add_typer(install.app, name="install")
app.add_typer(diff.app, name="diff")
app.add_typer(sync.app, name="sync")
app.add_typer(cleanup.app, name="cleanup")
app.add_typer(backup.app, name="backup")
app.add_typer(rollback.app, name="rollback")
app.add_typer(snapshots.app, name="snapshots")
app.add_typer(validate.app, name="validate")
app.add_typer(log.app, name="log")


if __name__ == "__main__":
    app()
