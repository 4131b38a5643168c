"""Log command implementation.

Shows the operation log: one entry per attempted install or removal.
"""

import json
from typing import Annotated

import typer

from craftbrew.cli.display import create_oplog_table
from craftbrew.core.oplog import OperationLog
from craftbrew.utils.formatting import console, print_info

app = typer.Typer(
    help="Show the operation log.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def show_log(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-l",
            min=1,
            help="Show at most this many entries.",
        ),
    ] = 20,
    run_id: Annotated[
        str | None,
        typer.Option(
            "--run",
            "-r",
            help="Only show entries of one run.",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """Show recent package operations, newest first.

    Examples:
        craftbrew log                 # Last 20 operations
        craftbrew log --run 3f2a...   # One run only
    """
    if ctx.invoked_subcommand is not None:
        return

    oplog = OperationLog()
    entries = oplog.read(limit=limit, run_id=run_id)

    if json_output:
        console.print_json(json.dumps([e.to_dict() for e in entries]))
        return

    if not entries:
        print_info(f"No operations recorded in {oplog.path}.")
        return

    console.print(create_oplog_table(entries))
