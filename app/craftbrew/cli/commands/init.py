"""Init command implementation.

Creates config.toml and the manifest directory, optionally seeding a
base Brewfile from the packages installed right now.
"""

from pathlib import Path
from typing import Annotated

import typer

from craftbrew.cli.runner import fail, get_config
from craftbrew.cli.types import ExitCode, get_client
from craftbrew.core.config import CraftbrewConfig, save_config
from craftbrew.core.errors import CraftbrewError
from craftbrew.core.manifest import render_manifest, write_manifest
from craftbrew.core.paths import ensure_dir, get_config_path
from craftbrew.core.prober import StateProber
from craftbrew.core.protected import ProtectedSet
from craftbrew.utils.formatting import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Create config.toml and the manifest directory.",
    invoke_without_command=True,
)

SEED_MANIFEST = "base.brewfile"


@app.callback(invoke_without_command=True)
def init_config(
    ctx: typer.Context,
    dump: Annotated[
        bool,
        typer.Option(
            "--dump",
            "-d",
            help=f"Write the installed packages to {SEED_MANIFEST} in the manifest directory.",
        ),
    ] = False,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing files without prompting.",
        ),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            "-n",
            help="Show what would be created without writing files.",
        ),
    ] = False,
) -> None:
    """Initialize craftbrew on this machine.

    Writes a config.toml with the default settings and creates the
    manifest directory. With --dump, the currently installed packages
    (minus protected ones) are written to a starter Brewfile.

    Examples:
        craftbrew init                 # Default config only
        craftbrew init --dump          # Also seed base.brewfile
        craftbrew init --dry-run       # Preview without writing
    """
    if ctx.invoked_subcommand is not None:
        return

    config_path: Path = (ctx.obj or {}).get("config_path") or get_config_path()

    try:
        config = get_config(ctx) if config_path.exists() else CraftbrewConfig()
    except CraftbrewError as e:
        fail(e)

    if config_path.exists() and not force and not dry_run:
        print_error(f"Config already exists: {config_path}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=ExitCode.INVALID)

    manifests_dir = config.manifests_dir
    seed_path = manifests_dir / SEED_MANIFEST

    seed_text: str | None = None
    if dump:
        try:
            actual = StateProber(get_client(config)).probe()
        except CraftbrewError as e:
            fail(e)
        removable, kept = ProtectedSet.from_strings(config.protected).partition(actual.packages)
        seed_text = render_manifest(removable, header="Generated by craftbrew init --dump")
        console.print(
            f"  Installed: [bold]{len(actual.packages)}[/bold] package(s), "
            f"[muted]{len(kept)} protected skipped[/muted]"
        )
        if seed_path.exists() and not force:
            print_warning(f"{seed_path} exists and will be kept (use --force to overwrite).")
            seed_text = None

    console.print(f"  Config: [muted]{config_path}[/muted]")
    console.print(f"  Manifests: [muted]{manifests_dir}[/muted]")

    if dry_run:
        print_info("[DRY-RUN] No files were written.")
        return

    try:
        ensure_dir(manifests_dir, "manifest")
        saved = save_config(config, config_path)
        print_success(f"Config written: {saved}")
        if seed_text is not None:
            write_manifest(seed_text, seed_path)
            print_success(f"Manifest written: {seed_path}")
    except RuntimeError as e:
        print_error(str(e))
        raise typer.Exit(code=ExitCode.INVALID) from e
    except CraftbrewError as e:
        fail(e)
