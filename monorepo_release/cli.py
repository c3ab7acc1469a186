"""CLI entry point for monorepo-release."""

from __future__ import annotations

import os
from pathlib import Path

import click

from monorepo_release.config import DEFAULT_CONFIG_FILE, load_config
from monorepo_release.errors import ReleaseError
from monorepo_release.pipeline import run_release


@click.group()
@click.version_option(package_name="monorepo-release")
@click.option(
    "--manifest-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    help="Release config to process instead of the one in the current directory.",
)
@click.pass_context
def cli(ctx: click.Context, manifest_path: Path) -> None:
    """Release every crate of a Cargo workspace in dependency order."""
    ctx.obj = manifest_path


@cli.command()
@click.option("--confirm", is_flag=True, help="Actually release instead of a dry run.")
@click.option(
    "--no-publish", is_flag=True, help="Do not publish packages to the registry."
)
@click.pass_obj
def release(manifest_path: Path, confirm: bool, no_publish: bool) -> None:
    """Validate the workspace and release it (dry run unless --confirm)."""
    try:
        config = load_config(manifest_path)
        # Paths in the config are relative to the config file.
        if manifest_path.parent != Path("."):
            os.chdir(manifest_path.parent)
        run_release(config, dry_run=not confirm, no_publish=no_publish)
    except ReleaseError as exc:
        raise click.ClickException(str(exc)) from exc
