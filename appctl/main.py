"""
appctl — CLI entrypoint.

Usage:
    python -m appctl.main --help
    appctl pipeline deploy
    appctl app delete --yes
"""

from __future__ import annotations

from pathlib import Path

import click

from appctl import __version__
from appctl.core.config.settings import Settings
from appctl.core.observability.logging_config import configure_cli_logging


@click.group()
@click.version_option(version=__version__, prog_name="appctl")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option("--region", default=None, help="Region for pipeline resources (default: $APPCTL_REGION).")
@click.option(
    "--state-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Where the local backend keeps its state (default: $APPCTL_STATE_DIR).",
)
@click.option(
    "--workspace",
    "-w",
    "workspace_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory to start the workspace search from (default: cwd).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    region: str | None,
    state_dir: str | None,
    workspace_dir: str | None,
) -> None:
    """appctl — deploy pipelines and tear down applications."""
    settings = Settings.from_env(region=region, state_dir=state_dir)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["settings"] = settings
    ctx.obj["workspace_dir"] = Path(workspace_dir) if workspace_dir else None

    # ── Logging setup (once, at process start) ──────────────────
    configure_cli_logging(settings, debug=debug, verbose=verbose, quiet=quiet)


# ── Register sub-command groups from appctl/ui/cli/ ─────────────

from appctl.ui.cli.app import app
from appctl.ui.cli.pipeline import pipeline

cli.add_command(app)
cli.add_command(pipeline)


if __name__ == "__main__":
    cli()
