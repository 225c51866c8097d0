"""
CLI commands for pipelines — deploy and delete.

Thin wrappers over ``appctl.core.use_cases.pipeline_deploy`` and
``appctl.core.use_cases.pipeline_delete``.
"""

from __future__ import annotations

import sys

import click


def _backend(ctx: click.Context):
    from appctl.core.errors import AppctlError
    from appctl.ui.cli.backend import load_backend

    try:
        return load_backend(ctx)
    except AppctlError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


@click.group()
def pipeline() -> None:
    """Pipelines — create, update and delete the workspace's delivery pipeline."""


@pipeline.command()
@click.option("--app", "-a", "app_name", default="", help="Name of the application.")
@click.option("--name", "-n", default="", help="Name of the pipeline.")
@click.option("--yes", "skip_confirmation", is_flag=True, help="Skip confirmation prompt.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def deploy(ctx: click.Context, app_name: str, name: str, skip_confirmation: bool, as_json: bool) -> None:
    """Deploy a pipeline to your application."""
    from appctl.core.use_cases.pipeline_deploy import OUTCOME_DECLINED, DeployPipeline
    from appctl.ui.cli.backend import run_and_audit

    backend = _backend(ctx)
    cmd = DeployPipeline(
        app_name=app_name,
        name=name,
        region=backend.settings.region,
        store=backend.store,
        ws=backend.ws,
        deployer=backend.deployer,
        prompter=backend.prompter,
        progress=backend.progress,
        skip_confirmation=skip_confirmation,
    )
    run_and_audit(cmd, "pipeline-deploy", backend, as_json=as_json)

    if as_json or ctx.obj.get("quiet"):
        return
    if cmd.outcome == OUTCOME_DECLINED:
        click.secho(f"⚠️  Pipeline {cmd.name} left unchanged", fg="yellow")
    else:
        click.secho(f"✅ Pipeline {cmd.name} {cmd.outcome}", fg="green", bold=True)


@pipeline.command()
@click.option("--app", "-a", "app_name", default="", help="Name of the application.")
@click.option("--name", "-n", default="", help="Name of the pipeline.")
@click.option("--yes", "skip_confirmation", is_flag=True, help="Skip confirmation prompt.")
@click.option(
    "--delete-secret",
    "force_delete_secret",
    is_flag=True,
    help="Delete the secret with the source access token without asking.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def delete(
    ctx: click.Context,
    app_name: str,
    name: str,
    skip_confirmation: bool,
    force_delete_secret: bool,
    as_json: bool,
) -> None:
    """Delete the pipeline associated with your workspace."""
    from appctl.ui.cli.backend import build_pipeline_delete, run_and_audit

    backend = _backend(ctx)
    cmd = build_pipeline_delete(
        backend,
        app_name=app_name,
        name=name,
        skip_confirmation=skip_confirmation,
        force_delete_secret=force_delete_secret,
    )
    run_and_audit(cmd, "pipeline-delete", backend, as_json=as_json)

    if as_json or ctx.obj.get("quiet"):
        return
    if cmd.secret_deleted:
        click.secho(f"✅ Deleted secret {cmd.secret_name}", fg="green")
    elif cmd.secret_name:
        click.secho(f"   Kept secret {cmd.secret_name}", fg="bright_black")
    click.secho(f"✅ Pipeline {cmd.name} deleted", fg="green", bold=True)
