"""
CLI commands for applications — register and delete.

Thin wrappers over ``appctl.core.use_cases.app_delete``. ``app init``
only records the application and binds the workspace to it.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click


@click.group()
def app() -> None:
    """Applications — register an application or delete everything it owns."""


@app.command()
@click.argument("name")
@click.option("--domain", default="", help="Domain name of the application.")
@click.pass_context
def init(ctx: click.Context, name: str, domain: str) -> None:
    """Register an application and bind the workspace to it."""
    from appctl.core.config.loader import WORKSPACE_DIR_NAME, WorkspaceSummary, write_summary
    from appctl.core.errors import AppctlError
    from appctl.core.models.application import Application
    from appctl.ui.cli.backend import load_backend

    try:
        backend = load_backend(ctx, require_workspace=False)
        ws_app = backend.ws.app_name()
        if ws_app and ws_app != name:
            raise AppctlError(f"workspace is already registered with application {ws_app}")
        backend.store.create_application(Application(name=name, domain=domain))
    except AppctlError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    start_dir: Path = ctx.obj.get("workspace_dir") or Path.cwd()
    ws_dir = backend.ws.path if backend.ws.path.is_dir() else start_dir / WORKSPACE_DIR_NAME
    path = write_summary(ws_dir, WorkspaceSummary(application=name))
    click.secho(f"✅ Application {name} registered", fg="green", bold=True)
    click.echo(f"   📁 {path}")


@app.command()
@click.option("--name", "-n", default="", help="Name of the application (default: the workspace's).")
@click.option("--yes", "skip_confirmation", is_flag=True, help="Skip confirmation prompt.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def delete(ctx: click.Context, name: str, skip_confirmation: bool, as_json: bool) -> None:
    """Delete all resources associated with the application."""
    from appctl.core.errors import AppctlError
    from appctl.ui.cli.backend import build_app_delete, load_backend, run_and_audit

    try:
        backend = load_backend(ctx, require_workspace=False)
        if not name:
            name = backend.ws.app_name()
    except AppctlError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    cmd = build_app_delete(backend, name, skip_confirmation)
    run_and_audit(cmd, "app-delete", backend, as_json=as_json)

    if not as_json and not ctx.obj.get("quiet"):
        click.secho(f"✅ Application {name} deleted", fg="green", bold=True)
