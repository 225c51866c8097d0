"""
CLI wiring — builds the collaborators and commands the CLI runs.

Every command goes through ``load_backend(ctx)`` so tests can point the
whole CLI at a temporary state directory and workspace.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import click

from appctl.adapters.local import (
    LocalBucketEmptier,
    LocalDeployer,
    LocalSecretsManager,
    LocalStateFile,
    LocalStore,
)
from appctl.adapters.terminal import ClickPrompter, Spinner
from appctl.adapters.workspace import Workspace
from appctl.core.config.loader import WORKSPACE_DIR_NAME
from appctl.core.config.settings import Settings
from appctl.core.engine.executor import Command, StepReport, run_command
from appctl.core.errors import AppctlError, OperationCancelledError, WorkspaceNotFoundError
from appctl.core.models.application import JOB_KIND, SERVICE_KIND
from appctl.core.persistence.audit import AuditEntry, AuditWriter
from appctl.core.use_cases.app_delete import DeleteApp
from appctl.core.use_cases.pipeline_delete import DeletePipeline
from appctl.core.use_cases.resource_delete import DeleteEnvironment, DeleteTask, DeleteWorkloads

logger = logging.getLogger(__name__)


@dataclass
class Backend:
    """Collaborators shared by every command of one invocation."""

    settings: Settings
    ws: Workspace
    store: LocalStore
    deployer: LocalDeployer
    secrets: LocalSecretsManager
    prompter: ClickPrompter
    progress: Spinner
    audit: AuditWriter
    state_file: LocalStateFile


def load_backend(ctx: click.Context, require_workspace: bool = True) -> Backend:
    """Build the local backend for this invocation.

    Raises:
        WorkspaceNotFoundError: If ``require_workspace`` and no workspace
            directory exists above the start directory.
    """
    settings: Settings = ctx.obj["settings"]
    start_dir: Path | None = ctx.obj.get("workspace_dir")

    try:
        ws = Workspace.discover(start_dir)
    except WorkspaceNotFoundError:
        if require_workspace:
            raise
        ws = Workspace((start_dir or Path.cwd()) / WORKSPACE_DIR_NAME)
        logger.debug("No workspace found, using %s", ws.path)

    state_file = LocalStateFile(settings.state_file)
    return Backend(
        settings=settings,
        ws=ws,
        store=LocalStore(state_file),
        deployer=LocalDeployer(state_file),
        secrets=LocalSecretsManager(state_file),
        prompter=ClickPrompter(),
        progress=Spinner(quiet=ctx.obj.get("quiet", False)),
        audit=AuditWriter(state_dir=settings.state_dir),
        state_file=state_file,
    )


def build_pipeline_delete(
    backend: Backend,
    *,
    app_name: str = "",
    name: str = "",
    skip_confirmation: bool = False,
    force_delete_secret: bool = False,
    allow_missing_manifest: bool = False,
) -> DeletePipeline:
    return DeletePipeline(
        app_name=app_name,
        name=name,
        store=backend.store,
        ws=backend.ws,
        deployer=backend.deployer,
        secrets=backend.secrets,
        prompter=backend.prompter,
        progress=backend.progress,
        skip_confirmation=skip_confirmation,
        force_delete_secret=force_delete_secret,
        allow_missing_manifest=allow_missing_manifest,
    )


def build_app_delete(backend: Backend, name: str, skip_confirmation: bool) -> DeleteApp:
    """Wire ``DeleteApp`` with the local backend's sub-executors."""
    b = backend

    def workloads(kind: str):
        return lambda app: DeleteWorkloads(
            app=app, kind=kind, store=b.store, deployer=b.deployer, progress=b.progress
        )

    return DeleteApp(
        name=name,
        skip_confirmation=skip_confirmation,
        store=b.store,
        ws=b.ws,
        deployer=b.deployer,
        prompter=b.prompter,
        progress=b.progress,
        svc_delete_executor=workloads(SERVICE_KIND),
        job_delete_executor=workloads(JOB_KIND),
        task_delete_executor=lambda env, task: DeleteTask(
            app=name, env=env, name=task, deployer=b.deployer, progress=b.progress
        ),
        env_delete_executor=lambda env: DeleteEnvironment(
            app=name,
            name=env,
            store=b.store,
            deployer=b.deployer,
            prompter=b.prompter,
            progress=b.progress,
        ),
        bucket_emptier=lambda region: LocalBucketEmptier(b.state_file, region),
        delete_pipeline_runner=lambda: build_pipeline_delete(
            b,
            app_name=name,
            skip_confirmation=True,
            force_delete_secret=True,
            allow_missing_manifest=True,
        ),
    )


# ── Running commands ────────────────────────────────────────────


def run_and_audit(
    cmd: Command,
    operation_type: str,
    backend: Backend,
    *,
    as_json: bool = False,
) -> None:
    """Run a command, record it in the audit ledger and report the outcome.

    Exits 1 on failure or cancellation.
    """
    error: AppctlError | None = None
    cancelled = False
    try:
        run_command(cmd)
    except OperationCancelledError as e:
        error, cancelled = e, True
    except AppctlError as e:
        error = e

    report: StepReport = getattr(cmd, "report", None) or StepReport()
    app, pipeline = _targets(cmd)
    entry = AuditEntry.from_report(operation_type, report, app=app, pipeline=pipeline)
    if cancelled:
        entry.status = "cancelled"
    elif error is not None and report.ok:
        entry.status = "failed"
    if error is not None and not entry.errors:
        entry.errors = [str(error)]
    backend.audit.write(entry)

    if as_json:
        data = report.to_dict()
        data["status"] = entry.status
        data["errors"] = entry.errors
        click.echo(json.dumps(data, indent=2))
    elif cancelled:
        click.secho(f"⚠️  {error}", fg="yellow", err=True)
    elif error is not None:
        click.secho(f"❌ {error}", fg="red", err=True)

    if error is not None:
        sys.exit(1)


def _targets(cmd: Command) -> tuple[str, str]:
    """(application, pipeline) a command acted on, for the audit ledger."""
    if isinstance(cmd, DeleteApp):
        return cmd.name, ""
    return getattr(cmd, "app_name", ""), getattr(cmd, "name", "")
