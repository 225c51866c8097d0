"""
Pipeline delete use case — remove a pipeline stack and its source secret.

Used on its own (``appctl pipeline delete``) and as one step of the
application teardown. In teardown mode the command never prompts and
treats a workspace without a pipeline manifest as nothing to do.
"""

from __future__ import annotations

import logging

from appctl.adapters.base import (
    ConfigStore,
    Progress,
    Prompter,
    SecretsManager,
    StackDeployer,
    WorkspaceReader,
)
from appctl.core.engine.executor import (
    Command,
    Step,
    StepReport,
    failed,
    run_steps,
    succeeded,
)
from appctl.core.errors import (
    NO_APP_IN_WORKSPACE,
    ManifestNotFoundError,
    OperationCancelledError,
    StepError,
    ValidationError,
    find_cause,
)
from appctl.core.services.secret_cleanup import delete_secret

logger = logging.getLogger(__name__)

FMT_DELETE_CONFIRM_PROMPT = "Are you sure you want to delete pipeline {name} from application {app}?"
DELETE_CONFIRM_HELP = "This will delete the deployment pipeline for the services in the workspace."

FMT_DELETE_START = "Deleting pipeline {name} from application {app}."
FMT_DELETE_FAILED = "Failed to delete pipeline {name} from application {app}: {err}."
FMT_DELETE_COMPLETE = "Deleted pipeline {name} from application {app}."

PIPELINE_DELETE_CANCELLED = "pipeline delete cancelled - no changes made"


class DeletePipeline(Command):
    """Delete the workspace's pipeline.

    Args:
        app_name: Application flag value ("" = use the workspace's).
        name: Pipeline flag value ("" = read it from the manifest).
        skip_confirmation: Don't ask before deleting the pipeline.
        force_delete_secret: Delete the source secret without asking.
        allow_missing_manifest: Treat a missing manifest as a no-op.
    """

    def __init__(
        self,
        *,
        app_name: str,
        name: str,
        store: ConfigStore,
        ws: WorkspaceReader,
        deployer: StackDeployer,
        secrets: SecretsManager,
        prompter: Prompter,
        progress: Progress,
        skip_confirmation: bool = False,
        force_delete_secret: bool = False,
        allow_missing_manifest: bool = False,
    ):
        self.app_name = app_name
        self.name = name
        self.store = store
        self.ws = ws
        self.deployer = deployer
        self.secrets = secrets
        self.prompter = prompter
        self.progress = progress
        self.skip_confirmation = skip_confirmation
        self.force_delete_secret = force_delete_secret
        self.allow_missing_manifest = allow_missing_manifest

        self.secret_name = ""
        self.secret_deleted = False
        self.deleted = False
        self.report = StepReport()

    def validate(self) -> None:
        """Nothing to check before prompting."""

    def ask(self) -> None:
        if self.app_name:
            try:
                self.store.get_application(self.app_name)
            except Exception as e:
                raise StepError(f"get application {self.app_name}", e) from e
        else:
            self.app_name = self.ws.app_name()
            if not self.app_name:
                raise ValidationError(NO_APP_IN_WORKSPACE)

        self._read_name_and_secret()
        if not self.name or self.skip_confirmation:
            return

        try:
            confirmed = self.prompter.confirm(
                FMT_DELETE_CONFIRM_PROMPT.format(name=self.name, app=self.app_name),
                DELETE_CONFIRM_HELP,
                final_message=f"Delete pipeline {self.name}",
            )
        except Exception as e:
            raise StepError("pipeline delete confirmation prompt", e) from e
        if not confirmed:
            raise OperationCancelledError(PIPELINE_DELETE_CANCELLED)

    def execute(self) -> None:
        """Delete the source secret, then the pipeline stack."""
        if not self.name:
            logger.info("No pipeline manifest in the workspace, skipping pipeline deletion")
            return

        run_steps(
            [
                Step("delete-secret", self._delete_secret),
                Step("delete-pipeline-stack", self._delete_stack),
            ],
            workflow="pipeline-delete",
            report=self.report,
        )

    def _read_name_and_secret(self) -> None:
        try:
            path = self.ws.pipeline_manifest_legacy_path()
        except Exception as e:
            if self.allow_missing_manifest and find_cause(e, ManifestNotFoundError):
                logger.debug("No pipeline manifest found: %s", e)
                return
            raise StepError("get path to pipeline manifest", e) from e

        try:
            manifest = self.ws.read_pipeline_manifest(path)
        except Exception as e:
            raise StepError("read pipeline manifest", e) from e

        if not self.name:
            self.name = manifest.name
        self.secret_name = manifest.source.access_token_secret

    def _delete_secret(self) -> None:
        self.secret_deleted = delete_secret(
            self.secret_name,
            self.name,
            self.secrets,
            self.prompter,
            force=self.force_delete_secret,
        )

    def _delete_stack(self) -> None:
        self.progress.start(FMT_DELETE_START.format(name=self.name, app=self.app_name))
        try:
            self.deployer.delete_pipeline(self.name)
        except Exception as e:
            self.progress.stop(
                failed(FMT_DELETE_FAILED.format(name=self.name, app=self.app_name, err=e))
            )
            raise
        self.progress.stop(succeeded(FMT_DELETE_COMPLETE.format(name=self.name, app=self.app_name)))
        self.deleted = True
