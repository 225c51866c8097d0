"""
App delete use case — tear down everything an application owns.

Teardown is a fixed chain of ten steps. Each step delegates the actual
deletion to an executor built by an injected provider, so this module
only decides ORDER:

    services → jobs → list environments → orphan tasks → environments
    → empty regional buckets → pipeline → application stack
    → configuration record → workspace summary file

The first failing step stops the chain. Nothing is rolled back:
resources removed by earlier steps stay removed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from appctl.adapters.base import (
    BucketEmptier,
    ConfigStore,
    Progress,
    Prompter,
    StackDeployer,
    WorkspaceReader,
)
from appctl.core.engine.executor import (
    AskExecutor,
    Command,
    Executor,
    Step,
    StepReport,
    failed,
    run_steps,
    succeeded,
)
from appctl.core.errors import (
    NO_APP_IN_WORKSPACE,
    OperationCancelledError,
    StepError,
    ValidationError,
)
from appctl.core.models.application import Environment

logger = logging.getLogger(__name__)

# Provider signatures
WorkloadExecutorProvider = Callable[[str], Executor]           # (app name)
TaskExecutorProvider = Callable[[str, str], Executor]          # (env name, task name)
EnvExecutorProvider = Callable[[str], AskExecutor]             # (env name)
BucketEmptierProvider = Callable[[str], BucketEmptier]         # (region)
PipelineCommandProvider = Callable[[], Command]

SUMMARY_FILE_NAME = ".workspace"

FMT_DELETE_APP_CONFIRM_PROMPT = "Are you sure you want to delete application {app}?"
DELETE_APP_CONFIRM_HELP = "This will delete your application and all its resources."
OPERATION_CANCELLED = "operation cancelled"

CLEAN_RESOURCES_START = "Cleaning up deployment resources."
CLEAN_RESOURCES_STOP = "Cleaned up deployment resources."
DELETE_APP_RESOURCES_START = "Deleting application resources."
DELETE_APP_RESOURCES_STOP = "Deleted application resources."
DELETE_APP_CONFIG_START = "Deleting application configuration."
DELETE_APP_CONFIG_STOP = "Deleted application configuration."
FMT_DELETE_WS_START = "Deleting local {file} file."
FMT_DELETE_WS_STOP = "Deleted local {file} file."


class DeleteApp(Command):
    """Delete an application and every resource it owns.

    Args:
        name: Application to delete ("" = not in a workspace).
        skip_confirmation: Don't ask before deleting.
        store: Configuration store.
        ws: Workspace writer (summary file removal).
        deployer: Stack deployer.
        prompter: Interactive prompts.
        progress: Progress indicator.
        svc_delete_executor: Builds the service-deletion executor for an app.
        job_delete_executor: Builds the job-deletion executor for an app.
        task_delete_executor: Builds a task-deletion executor for (env, task).
        env_delete_executor: Builds an environment-deletion executor.
        bucket_emptier: Builds a bucket emptier for a region.
        delete_pipeline_runner: Builds the pipeline-deletion command.
        summary_file_name: Logical name of the workspace summary file.
    """

    def __init__(
        self,
        *,
        name: str,
        store: ConfigStore,
        ws: WorkspaceReader,
        deployer: StackDeployer,
        prompter: Prompter,
        progress: Progress,
        svc_delete_executor: WorkloadExecutorProvider,
        job_delete_executor: WorkloadExecutorProvider,
        task_delete_executor: TaskExecutorProvider,
        env_delete_executor: EnvExecutorProvider,
        bucket_emptier: BucketEmptierProvider,
        delete_pipeline_runner: PipelineCommandProvider,
        skip_confirmation: bool = False,
        summary_file_name: str = SUMMARY_FILE_NAME,
    ):
        self.name = name
        self.skip_confirmation = skip_confirmation
        self.store = store
        self.ws = ws
        self.deployer = deployer
        self.prompter = prompter
        self.progress = progress
        self.svc_delete_executor = svc_delete_executor
        self.job_delete_executor = job_delete_executor
        self.task_delete_executor = task_delete_executor
        self.env_delete_executor = env_delete_executor
        self.bucket_emptier = bucket_emptier
        self.delete_pipeline_runner = delete_pipeline_runner
        self.summary_file_name = summary_file_name

        self.report = StepReport()
        self._envs: list[Environment] = []

    # ── Command protocol ────────────────────────────────────────

    def validate(self) -> None:
        if not self.name:
            raise ValidationError(NO_APP_IN_WORKSPACE)

    def ask(self) -> None:
        if self.skip_confirmation:
            return
        try:
            confirmed = self.prompter.confirm(
                FMT_DELETE_APP_CONFIRM_PROMPT.format(app=self.name),
                DELETE_APP_CONFIRM_HELP,
                final_message=f"Delete application {self.name}",
            )
        except Exception as e:
            raise StepError("confirm app deletion", e) from e
        if not confirmed:
            raise OperationCancelledError(OPERATION_CANCELLED)

    def execute(self) -> StepReport:
        """Run the ten teardown steps in order."""
        return run_steps(
            [
                Step("delete-services", self._delete_services),
                Step("delete-jobs", self._delete_jobs),
                Step("list-environments", self._list_environments),
                Step("delete-tasks", self._delete_tasks),
                Step("delete-environments", self._delete_environments),
                Step("empty-buckets", self._empty_buckets),
                Step("delete-pipeline", self._delete_pipeline),
                Step("delete-app-resources", self._delete_app_resources),
                Step("delete-app-config", self._delete_app_config),
                Step("delete-workspace-file", self._delete_workspace_file),
            ],
            workflow="app-delete",
            report=self.report,
        )

    # ── Steps ───────────────────────────────────────────────────

    def _delete_services(self) -> None:
        try:
            services = self.store.list_services(self.name)
        except Exception as e:
            raise StepError(f"list services for application {self.name}", e) from e
        if not services:
            return
        self._run_executor("service", lambda: self.svc_delete_executor(self.name))

    def _delete_jobs(self) -> None:
        try:
            jobs = self.store.list_jobs(self.name)
        except Exception as e:
            raise StepError(f"list jobs for application {self.name}", e) from e
        if not jobs:
            return
        self._run_executor("job", lambda: self.job_delete_executor(self.name))

    def _list_environments(self) -> None:
        try:
            self._envs = self.store.list_environments(self.name)
        except Exception as e:
            raise StepError(f"list environments for application {self.name}", e) from e

    def _delete_tasks(self) -> None:
        for env in self._envs:
            try:
                tasks = self.deployer.list_task_stacks(self.name, env.name)
            except Exception as e:
                raise StepError(f"list tasks for environment {env.name}", e) from e
            for task in tasks:
                logger.debug("Deleting task %s in environment %s", task.task_name, env.name)
                self._run_executor(
                    "task",
                    lambda env_name=env.name, task_name=task.task_name: self.task_delete_executor(
                        env_name, task_name
                    ),
                )

    def _delete_environments(self) -> None:
        for env in self._envs:
            try:
                cmd = self.env_delete_executor(env.name)
            except Exception as e:
                raise StepError(f"create environment delete command for {env.name}", e) from e
            try:
                cmd.ask()
            except Exception as e:
                raise StepError("ask environment delete", e) from e
            try:
                cmd.execute()
            except Exception as e:
                raise StepError("execute environment delete", e) from e

    def _empty_buckets(self) -> None:
        try:
            app = self.store.get_application(self.name)
        except Exception as e:
            raise StepError(f"get application {self.name}", e) from e
        try:
            resources = self.deployer.get_regional_app_resources(app)
        except Exception as e:
            raise StepError(f"get regional application resources for {app.name}", e) from e

        self.progress.start(CLEAN_RESOURCES_START)
        for resource in resources:
            try:
                self.bucket_emptier(resource.region).empty_bucket(resource.s3_bucket)
            except Exception as e:
                self.progress.stop(failed(CLEAN_RESOURCES_STOP))
                raise StepError(f"empty bucket {resource.s3_bucket}", e) from e
        self.progress.stop(succeeded(CLEAN_RESOURCES_STOP))

    def _delete_pipeline(self) -> None:
        try:
            cmd = self.delete_pipeline_runner()
            cmd.validate()
            cmd.ask()
            cmd.execute()
        except Exception as e:
            raise StepError("delete pipeline", e) from e

    def _delete_app_resources(self) -> None:
        self.progress.start(DELETE_APP_RESOURCES_START)
        try:
            self.deployer.delete_app(self.name)
        except Exception as e:
            self.progress.stop(failed(DELETE_APP_RESOURCES_STOP))
            raise StepError("delete application stack", e) from e
        self.progress.stop(succeeded(DELETE_APP_RESOURCES_STOP))

    def _delete_app_config(self) -> None:
        self.progress.start(DELETE_APP_CONFIG_START)
        try:
            self.store.delete_application(self.name)
        except Exception as e:
            self.progress.stop(failed(DELETE_APP_CONFIG_STOP))
            raise StepError("delete application configuration", e) from e
        self.progress.stop(succeeded(DELETE_APP_CONFIG_STOP))

    def _delete_workspace_file(self) -> None:
        self.progress.start(FMT_DELETE_WS_START.format(file=self.summary_file_name))
        try:
            self.ws.delete_workspace_file()
        except Exception as e:
            self.progress.stop(failed(FMT_DELETE_WS_STOP.format(file=self.summary_file_name)))
            raise StepError("delete workspace file", e) from e
        self.progress.stop(succeeded(FMT_DELETE_WS_STOP.format(file=self.summary_file_name)))

    # ── Helpers ─────────────────────────────────────────────────

    def _run_executor(self, kind: str, build: Callable[[], Executor]) -> None:
        try:
            executor = build()
        except Exception as e:
            raise StepError(f"create {kind} delete command", e) from e
        try:
            executor.execute()
        except Exception as e:
            raise StepError(f"execute {kind} delete", e) from e
