"""
Resource deleters — the sub-executors application teardown hands off to.

Each class removes one kind of resource: the deployed stacks first, then
the configuration record that points at them.
"""

from __future__ import annotations

import logging

from appctl.adapters.base import ConfigStore, Progress, Prompter, StackDeployer
from appctl.core.engine.executor import AskExecutor, Executor, failed, succeeded
from appctl.core.errors import OperationCancelledError, StepError
from appctl.core.models.application import JOB_KIND, SERVICE_KIND, Environment
from appctl.core.models.resources import TASK_STACK_PREFIX, TaskStackInfo

logger = logging.getLogger(__name__)


class DeleteWorkloads(Executor):
    """Delete every workload of one kind from every environment of an app."""

    def __init__(
        self,
        *,
        app: str,
        kind: str,
        store: ConfigStore,
        deployer: StackDeployer,
        progress: Progress,
    ):
        if kind not in (SERVICE_KIND, JOB_KIND):
            raise ValueError(f"unknown workload kind: {kind}")
        self.app = app
        self.kind = kind
        self.store = store
        self.deployer = deployer
        self.progress = progress

    def execute(self) -> None:
        lister = self.store.list_services if self.kind == SERVICE_KIND else self.store.list_jobs
        try:
            workloads = lister(self.app)
        except Exception as e:
            raise StepError(f"list {self.kind}s", e) from e
        try:
            envs = self.store.list_environments(self.app)
        except Exception as e:
            raise StepError("list environments", e) from e

        for workload in workloads:
            label = f"Deleting {self.kind} {workload.name} from application {self.app}."
            self.progress.start(label)
            try:
                for env in envs:
                    self.deployer.delete_workload(self.app, env.name, workload.name)
                self.store.delete_workload(self.app, workload.name)
            except Exception as e:
                self.progress.stop(failed(label))
                raise StepError(f"delete {self.kind} {workload.name}", e) from e
            self.progress.stop(
                succeeded(f"Deleted {self.kind} {workload.name} from application {self.app}.")
            )


class DeleteTask(Executor):
    """Delete one standalone task stack."""

    def __init__(
        self,
        *,
        app: str,
        env: str,
        name: str,
        deployer: StackDeployer,
        progress: Progress,
    ):
        self.task = TaskStackInfo(stack_name=f"{TASK_STACK_PREFIX}{name}", app=app, env=env)
        self.deployer = deployer
        self.progress = progress

    def execute(self) -> None:
        label = f"Deleting task {self.task.task_name} from environment {self.task.env}."
        self.progress.start(label)
        try:
            self.deployer.delete_task(self.task)
        except Exception as e:
            self.progress.stop(failed(label))
            raise StepError(f"delete task {self.task.task_name}", e) from e
        self.progress.stop(
            succeeded(f"Deleted task {self.task.task_name} from environment {self.task.env}.")
        )


class DeleteEnvironment(AskExecutor):
    """Delete an environment stack and its record.

    ``ask`` loads the environment (and, unless ``skip_confirmation``,
    asks before deleting it); ``execute`` removes it.
    """

    def __init__(
        self,
        *,
        app: str,
        name: str,
        store: ConfigStore,
        deployer: StackDeployer,
        prompter: Prompter,
        progress: Progress,
        skip_confirmation: bool = True,
    ):
        self.app = app
        self.name = name
        self.store = store
        self.deployer = deployer
        self.prompter = prompter
        self.progress = progress
        self.skip_confirmation = skip_confirmation
        self.env: Environment | None = None

    def ask(self) -> None:
        try:
            self.env = self.store.get_environment(self.app, self.name)
        except Exception as e:
            raise StepError(f"get environment {self.name} configuration", e) from e
        if self.skip_confirmation:
            return

        try:
            confirmed = self.prompter.confirm(
                f"Are you sure you want to delete environment {self.name} from application {self.app}?",
                "This will delete the environment and its infrastructure.",
            )
        except Exception as e:
            raise StepError("environment delete confirmation prompt", e) from e
        if not confirmed:
            raise OperationCancelledError(f"environment {self.name} delete cancelled")

    def execute(self) -> None:
        label = f"Deleting environment {self.name}."
        self.progress.start(label)
        try:
            self.deployer.delete_environment(self.app, self.name)
            self.store.delete_environment(self.app, self.name)
        except Exception as e:
            self.progress.stop(failed(label))
            raise StepError(f"delete environment {self.name}", e) from e
        self.progress.stop(succeeded(f"Deleted environment {self.name}."))
        logger.debug("Environment %s removed from application %s", self.name, self.app)
